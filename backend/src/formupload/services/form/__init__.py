"""Incoming form parsing: events, file descriptors, IncomingForm."""

from formupload.services.form.events import EventEmitter
from formupload.services.form.file import UploadedFile, clean_filename, upload_path
from formupload.services.form.incoming import FormCallback, FormOptions, IncomingForm

__all__ = [
    "EventEmitter",
    "FormCallback",
    "FormOptions",
    "IncomingForm",
    "UploadedFile",
    "clean_filename",
    "upload_path",
]
