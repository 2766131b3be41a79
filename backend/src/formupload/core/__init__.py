"""Core utilities: tracing, exceptions, logging."""

from formupload.core.exceptions import (
    FormUploadError,
    LimitExceededError,
    MalformedBodyError,
    RequestAbortedError,
    UnsupportedContentTypeError,
    ValidationError,
)
from formupload.core.logging import get_logger, setup_logging
from formupload.core.tracing import TRACE_HEADER, get_trace_id, set_trace_id

__all__ = [
    "FormUploadError",
    "LimitExceededError",
    "MalformedBodyError",
    "RequestAbortedError",
    "UnsupportedContentTypeError",
    "ValidationError",
    "get_logger",
    "setup_logging",
    "TRACE_HEADER",
    "get_trace_id",
    "set_trace_id",
]
