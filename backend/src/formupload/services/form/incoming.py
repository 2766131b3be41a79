"""IncomingForm - parse a request body into fields and uploaded files.

Usage, completion-callback style::

    def done(err, fields, files):
        if err:
            raise err
        ...

    IncomingForm(FormOptions(upload_dir=path)).parse_stream(headers, chunks, done)

or notification style::

    form = IncomingForm(options)
    form.on("field", on_field).on("file", on_file).on("error", on_error)
    form.parse(headers)
    for chunk in body:
        form.write(chunk)
    form.end()

Events: progress(received, expected), field(name, value), fileBegin(name, file),
file(name, file), aborted(), error(exc), end(). ``error`` fires at most once
and ``end`` never follows it.
"""

import tempfile
from collections.abc import AsyncIterable, Callable, Iterable, Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from python_multipart.exceptions import FormParserError

from formupload.core.exceptions import (
    FormUploadError,
    LimitExceededError,
    MalformedBodyError,
    RequestAbortedError,
    ValidationError,
)
from formupload.core.logging import get_logger
from formupload.services.form.events import EventEmitter
from formupload.services.form.file import UploadedFile, clean_filename, upload_path
from formupload.services.parsing.base import BodyParser
from formupload.services.parsing.registry import get_body_parser

logger = get_logger("formupload.services.form.incoming")

FormCallback = Callable[[Exception | None, dict[str, Any], dict[str, Any]], None]

MiB = 1024 * 1024


@dataclass
class FormOptions:
    """Per-form parsing options. Zero for a max_* limit means unlimited."""

    upload_dir: Path = field(default_factory=lambda: Path(tempfile.gettempdir()))
    keep_extensions: bool = False
    encoding: str = "utf-8"
    max_fields: int = 1000
    max_fields_size: int = 20 * MiB
    max_file_size: int = 200 * MiB
    max_total_file_size: int | None = None
    hash_algorithm: str | None = None
    multiples: bool = False
    allow_empty_files: bool = True
    cleanup_on_error: bool = True

    def __post_init__(self) -> None:
        self.upload_dir = Path(self.upload_dir)


class IncomingForm(EventEmitter):
    """One request body. Not reusable across requests."""

    def __init__(self, options: FormOptions | None = None, **overrides: Any) -> None:
        super().__init__()
        options = options or FormOptions()
        self.options = replace(options, **overrides) if overrides else options
        self.headers: dict[str, str] = {}
        self.fields: dict[str, Any] = {}
        self.files: dict[str, UploadedFile | list[UploadedFile]] = {}
        self.bytes_received = 0
        self.bytes_expected: int | None = None
        self.error: Exception | None = None
        self.ended = False
        self._parser: BodyParser | None = None
        self._callback: FormCallback | None = None
        self._callback_done = False
        self._body_done = False
        self._field_count = 0
        self._fields_size = 0
        self._total_file_size = 0
        self._open_files: list[UploadedFile] = []
        self._written_files: list[UploadedFile] = []

    # ------------------------------------------------------------------ driving

    def parse(self, headers: Mapping[str, str], callback: FormCallback | None = None) -> "IncomingForm":
        """Prepare for a body with these request headers.

        With ``callback``, it is called exactly once as ``callback(err, fields, files)``.
        """
        self.headers = {k.lower(): v for k, v in headers.items()}
        self.bytes_expected = _content_length(self.headers.get("content-length"))
        if callback is not None:
            self._callback = callback
            self.on("error", self._complete)
            self.on("end", self._complete)
        try:
            self._parser = get_body_parser(self.headers, self, self.options.encoding)
        except FormUploadError as e:
            self._error(e)
        return self

    def write(self, chunk: bytes) -> int:
        """Feed the next piece of the body. Ignored once the form errored or ended."""
        if self.error is not None or self.ended:
            return 0
        if self._parser is None:
            raise RuntimeError("IncomingForm.parse() must be called before write()")
        self.bytes_received += len(chunk)
        self.emit("progress", self.bytes_received, self.bytes_expected)
        if self.bytes_expected is not None and self.bytes_received > self.bytes_expected:
            self._error(
                MalformedBodyError(
                    f"Request body larger than Content-Length ({self.bytes_expected} bytes)",
                    details={"received": self.bytes_received, "expected": self.bytes_expected},
                )
            )
            return 0
        return self._guard(self._parser.write, chunk) or 0

    def end(self) -> None:
        """The body is complete."""
        if self.error is not None or self.ended:
            return
        if self._parser is None:
            raise RuntimeError("IncomingForm.parse() must be called before end()")
        if self.bytes_expected is not None and self.bytes_received < self.bytes_expected:
            self._error(
                MalformedBodyError(
                    f"Request body shorter than Content-Length ({self.bytes_expected} bytes)",
                    details={"received": self.bytes_received, "expected": self.bytes_expected},
                )
            )
            return
        self._guard(self._parser.end)

    def abort(self) -> None:
        """Client disconnected mid-body."""
        if self.error is not None or self.ended:
            return
        logger.info("Request aborted after %d bytes", self.bytes_received)
        self.emit("aborted")
        self._error(RequestAbortedError("Request aborted", details={"received": self.bytes_received}))

    def parse_stream(
        self,
        headers: Mapping[str, str],
        chunks: Iterable[bytes],
        callback: FormCallback | None = None,
    ) -> "IncomingForm":
        self.parse(headers, callback)
        for chunk in chunks:
            if self.error is not None:
                break
            self.write(chunk)
        self.end()
        return self

    async def parse_async(
        self,
        headers: Mapping[str, str],
        stream: AsyncIterable[bytes],
        callback: FormCallback | None = None,
    ) -> "IncomingForm":
        self.parse(headers, callback)
        async for chunk in stream:
            if self.error is not None:
                break
            self.write(chunk)
        self.end()
        return self

    # -------------------------------------------------------- parser callbacks

    def field_data(self, size: int) -> None:
        self._fields_size += size
        limit = self.options.max_fields_size
        if limit and self._fields_size > limit:
            raise LimitExceededError(
                f"maxFieldsSize ({limit} bytes) exceeded, received {self._fields_size} bytes of field data",
                details={"limit": limit, "received": self._fields_size},
            )

    def add_field(self, name: str, value: Any) -> None:
        self._field_count += 1
        limit = self.options.max_fields
        if limit and self._field_count > limit:
            raise LimitExceededError(f"maxFields ({limit}) exceeded", details={"limit": limit})
        self._store(self.fields, name, value)
        self.emit("field", name, value)

    def begin_file(self, field_name: str, filename: str, content_type: str) -> UploadedFile | None:
        name = clean_filename(filename)
        if not name:
            # <input type=file> submitted with nothing selected
            logger.debug("Skipping file part %r with empty filename", field_name)
            return None
        file = UploadedFile(
            path=upload_path(self.options.upload_dir, name, self.options.keep_extensions),
            name=name,
            type=content_type,
            field_name=field_name,
            hash_algorithm=self.options.hash_algorithm,
        )
        self.emit("fileBegin", field_name, file)
        file.open()
        self._open_files.append(file)
        return file

    def file_data(self, file: UploadedFile, chunk: bytes) -> None:
        limit = self.options.max_file_size
        if limit and file.size + len(chunk) > limit:
            raise LimitExceededError(
                f"maxFileSize ({limit} bytes) exceeded, received {file.size + len(chunk)} bytes of file data",
                details={"limit": limit, "field": file.field_name, "filename": file.name},
            )
        self._total_file_size += len(chunk)
        total_limit = self.options.max_total_file_size
        if total_limit and self._total_file_size > total_limit:
            raise LimitExceededError(
                f"maxTotalFileSize ({total_limit} bytes) exceeded, received {self._total_file_size} bytes of file data",
                details={"limit": total_limit, "received": self._total_file_size},
            )
        file.write(chunk)

    def finish_file(self, file: UploadedFile) -> None:
        file.end()
        self._open_files.remove(file)
        self._written_files.append(file)
        if file.size == 0 and not self.options.allow_empty_files:
            raise ValidationError(
                "allow_empty_files is false, file size should be greater than 0",
                details={"field": file.field_name, "filename": file.name},
            )
        replaced = self.files.get(file.field_name)
        if not self.options.multiples and isinstance(replaced, UploadedFile):
            # last part with this name wins; the earlier one is not reachable anymore
            replaced.discard()
            self._written_files.remove(replaced)
        self._store(self.files, file.field_name, file)
        self.emit("file", file.field_name, file)

    def body_done(self) -> None:
        self._body_done = True
        self._maybe_end()

    # ----------------------------------------------------------------- internal

    def _guard(self, fn: Callable[..., Any], *args: Any) -> Any:
        """Run a parser step, turning its failures into a form error."""
        try:
            return fn(*args)
        except FormUploadError as e:
            self._error(e)
        except FormParserError as e:
            self._error(MalformedBodyError(str(e) or type(e).__name__))
        return None

    def _maybe_end(self) -> None:
        if self.ended or self.error is not None or not self._body_done or self._open_files:
            return
        self.ended = True
        logger.info(
            "Form parsed: %d fields, %d files, %d bytes",
            self._field_count,
            len(self._written_files),
            self.bytes_received,
        )
        self.emit("end")

    def _error(self, exc: Exception) -> None:
        if self.error is not None or self.ended:
            return
        self.error = exc
        logger.info("Form parse failed after %d bytes: %s", self.bytes_received, exc)
        self._release_files()
        if self._parser is not None:
            self._parser.close()
        self.emit("error", exc)

    def _release_files(self) -> None:
        if self.options.cleanup_on_error:
            for f in self._open_files + self._written_files:
                f.discard()
        else:
            for f in self._open_files:
                f.end()
        self._open_files.clear()

    def _store(self, target: dict[str, Any], name: str, value: Any) -> None:
        if self.options.multiples and name in target:
            existing = target[name]
            if isinstance(existing, list):
                existing.append(value)
            else:
                target[name] = [existing, value]
            return
        target[name] = value

    def _complete(self, err: Exception | None = None) -> None:
        if self._callback_done:
            return
        self._callback_done = True
        self._callback(err, self.fields, self.files)


def _content_length(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        n = int(value)
    except ValueError:
        return None
    return n if n >= 0 else None
