"""multipart/form-data bodies, tokenized by python-multipart."""

from typing import TYPE_CHECKING

from python_multipart.decoders import Base64Decoder, QuotedPrintableDecoder
from python_multipart.multipart import MultipartParser, parse_options_header

from formupload.core.exceptions import MalformedBodyError
from formupload.core.logging import get_logger
from formupload.services.parsing.base import BodyParser, ContentKind

if TYPE_CHECKING:
    from formupload.services.form.file import UploadedFile

logger = get_logger("formupload.services.parsing.multipart")

_PLAIN_ENCODINGS = (b"binary", b"8bit", b"7bit")


class _PartWriter:
    """Routes decoded part bytes to the current field buffer or file."""

    def __init__(self, owner: "MultipartBodyParser") -> None:
        self.owner = owner

    def write(self, data: bytes) -> int:
        self.owner._part_bytes(data)
        return len(data)

    def finalize(self) -> None:
        pass


class MultipartBodyParser(BodyParser):
    """One event per part: a field when the part has no filename, else a file."""

    kind = ContentKind.MULTIPART

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        boundary = self.params.get("boundary")
        if not boundary:
            raise MalformedBodyError("multipart/form-data without a boundary")
        self._header_name: list[bytes] = []
        self._header_value: list[bytes] = []
        self._part_headers: dict[bytes, bytes] = {}
        self._field_name: str | None = None
        self._field_value = bytearray()
        self._file: "UploadedFile | None" = None
        self._is_file = False
        self._writer = None
        self._complete = False
        self._parser = MultipartParser(
            boundary,
            callbacks={
                "on_part_begin": self._on_part_begin,
                "on_part_data": self._on_part_data,
                "on_part_end": self._on_part_end,
                "on_header_field": self._on_header_field,
                "on_header_value": self._on_header_value,
                "on_header_end": self._on_header_end,
                "on_headers_finished": self._on_headers_finished,
                "on_end": self._on_end,
            },
        )

    def write(self, chunk: bytes) -> int:
        return self._parser.write(chunk)

    def end(self) -> None:
        self._parser.finalize()
        if not self._complete:
            raise MalformedBodyError("MultipartParser.end(): stream ended unexpectedly")
        self.sink.body_done()

    # python-multipart callbacks

    def _on_part_begin(self) -> None:
        self._part_headers = {}
        self._field_name = None
        self._field_value = bytearray()
        self._file = None
        self._is_file = False

    def _on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_name.append(data[start:end])

    def _on_header_value(self, data: bytes, start: int, end: int) -> None:
        self._header_value.append(data[start:end])

    def _on_header_end(self) -> None:
        name = b"".join(self._header_name).strip().lower()
        self._part_headers[name] = b"".join(self._header_value).strip()
        del self._header_name[:]
        del self._header_value[:]

    def _on_headers_finished(self) -> None:
        _, options = parse_options_header(self._part_headers.get(b"content-disposition"))
        raw_name = options.get(b"name")
        if raw_name is None:
            raise MalformedBodyError("Part is missing a Content-Disposition name")
        self._field_name = self.decode(raw_name)

        raw_filename = options.get(b"filename")
        if raw_filename is not None:
            self._is_file = True
            content_type = self._part_headers.get(b"content-type", b"application/octet-stream")
            self._file = self.sink.begin_file(
                self._field_name,
                self.decode(raw_filename),
                content_type.decode("latin-1"),
            )

        cte = self._part_headers.get(b"content-transfer-encoding", b"7bit").lower()
        writer = _PartWriter(self)
        if cte in _PLAIN_ENCODINGS:
            self._writer = writer
        elif cte == b"base64":
            self._writer = Base64Decoder(writer)
        elif cte == b"quoted-printable":
            self._writer = QuotedPrintableDecoder(writer)
        else:
            logger.warning("Unknown Content-Transfer-Encoding %r, passing through", cte)
            self._writer = writer

    def _on_part_data(self, data: bytes, start: int, end: int) -> None:
        self._writer.write(data[start:end])

    def _on_part_end(self) -> None:
        self._writer.finalize()
        if self._is_file:
            if self._file is not None:
                self.sink.finish_file(self._file)
        else:
            self.sink.add_field(self._field_name, self.decode(bytes(self._field_value)))
        self._writer = None

    def _on_end(self) -> None:
        self._complete = True

    def _part_bytes(self, data: bytes) -> None:
        if not data:
            return
        if self._is_file:
            # dropped parts (empty filename) are drained without writing
            if self._file is not None:
                self.sink.file_data(self._file, data)
            return
        self.sink.field_data(len(data))
        self._field_value += data
