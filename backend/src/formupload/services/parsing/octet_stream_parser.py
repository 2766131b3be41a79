"""application/octet-stream bodies: the whole body is one file."""

from typing import TYPE_CHECKING

from python_multipart.multipart import OctetStreamParser

from formupload.services.parsing.base import BodyParser, ContentKind

if TYPE_CHECKING:
    from formupload.services.form.file import UploadedFile

FILE_FIELD_NAME = "file"


class OctetStreamBodyParser(BodyParser):
    """Raw body upload. Filename comes from ``X-File-Name``, type from ``X-File-Type``."""

    kind = ContentKind.OCTET_STREAM

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._file: "UploadedFile | None" = None
        self._started = False
        self._parser = OctetStreamParser(
            callbacks={
                "on_start": self._on_start,
                "on_data": self._on_data,
                "on_end": self._on_end,
            },
        )

    def write(self, chunk: bytes) -> int:
        return self._parser.write(chunk)

    def end(self) -> None:
        if not self._started:
            # empty body never triggers on_start
            self._on_start()
        self._parser.finalize()

    def _on_start(self) -> None:
        self._started = True
        filename = self.headers.get("x-file-name") or FILE_FIELD_NAME
        content_type = self.headers.get("x-file-type") or ContentKind.OCTET_STREAM.value
        self._file = self.sink.begin_file(FILE_FIELD_NAME, filename, content_type)

    def _on_data(self, data: bytes, start: int, end: int) -> None:
        if self._file is not None:
            self.sink.file_data(self._file, data[start:end])

    def _on_end(self) -> None:
        if self._file is not None:
            self.sink.finish_file(self._file)
        self.sink.body_done()
