"""Body parser interface and the hooks parsers report into."""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from formupload.services.form.file import UploadedFile


class ContentKind(str, Enum):
    """Request body encodings a form can be parsed from."""

    MULTIPART = "multipart/form-data"
    URLENCODED = "application/x-www-form-urlencoded"
    OCTET_STREAM = "application/octet-stream"
    JSON = "application/json"


class FormSink(Protocol):
    """What a body parser reports to while it consumes bytes.

    Implemented by IncomingForm; limit checks raise from these hooks and
    propagate out of ``BodyParser.write``.
    """

    def field_data(self, size: int) -> None: ...

    def add_field(self, name: str, value: Any) -> None: ...

    def begin_file(
        self, field_name: str, filename: str, content_type: str
    ) -> "UploadedFile | None": ...

    def file_data(self, file: "UploadedFile", chunk: bytes) -> None: ...

    def finish_file(self, file: "UploadedFile") -> None: ...

    def body_done(self) -> None: ...


class BodyParser(ABC):
    """Incremental parser for one request body."""

    kind: ContentKind

    def __init__(
        self,
        sink: FormSink,
        headers: Mapping[str, str],
        params: dict[str, str] | None = None,
        encoding: str = "utf-8",
    ) -> None:
        self.sink = sink
        self.headers = headers
        self.params = params or {}
        self.encoding = encoding

    @abstractmethod
    def write(self, chunk: bytes) -> int:
        """Consume the next chunk of the body."""

    @abstractmethod
    def end(self) -> None:
        """The body is complete. Must call ``sink.body_done()`` or raise."""

    def close(self) -> None:
        """Release anything held open. Called after errors too."""

    def decode(self, raw: bytes) -> str:
        return raw.decode(self.encoding, errors="replace")
