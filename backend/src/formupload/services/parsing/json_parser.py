"""application/json bodies: each top-level key becomes a field."""

import json

from formupload.core.exceptions import MalformedBodyError
from formupload.services.parsing.base import BodyParser, ContentKind


class JsonBodyParser(BodyParser):
    """Buffers the body; nothing is emitted until ``end()``."""

    kind = ContentKind.JSON

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._buffer = bytearray()

    def write(self, chunk: bytes) -> int:
        self.sink.field_data(len(chunk))
        self._buffer += chunk
        return len(chunk)

    def end(self) -> None:
        if not self._buffer.strip():
            raise MalformedBodyError("Empty JSON body, expected an object")
        try:
            data = json.loads(self.decode(bytes(self._buffer)))
        except json.JSONDecodeError as e:
            raise MalformedBodyError(
                f"Invalid JSON body: {e.msg}",
                details={"line": e.lineno, "column": e.colno},
            ) from e
        if not isinstance(data, dict):
            raise MalformedBodyError(
                "JSON body must be an object",
                details={"got": type(data).__name__},
            )
        for name, value in data.items():
            self.sink.add_field(name, value)
        self.sink.body_done()
