"""application/x-www-form-urlencoded bodies, tokenized by python-multipart."""

from urllib.parse import unquote_to_bytes

from python_multipart.multipart import QuerystringParser

from formupload.services.parsing.base import BodyParser, ContentKind


class UrlencodedBodyParser(BodyParser):
    """``a=1&b=two+words`` -> field("a", "1"), field("b", "two words")."""

    kind = ContentKind.URLENCODED

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._name: list[bytes] = []
        self._value: list[bytes] = []
        self._parser = QuerystringParser(
            callbacks={
                "on_field_start": self._on_field_start,
                "on_field_name": self._on_field_name,
                "on_field_data": self._on_field_data,
                "on_field_end": self._on_field_end,
                "on_end": self.sink.body_done,
            },
        )

    def write(self, chunk: bytes) -> int:
        return self._parser.write(chunk)

    def end(self) -> None:
        # flushes a trailing field, then fires on_end
        self._parser.finalize()

    def _unquote(self, raw: bytes) -> str:
        return self.decode(unquote_to_bytes(raw.replace(b"+", b" ")))

    def _on_field_start(self) -> None:
        del self._name[:]
        del self._value[:]

    def _on_field_name(self, data: bytes, start: int, end: int) -> None:
        self.sink.field_data(end - start)
        self._name.append(data[start:end])

    def _on_field_data(self, data: bytes, start: int, end: int) -> None:
        self.sink.field_data(end - start)
        self._value.append(data[start:end])

    def _on_field_end(self) -> None:
        name = self._unquote(b"".join(self._name))
        if name:
            self.sink.add_field(name, self._unquote(b"".join(self._value)))
