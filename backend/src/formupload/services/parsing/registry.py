"""Pick a body parser from the request Content-Type."""

import codecs
from collections.abc import Mapping

from python_multipart.multipart import parse_options_header

from formupload.core.exceptions import UnsupportedContentTypeError
from formupload.services.parsing.base import BodyParser, ContentKind, FormSink
from formupload.services.parsing.json_parser import JsonBodyParser
from formupload.services.parsing.multipart_parser import MultipartBodyParser
from formupload.services.parsing.octet_stream_parser import OctetStreamBodyParser
from formupload.services.parsing.urlencoded_parser import UrlencodedBodyParser

_PARSERS: dict[str, type[BodyParser]] = {
    ContentKind.MULTIPART.value: MultipartBodyParser,
    ContentKind.URLENCODED.value: UrlencodedBodyParser,
    ContentKind.OCTET_STREAM.value: OctetStreamBodyParser,
    ContentKind.JSON.value: JsonBodyParser,
}


def parse_content_type(value: str | None) -> tuple[str, dict[str, str]]:
    """Split ``multipart/form-data; boundary=x`` into ("multipart/form-data", {"boundary": "x"})."""
    ctype, raw_params = parse_options_header(value)
    params = {k.decode("latin-1").lower(): v.decode("latin-1") for k, v in raw_params.items()}
    return ctype.decode("latin-1").strip().lower(), params


def get_body_parser(
    headers: Mapping[str, str],
    sink: FormSink,
    encoding: str = "utf-8",
) -> BodyParser:
    """Build the parser for this request. ``headers`` keys must be lower-case."""
    raw = headers.get("content-type")
    if not raw:
        raise UnsupportedContentTypeError("bad content-type header, no content-type")
    ctype, params = parse_content_type(raw)
    # application/vnd.api+json and friends
    if ctype.endswith("+json"):
        ctype = ContentKind.JSON.value
    cls = _PARSERS.get(ctype)
    if cls is None:
        raise UnsupportedContentTypeError(
            f"bad content-type header, unknown content-type: {ctype}",
            details={"content_type": ctype},
        )
    charset = params.get("charset") or encoding
    try:
        codecs.lookup(charset)
    except LookupError:
        raise UnsupportedContentTypeError(
            f"bad content-type header, unknown charset: {charset}",
            details={"content_type": ctype, "charset": charset},
        ) from None
    return cls(sink, headers, params=params, encoding=charset)
