"""Body parsers - multipart, urlencoded, octet-stream, JSON."""

from formupload.services.parsing.base import BodyParser, ContentKind, FormSink
from formupload.services.parsing.json_parser import JsonBodyParser
from formupload.services.parsing.multipart_parser import MultipartBodyParser
from formupload.services.parsing.octet_stream_parser import OctetStreamBodyParser
from formupload.services.parsing.registry import get_body_parser, parse_content_type
from formupload.services.parsing.urlencoded_parser import UrlencodedBodyParser

__all__ = [
    "BodyParser",
    "ContentKind",
    "FormSink",
    "JsonBodyParser",
    "MultipartBodyParser",
    "OctetStreamBodyParser",
    "UrlencodedBodyParser",
    "get_body_parser",
    "parse_content_type",
]
