"""Shared fixtures: upload directory, form options, multipart bodies, HTTP client."""

import pytest
from fastapi.testclient import TestClient

from formupload.config import Settings, get_settings
from formupload.main import app
from formupload.services.form.incoming import FormOptions

BOUNDARY = "----formuploadtestboundary"


def _encode_part(part: dict) -> bytes:
    disposition = f'form-data; name="{part["name"]}"'
    if part.get("filename") is not None:
        disposition += f'; filename="{part["filename"]}"'
    lines = [f"Content-Disposition: {disposition}"]
    if part.get("content_type"):
        lines.append(f"Content-Type: {part['content_type']}")
    for key, value in part.get("headers", {}).items():
        lines.append(f"{key}: {value}")
    value = part.get("value", b"")
    if isinstance(value, str):
        value = value.encode("utf-8")
    head = f"--{BOUNDARY}\r\n" + "\r\n".join(lines) + "\r\n\r\n"
    return head.encode("utf-8") + value + b"\r\n"


@pytest.fixture
def make_multipart():
    """Build (body, headers) for a list of part dicts: name, value, filename, content_type, headers."""

    def build(parts: list[dict], *, with_length: bool = True) -> tuple[bytes, dict[str, str]]:
        body = b"".join(_encode_part(p) for p in parts) + f"--{BOUNDARY}--\r\n".encode()
        headers = {"Content-Type": f"multipart/form-data; boundary={BOUNDARY}"}
        if with_length:
            headers["Content-Length"] = str(len(body))
        return body, headers

    return build


@pytest.fixture
def upload_dir(tmp_path):
    d = tmp_path / "uploads"
    d.mkdir()
    return d


@pytest.fixture
def options(upload_dir) -> FormOptions:
    return FormOptions(upload_dir=upload_dir)


@pytest.fixture
def settings(upload_dir) -> Settings:
    return Settings(upload_dir=upload_dir, log_level="DEBUG")


@pytest.fixture
def client(settings):
    app.dependency_overrides[get_settings] = lambda: settings
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
