"""Tests for the HTTP layer: form page, upload routes, error responses."""

import asyncio
import json
from pathlib import Path

import pytest
from starlette.requests import Request

from formupload.api.v1.upload import upload, upload_with_events
from formupload.config import get_settings
from formupload.core.exceptions import RequestAbortedError
from formupload.main import form_upload_error_handler


def test_upload_form_page(client):
    r = client.get("/")
    assert r.status_code == 200
    assert 'enctype="multipart/form-data"' in r.text
    assert 'action="/v1/upload"' in r.text
    assert 'type="file"' in r.text


def test_health(client, upload_dir):
    r = client.get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "healthy"
    assert body["upload_dir"] == str(upload_dir)


def test_upload_callback_style(client, upload_dir):
    r = client.post(
        "/v1/upload",
        data={"title": "My file"},
        files={"upload": ("notes.txt", b"hello world", "text/plain")},
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["fields"] == {"title": "My file"}
    f = body["files"]["upload"]
    assert f["name"] == "notes.txt"
    assert f["type"] == "text/plain"
    assert f["size"] == 11
    assert f["path"].startswith(str(upload_dir))
    with open(f["path"], "rb") as fh:
        assert fh.read() == b"hello world"


def test_upload_with_events(client, upload_dir):
    r = client.post(
        "/v1/upload/events",
        data={"title": "Events"},
        files={"upload": ("a.csv", b"a,b\n1,2\n", "text/csv")},
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert [e["event"] for e in body["events"]] == ["field", "fileBegin", "file", "end"]
    file_event = body["events"][2]
    assert file_event["name"] == "upload"
    assert file_event["file"]["size"] == 8
    stored = body["files"]["upload"]["path"]
    assert stored.endswith("_a.csv")
    assert stored.startswith(str(upload_dir))


def test_urlencoded_upload(client):
    r = client.post("/v1/upload", data={"q": "a b", "lang": "de"})
    assert r.status_code == 200
    assert r.json() == {"fields": {"q": "a b", "lang": "de"}, "files": {}}


def test_unsupported_content_type(client):
    r = client.post("/v1/upload", content=b"plain", headers={"Content-Type": "text/plain"})
    assert r.status_code == 415
    body = r.json()
    assert "content-type" in body["detail"]
    assert body["error"] == "UnsupportedContentTypeError"
    assert body["trace_id"]


def test_file_too_large(client, settings, upload_dir):
    client.app.dependency_overrides[get_settings] = lambda: settings.model_copy(update={"max_file_size": 4})
    r = client.post("/v1/upload", files={"upload": ("big.bin", b"0123456789", "application/octet-stream")})
    assert r.status_code == 413
    assert "maxFileSize" in r.json()["detail"]
    assert list(upload_dir.iterdir()) == []


def test_events_route_reports_errors(client, settings):
    client.app.dependency_overrides[get_settings] = lambda: settings.model_copy(update={"max_fields": 1})
    r = client.post("/v1/upload/events", data={"a": "1", "b": "2"})
    assert r.status_code == 413
    assert r.json()["error"] == "LimitExceededError"


def test_trace_id_is_echoed(client):
    r = client.get("/health", headers={"X-Trace-Id": "trace-123"})
    assert r.headers["X-Trace-Id"] == "trace-123"


def test_trace_id_in_error_body(client):
    r = client.post(
        "/v1/upload",
        content=b"{",
        headers={"Content-Type": "application/json", "X-Trace-Id": "abc"},
    )
    assert r.status_code == 400
    assert r.json()["trace_id"] == "abc"


def test_events_route_keeps_encoded_separators_inside_upload_dir(client, upload_dir):
    r = client.post(
        "/v1/upload/events",
        files={"upload": ("&#47;..&#47;..&#47;escaped.txt", b"x", "text/plain")},
    )
    assert r.status_code == 200, r.text
    f = r.json()["files"]["upload"]
    assert f["name"] == "escaped.txt"
    stored = Path(f["path"])
    assert stored.parent == upload_dir
    assert stored.read_bytes() == b"x"
    assert [p.name for p in upload_dir.iterdir()] == [stored.name]


def test_out_of_range_entity_in_filename(client):
    r = client.post("/v1/upload", files={"upload": ("a&#99999999;.txt", b"x", "text/plain")})
    assert r.status_code == 200, r.text
    assert r.json()["files"]["upload"]["name"] == "a&#99999999;.txt"


def test_unknown_charset(client):
    r = client.post(
        "/v1/upload",
        content=b"a=1",
        headers={"Content-Type": "application/x-www-form-urlencoded; charset=bogus"},
    )
    assert r.status_code == 415
    assert r.json()["error"] == "UnsupportedContentTypeError"


def _disconnecting_request(body: bytes, headers: dict[str, str]) -> Request:
    """A request whose client goes away after sending ``body``."""
    messages = [
        {"type": "http.request", "body": body, "more_body": True},
        {"type": "http.disconnect"},
    ]

    async def receive():
        return messages.pop(0) if len(messages) > 1 else messages[0]

    scope = {
        "type": "http",
        "method": "POST",
        "path": "/v1/upload",
        "query_string": b"",
        "headers": [(k.lower().encode(), v.encode()) for k, v in headers.items()],
    }
    return Request(scope, receive)


@pytest.mark.parametrize("route", [upload, upload_with_events])
def test_client_disconnect_aborts_upload(route, options, make_multipart):
    body, headers = make_multipart(
        [
            {"name": "title", "value": "half"},
            {"name": "upload", "filename": "big.bin", "value": b"0123456789" * 100},
        ],
        with_length=False,
    )
    request = _disconnecting_request(body[: len(body) // 2], headers)

    with pytest.raises(RequestAbortedError) as excinfo:
        asyncio.run(route(request, options))
    assert list(options.upload_dir.iterdir()) == []

    response = form_upload_error_handler(request, excinfo.value)
    assert response.status_code == 400
    assert json.loads(response.body)["error"] == "RequestAbortedError"
