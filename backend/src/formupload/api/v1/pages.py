"""Unversioned endpoints: the upload form page and health check."""

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from formupload import __version__
from formupload.api.deps import SettingsDep
from formupload.schemas.upload import HealthResponse

router = APIRouter(tags=["pages"])

UPLOAD_FORM_HTML = """<!doctype html>
<html>
  <head>
    <meta charset="utf-8">
    <title>File upload</title>
  </head>
  <body>
    <h1>Upload files</h1>
    <form action="/v1/upload" enctype="multipart/form-data" method="post">
      <p><input type="text" name="title" placeholder="Title"></p>
      <p><input type="file" name="upload" multiple></p>
      <p><input type="submit" value="Upload"></p>
    </form>

    <h2>Upload with per-event log</h2>
    <form action="/v1/upload/events" enctype="multipart/form-data" method="post">
      <p><input type="text" name="title" placeholder="Title"></p>
      <p><input type="file" name="upload" multiple></p>
      <p><input type="submit" value="Upload"></p>
    </form>
  </body>
</html>
"""


@router.get("/", response_class=HTMLResponse)
def upload_form() -> str:
    """HTML form posting multipart/form-data to the upload routes."""
    return UPLOAD_FORM_HTML


@router.get("/health", response_model=HealthResponse)
def health(settings: SettingsDep) -> HealthResponse:
    return HealthResponse(
        status="healthy",
        service="formupload",
        version=__version__,
        upload_dir=str(settings.upload_dir),
    )
