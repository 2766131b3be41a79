"""Upload endpoints: completion-callback and per-event styles."""

import uuid
from typing import Any

from fastapi import APIRouter, Request
from starlette.requests import ClientDisconnect

from formupload.api.deps import FormOptionsDep
from formupload.core.logging import get_logger
from formupload.schemas.upload import (
    EventsUploadResponse,
    UploadedFileSchema,
    UploadEvent,
    UploadResponse,
    files_to_schema,
)
from formupload.services.form.file import UploadedFile, clean_filename
from formupload.services.form.incoming import FormCallback, IncomingForm

router = APIRouter(prefix="/upload", tags=["upload"])
logger = get_logger("formupload.api.v1.upload")


async def receive_form(
    request: Request,
    form: IncomingForm,
    callback: FormCallback | None = None,
) -> IncomingForm:
    """Stream the request body into ``form``; a client disconnect aborts it."""
    form.parse(request.headers, callback)
    try:
        async for chunk in request.stream():
            if form.error is not None:
                break
            form.write(chunk)
    except ClientDisconnect:
        form.abort()
        return form
    form.end()
    return form


@router.post("", response_model=UploadResponse)
async def upload(request: Request, options: FormOptionsDep) -> UploadResponse:
    """Parse the whole form, then answer with its fields and files."""
    result: dict[str, Any] = {}

    def done(err: Exception | None, fields: dict[str, Any], files: dict[str, Any]) -> None:
        if err:
            raise err
        result["fields"] = fields
        result["files"] = files

    await receive_form(request, IncomingForm(options), done)
    logger.info(
        "Upload complete: %d fields, %d files",
        len(result["fields"]),
        len(result["files"]),
    )
    return UploadResponse(fields=result["fields"], files=files_to_schema(result["files"]))


@router.post("/events", response_model=EventsUploadResponse)
async def upload_with_events(request: Request, options: FormOptionsDep) -> EventsUploadResponse:
    """Subscribe to each notification and report them in arrival order."""
    form = IncomingForm(options)
    events: list[UploadEvent] = []
    failures: list[Exception] = []

    def on_field(name: str, value: Any) -> None:
        logger.debug("field %s", name)
        events.append(UploadEvent(event="field", name=name, value=value))

    def on_file_begin(name: str, file: UploadedFile) -> None:
        # keep the client's name, prefixed so concurrent uploads never collide
        safe_name = clean_filename(file.name or "") or "upload"
        file.path = options.upload_dir / f"{uuid.uuid4().hex}_{safe_name}"
        logger.debug("fileBegin %s -> %s", name, file.path)
        events.append(UploadEvent(event="fileBegin", name=name, file=UploadedFileSchema.from_file(file)))

    def on_file(name: str, file: UploadedFile) -> None:
        logger.info("Uploaded %s (%s, %d bytes) to %s", file.name, file.type, file.size, file.path)
        events.append(UploadEvent(event="file", name=name, file=UploadedFileSchema.from_file(file)))

    def on_aborted() -> None:
        logger.warning("Upload aborted by client after %d bytes", form.bytes_received)
        events.append(UploadEvent(event="aborted"))

    def on_error(err: Exception) -> None:
        logger.error("Upload failed: %s", err)
        events.append(UploadEvent(event="error", error=str(err)))
        failures.append(err)

    def on_end() -> None:
        logger.info("Upload done after %d bytes", form.bytes_received)
        events.append(UploadEvent(event="end"))

    (
        form.on("field", on_field)
        .on("fileBegin", on_file_begin)
        .on("file", on_file)
        .on("aborted", on_aborted)
        .on("error", on_error)
        .on("end", on_end)
    )
    await receive_form(request, form)
    if failures:
        raise failures[0]
    return EventsUploadResponse(
        events=events,
        fields=form.fields,
        files=files_to_schema(form.files),
    )
