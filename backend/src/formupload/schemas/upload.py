"""Upload request/response schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from formupload.services.form.file import UploadedFile


class UploadedFileSchema(BaseModel):
    """Public view of a stored upload."""

    size: int
    path: str
    name: str | None
    type: str
    field_name: str | None = None
    hash: str | None = None
    last_modified_date: datetime | None = None

    @classmethod
    def from_file(cls, file: UploadedFile) -> "UploadedFileSchema":
        return cls(
            size=file.size,
            path=str(file.path),
            name=file.name,
            type=file.type,
            field_name=file.field_name,
            hash=file.hash,
            last_modified_date=file.last_modified_date,
        )


FileEntry = UploadedFileSchema | list[UploadedFileSchema]


def files_to_schema(files: dict[str, Any]) -> dict[str, FileEntry]:
    """Convert IncomingForm.files (single or list per name) to schemas."""
    out: dict[str, FileEntry] = {}
    for name, value in files.items():
        if isinstance(value, list):
            out[name] = [UploadedFileSchema.from_file(f) for f in value]
        else:
            out[name] = UploadedFileSchema.from_file(value)
    return out


class UploadResponse(BaseModel):
    fields: dict[str, Any] = Field(default_factory=dict)
    files: dict[str, FileEntry] = Field(default_factory=dict)


class UploadEvent(BaseModel):
    """One notification observed while the body was parsed."""

    event: str
    name: str | None = None
    value: Any = None
    file: UploadedFileSchema | None = None
    error: str | None = None


class EventsUploadResponse(UploadResponse):
    events: list[UploadEvent] = Field(default_factory=list)


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    upload_dir: str
