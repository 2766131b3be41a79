"""Central configuration for the form upload service."""

import tempfile
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from formupload.services.form.incoming import FormOptions


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="FORMUPLOAD_",
        env_file=str(Path(__file__).resolve().parents[2] / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Uploads
    upload_dir: Path = Field(
        default=Path(tempfile.gettempdir()) / "formupload",
        description="Directory uploaded files are written to",
    )
    keep_extensions: bool = Field(
        default=False,
        description="Append the client file extension to stored upload names",
    )
    encoding: str = Field(default="utf-8", description="Default charset for field values")
    hash_algorithm: str | None = Field(
        default=None,
        description="hashlib algorithm for uploaded files: md5, sha1, sha256 (off when unset)",
    )
    multiples: bool = Field(
        default=False,
        description="Collect repeated field/file names into lists instead of keeping the last",
    )
    allow_empty_files: bool = Field(default=True)
    cleanup_on_error: bool = Field(
        default=True,
        description="Delete files written by a request that fails or is aborted",
    )

    # Limits (0 = unlimited)
    max_fields: int = Field(default=1000, ge=0)
    max_fields_size: int = Field(
        default=20 * 1024 * 1024,
        ge=0,
        description="Total bytes of non-file field data per request",
    )
    max_file_size: int = Field(
        default=200 * 1024 * 1024,
        ge=0,
        description="Bytes per uploaded file",
    )
    max_total_file_size: int | None = Field(
        default=None,
        ge=0,
        description="Bytes across all files of one request",
    )

    # Logging
    log_level: str = Field(default="INFO", description="DEBUG, INFO, WARNING, ERROR")
    log_format: Literal["text", "json"] = Field(default="text")
    log_file_path: Path | None = Field(default=None, description="Also log to this file")

    def form_options(self, **overrides) -> FormOptions:
        """FormOptions for one request, built from these settings."""
        values = dict(
            upload_dir=self.upload_dir,
            keep_extensions=self.keep_extensions,
            encoding=self.encoding,
            max_fields=self.max_fields,
            max_fields_size=self.max_fields_size,
            max_file_size=self.max_file_size,
            max_total_file_size=self.max_total_file_size,
            hash_algorithm=self.hash_algorithm,
            multiples=self.multiples,
            allow_empty_files=self.allow_empty_files,
            cleanup_on_error=self.cleanup_on_error,
        )
        values.update(overrides)
        return FormOptions(**values)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
