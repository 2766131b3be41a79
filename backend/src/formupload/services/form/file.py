"""Uploaded file descriptor: where a file part landed and what it contained."""

import hashlib
import os
import re
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import IO, Any

from formupload.core.exceptions import ValidationError

_ENTITY_RE = re.compile(r"&#(\d+);")
_EXTENSION_RE = re.compile(r"\.[A-Za-z0-9]+")


def clean_filename(raw: str) -> str:
    """Reduce a client-supplied filename to its basename.

    Browsers on Windows send full paths (``C:\\Users\\me\\a.txt``) and some
    encode non-ASCII as numeric HTML entities. Entities are decoded before the
    path is cut, so an encoded separator cannot survive into the result.
    Entities that are not printable code points are left as written.
    """
    decoded = _ENTITY_RE.sub(_decode_entity, raw)
    decoded = "".join(ch for ch in decoded if ord(ch) >= 32 and ord(ch) != 127)
    name = decoded.replace("\\", "/").rsplit("/", 1)[-1]
    return "" if name in (".", "..") else name


def _decode_entity(m: re.Match) -> str:
    code = int(m.group(1))
    if code < 32 or code == 127 or code > 0x10FFFF or 0xD800 <= code <= 0xDFFF:
        return m.group(0)
    return chr(code)


def file_extension(filename: str) -> str:
    """Last extension of ``filename`` including the dot, or "" when there is none."""
    m = _EXTENSION_RE.match(PurePosixPath(filename).suffix)
    return m.group(0) if m else ""


def upload_path(upload_dir: Path, filename: str | None, keep_extensions: bool) -> Path:
    """Random destination path for a new upload inside ``upload_dir``."""
    name = "upload_" + secrets.token_hex(16)
    if keep_extensions and filename:
        name += file_extension(filename)
    return upload_dir / name


@dataclass
class UploadedFile:
    """One file part written to disk.

    ``path`` may be changed by a ``fileBegin`` listener until the first byte
    is written.
    """

    path: Path
    name: str | None = None
    type: str = "application/octet-stream"
    field_name: str | None = None
    hash_algorithm: str | None = None
    size: int = 0
    hash: str | None = None
    last_modified_date: datetime | None = None
    _fh: IO[bytes] | None = field(default=None, repr=False, compare=False)
    _hasher: Any = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.path = Path(self.path)
        if self.hash_algorithm:
            try:
                self._hasher = hashlib.new(self.hash_algorithm)
            except ValueError as e:
                raise ValidationError(
                    f"Unsupported hash algorithm: {self.hash_algorithm}",
                    details={"hash_algorithm": self.hash_algorithm},
                ) from e

    @property
    def is_open(self) -> bool:
        return self._fh is not None

    def open(self) -> None:
        self.path = Path(self.path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._fh = open(self.path, "wb")

    def write(self, chunk: bytes) -> int:
        if self._fh is None:
            self.open()
        self._fh.write(chunk)
        if self._hasher is not None:
            self._hasher.update(chunk)
        self.size += len(chunk)
        return len(chunk)

    def end(self) -> None:
        if self._fh is None:
            # zero-length part: still leave an empty file behind
            self.open()
        self._fh.close()
        self._fh = None
        if self._hasher is not None:
            self.hash = self._hasher.hexdigest()
        self.last_modified_date = datetime.now(timezone.utc)

    def discard(self) -> None:
        """Close and remove whatever was written so far."""
        if self._fh is not None:
            self._fh.close()
            self._fh = None
        try:
            os.unlink(self.path)
        except FileNotFoundError:
            pass

    def to_dict(self) -> dict[str, Any]:
        return {
            "size": self.size,
            "path": str(self.path),
            "name": self.name,
            "type": self.type,
            "field_name": self.field_name,
            "hash": self.hash,
            "last_modified_date": (
                self.last_modified_date.isoformat() if self.last_modified_date else None
            ),
        }
