"""Tests for uploaded file descriptors and upload paths."""

import hashlib

import pytest

from formupload.core.exceptions import ValidationError
from formupload.services.form.file import (
    UploadedFile,
    clean_filename,
    file_extension,
    upload_path,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("report.txt", "report.txt"),
        ("C:\\Users\\me\\report.txt", "report.txt"),
        ("/etc/passwd", "passwd"),
        ("../../x.png", "x.png"),
        ("caf&#233;.txt", "café.txt"),
        ("", ""),
        ("&#47;..&#47;..&#47;escaped.txt", "escaped.txt"),
        ("dir&#92;inner.txt", "inner.txt"),
        ("..", ""),
        ("a&#99999999;.txt", "a&#99999999;.txt"),
        ("a&#0;b.txt", "a&#0;b.txt"),
        ("a&#55296;.txt", "a&#55296;.txt"),
        ("nul\x00byte.txt", "nulbyte.txt"),
    ],
)
def test_clean_filename(raw, expected):
    assert clean_filename(raw) == expected


def test_file_extension():
    assert file_extension("photo.JPG") == ".JPG"
    assert file_extension("archive.tar.gz") == ".gz"
    assert file_extension("README") == ""
    assert file_extension(".bashrc") == ""


def test_upload_path(upload_dir):
    p = upload_path(upload_dir, "photo.png", keep_extensions=False)
    assert p.parent == upload_dir
    assert p.name.startswith("upload_")
    assert len(p.name) == len("upload_") + 32
    assert upload_path(upload_dir, "photo.png", keep_extensions=True).suffix == ".png"
    assert upload_path(upload_dir, "photo.png", True) != upload_path(upload_dir, "photo.png", True)


def test_write_and_end(upload_dir):
    f = UploadedFile(path=upload_dir / "a.bin", name="a.bin", type="text/plain", hash_algorithm="sha256")
    f.open()
    f.write(b"hello ")
    f.write(b"world")
    f.end()
    assert f.size == 11
    assert f.path.read_bytes() == b"hello world"
    assert f.hash == hashlib.sha256(b"hello world").hexdigest()
    assert f.last_modified_date is not None
    assert not f.is_open
    d = f.to_dict()
    assert d["size"] == 11
    assert d["name"] == "a.bin"
    assert d["type"] == "text/plain"


def test_empty_file_still_created(upload_dir):
    f = UploadedFile(path=upload_dir / "empty")
    f.end()
    assert f.path.exists()
    assert f.size == 0
    assert f.hash is None


def test_discard_removes_file(upload_dir):
    f = UploadedFile(path=upload_dir / "partial")
    f.write(b"abc")
    f.discard()
    assert not f.path.exists()
    # discarding twice is harmless
    f.discard()


def test_unknown_hash_algorithm(upload_dir):
    with pytest.raises(ValidationError):
        UploadedFile(path=upload_dir / "x", hash_algorithm="nope")
