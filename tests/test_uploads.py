import asyncio
import io
from pathlib import Path

import pytest
from fastapi import UploadFile

from core.exceptions import UploadRejectedError
from utils.uploads import check_extension, save_upload


def _upload(name, data):
    return UploadFile(file=io.BytesIO(data), filename=name)


def test_check_extension():
    assert check_extension("Plan.PDF", ["pdf"]) == "pdf"
    with pytest.raises(UploadRejectedError):
        check_extension("script.exe", ["pdf"])
    with pytest.raises(UploadRejectedError):
        check_extension(None, ["pdf"])


def test_save_upload_writes_file(upload_dir):
    path = asyncio.run(save_upload(_upload("notes.txt", b"hello"), upload_dir))
    stored = Path(path)
    assert stored.parent == upload_dir
    assert stored.suffix == ".txt"
    assert stored.read_bytes() == b"hello"


def test_oversized_upload_rejected_and_removed(upload_dir):
    with pytest.raises(UploadRejectedError):
        asyncio.run(save_upload(_upload("big.pdf", b"x" * 20), upload_dir, max_bytes=10))
    assert list(upload_dir.iterdir()) == []


class _BrokenUpload:
    """Upload that fails after the first chunk."""

    filename = "report.pdf"

    def __init__(self):
        self.calls = 0

    async def read(self, size):
        self.calls += 1
        if self.calls > 1:
            raise OSError("connection reset")
        return b"partial"


def test_failed_read_removes_partial_file(upload_dir):
    with pytest.raises(OSError):
        asyncio.run(save_upload(_BrokenUpload(), upload_dir))
    assert list(upload_dir.iterdir()) == []
