"""Storage of uploaded safety document files.

Files are written under ``UPLOAD_DIR`` with a random name. Only the extension
and size are checked; contents are never inspected.
"""

import logging
import secrets
from pathlib import Path
from typing import Iterable, Optional

from fastapi import UploadFile

from config import ALLOWED_UPLOAD_EXTENSIONS, MAX_UPLOAD_BYTES, UPLOAD_DIR
from core.exceptions import UploadRejectedError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


def check_extension(filename: Optional[str], allowed: Iterable[str]) -> str:
    """Return the lower-cased extension of ``filename`` if it is allowed."""
    extension = Path(filename or "").suffix.lower().lstrip(".")
    if not extension or extension not in allowed:
        raise UploadRejectedError("Only document and image files are allowed")
    return extension


def discard_upload(path: str) -> None:
    """Remove a stored upload whose record was never created."""
    Path(path).unlink(missing_ok=True)
    logger.info("Discarded upload %s", path)


async def save_upload(
    upload: UploadFile,
    upload_dir: Path = UPLOAD_DIR,
    max_bytes: int = MAX_UPLOAD_BYTES,
) -> str:
    """Write an uploaded file to disk.

    Args:
        upload: The multipart file.
        upload_dir: Target directory, created if missing.
        max_bytes: Largest accepted file.

    Returns:
        Path of the stored file, as a string.

    Raises:
        UploadRejectedError: Bad extension or file too large.
    """
    extension = check_extension(upload.filename, ALLOWED_UPLOAD_EXTENSIONS)
    upload_dir.mkdir(parents=True, exist_ok=True)
    target = upload_dir / f"{secrets.token_hex(16)}.{extension}"

    written = 0
    try:
        with target.open("wb") as out:
            while True:
                chunk = await upload.read(CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > max_bytes:
                    break
                out.write(chunk)
    except Exception:
        discard_upload(str(target))
        raise

    if written > max_bytes:
        discard_upload(str(target))
        raise UploadRejectedError(f"File exceeds the {max_bytes} byte limit")

    logger.info("Stored upload %s as %s (%d bytes)", upload.filename, target, written)
    return str(target)
