from __future__ import annotations

import hashlib
import logging
import os
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from stockdata.services.ingest.errors import TransportError
from stockdata.services.ingest.utils import format_sha256, safe_filename

logger = logging.getLogger(__name__)

CSV_ONLY_MESSAGE = "Error: CSV Only (.csv files only)"
NO_FILE_MESSAGE = "No file uploaded"
FILE_TOO_LARGE_MESSAGE = "File too large"


@dataclass(frozen=True)
class StoredUpload:
    path: Path
    original_filename: str
    size: int
    source_hash: str


def check_file_type(filename: str | None, content_type: str | None) -> None:
    """Both the extension and the declared mime type must name CSV (case-insensitive)."""
    if not filename:
        raise TransportError(NO_FILE_MESSAGE)
    extension = os.path.splitext(filename)[1].lower()
    mimetype = (content_type or "").lower()
    if "csv" not in extension or "csv" not in mimetype:
        raise TransportError(CSV_ONLY_MESSAGE)


def check_declared_size(declared_size: int | None, size_limit: int) -> None:
    if declared_size is not None and declared_size > size_limit:
        raise TransportError(FILE_TOO_LARGE_MESSAGE)


def store_upload(
    fileobj: BinaryIO,
    filename: str,
    *,
    upload_dir: str | Path,
    size_limit: int,
    chunk_size: int = 64 * 1024,
) -> StoredUpload:
    """
    Copy an upload to ``upload_dir`` chunk by chunk, hashing as it goes.

    Going over ``size_limit`` removes the partial file and raises TransportError.
    """
    target_dir = Path(upload_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    original = safe_filename(filename)
    target = target_dir / f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:12]}-{original}"

    digest = hashlib.sha256()
    size = 0
    # "xb" never truncates a file another upload already holds.
    out = open(target, "xb")
    try:
        with out:
            while True:
                chunk = fileobj.read(chunk_size)
                if not chunk:
                    break
                size += len(chunk)
                if size > size_limit:
                    raise TransportError(FILE_TOO_LARGE_MESSAGE)
                digest.update(chunk)
                out.write(chunk)
    except BaseException:
        target.unlink(missing_ok=True)
        raise

    logger.info("upload_stored path=%s size=%s", target, size)
    return StoredUpload(path=target, original_filename=filename, size=size, source_hash=format_sha256(digest))
