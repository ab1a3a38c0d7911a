from __future__ import annotations

import hashlib
import re

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def compute_file_sha256(path, chunk_size: int = 64 * 1024) -> str:
    digest = hashlib.sha256()
    with open(path, "rb") as fh:
        for chunk in iter(lambda: fh.read(chunk_size), b""):
            digest.update(chunk)
    return format_sha256(digest)


def format_sha256(digest) -> str:
    return "sha256:" + digest.hexdigest()


def safe_filename(value: str) -> str:
    """Keep only the basename and replace characters that are awkward on disk."""
    name = (value or "").replace("\\", "/").rsplit("/", 1)[-1].strip()
    name = _UNSAFE_FILENAME_CHARS.sub("_", name).strip("._")
    return name or "upload.csv"
