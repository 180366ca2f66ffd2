"""Filesystem side of the gallery: uploaded photos, videos and thumbnails.

Rows in the ``gallery`` table reference files here by bare filename. The
directory is flat and every name is generated, so callers never get to
pick a path.
"""

from __future__ import annotations

import logging
import os
import re
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from fastapi import UploadFile

from app.core.errors import PayloadTooLarge

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024
_EXT_RE = re.compile(r"\.[a-z0-9]{1,10}")


@dataclass
class StoredFile:
    filename: str
    size: int


def safe_extension(original_name: Optional[str]) -> str:
    ext = os.path.splitext(original_name or "")[1].lower()
    return ext if _EXT_RE.fullmatch(ext) else ""


class MediaDirectory:
    def __init__(self, root: Path, chunk_size: int = CHUNK_SIZE):
        self.root = Path(root)
        self.chunk_size = chunk_size

    def ensure(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def generate_name(self, field: str, original_name: Optional[str]) -> str:
        # <field>-<epoch ms>-<random>.<ext>, e.g. photo-1735603200000-482913375.jpg
        stamp = int(time.time() * 1000)
        return f"{field}-{stamp}-{secrets.randbelow(10**9)}{safe_extension(original_name)}"

    def path_for(self, filename: str) -> Path:
        """Resolve ``filename`` inside the directory; reject anything that escapes it."""
        if not filename or os.path.basename(filename) != filename or filename in (".", ".."):
            raise ValueError(f"Invalid media filename: {filename!r}")
        return self.root / filename

    def exists(self, filename: str) -> bool:
        try:
            return self.path_for(filename).is_file()
        except ValueError:
            return False

    async def save_upload(self, upload: UploadFile, field: str, max_bytes: int) -> StoredFile:
        """Copy ``upload`` into the directory in chunks.

        Raises PayloadTooLarge once more than ``max_bytes`` have been read; the
        partial file is removed before the error propagates.
        """
        self.ensure()
        await upload.seek(0)
        for _ in range(5):
            filename = self.generate_name(field, upload.filename)
            path = self.path_for(filename)
            try:
                out = open(path, "xb")
            except FileExistsError:
                continue
            break
        else:
            raise OSError("Could not allocate a unique media filename")

        size = 0
        try:
            with out:
                while True:
                    chunk = await upload.read(self.chunk_size)
                    if not chunk:
                        break
                    size += len(chunk)
                    if max_bytes and size > max_bytes:
                        raise PayloadTooLarge("File too large")
                    out.write(chunk)
        except BaseException:
            self.remove(filename)
            raise
        logger.info("media.saved", extra={"media_file": filename, "size": size})
        return StoredFile(filename=filename, size=size)

    def remove(self, filename: Optional[str]) -> bool:
        """Best-effort unlink. Failures are logged and reported, never raised."""
        if not filename:
            return False
        try:
            self.path_for(filename).unlink()
            return True
        except FileNotFoundError:
            logger.warning("media.remove.missing", extra={"media_file": filename})
        except (OSError, ValueError) as exc:
            logger.warning(
                "media.remove.failed", extra={"media_file": filename, "error": str(exc)}
            )
        return False

    def list_files(self) -> List[str]:
        if not self.root.is_dir():
            return []
        return sorted(
            entry.name
            for entry in self.root.iterdir()
            if entry.is_file() and not entry.name.startswith(".")
        )
