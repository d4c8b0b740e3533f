from __future__ import annotations

import logging
import os
import re
import tempfile
import time
from datetime import datetime, timezone
from typing import Callable, Optional
from uuid import uuid4

from api.services.storage import (
    PDF_MEDIA_TYPE,
    MissingFile,
    PayloadTooLarge,
    Store,
    StorageWriteFailed,
    StoredFile,
    UnsupportedMediaType,
)

LOG = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 50 * 1024 * 1024
# keeps "<millis>_<name>" under the 255 byte NAME_MAX of common filesystems
MAX_SANITIZED_LENGTH = 200

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")
# a dot followed by another dot; stored names must never contain ".."
_DOT_RUN = re.compile(r"\.(?=\.)")


def _now_millis() -> int:
    return int(time.time() * 1000)


def _truncate(name: str, limit: int) -> str:
    if len(name) <= limit:
        return name
    stem, suffix = os.path.splitext(name)
    if not suffix or len(suffix) >= limit:
        return name[:limit]
    return stem[: limit - len(suffix)] + suffix


def sanitize_filename(filename: Optional[str]) -> str:
    if not filename:
        return f"{uuid4().hex}.pdf"
    candidate = _truncate(_UNSAFE_CHARS.sub("_", filename), MAX_SANITIZED_LENGTH)
    return _DOT_RUN.sub("_", candidate)


def build_stored_name(timestamp: int, filename: Optional[str]) -> str:
    return f"{timestamp}_{sanitize_filename(filename)}"


class Ingestor:
    """Validates uploads and writes them into the store atomically."""

    def __init__(self, store: Store, clock: Callable[[], int] = _now_millis):
        self._store = store
        self.clock = clock

    def store(
        self,
        payload: Optional[bytes],
        declared_media_type: Optional[str],
        declared_name: Optional[str],
        declared_size: Optional[int] = None,
    ) -> StoredFile:
        if payload is None:
            raise MissingFile()
        if declared_media_type != PDF_MEDIA_TYPE:
            raise UnsupportedMediaType(
                context={"declared_media_type": declared_media_type, "name": declared_name}
            )
        size = len(payload)
        if declared_size is None:
            declared_size = size
        if declared_size > MAX_UPLOAD_BYTES or size > MAX_UPLOAD_BYTES:
            raise PayloadTooLarge(context={"declared_size": declared_size, "size": size})

        stored_name = build_stored_name(self.clock(), declared_name)
        created_at = self._write(stored_name, payload)
        LOG.info("Stored %s (%d bytes) as %s", declared_name, size, stored_name)
        return StoredFile(
            stored_name=stored_name,
            size_bytes=size,
            created_at=created_at,
            original_name=declared_name,
        )

    def _write(self, stored_name: str, payload: bytes) -> datetime:
        self._store.ensure_store_ready()
        destination = self._store.root / stored_name
        staged: Optional[str] = None
        try:
            fd, staged = tempfile.mkstemp(prefix="upload-", suffix=".part", dir=self._store.staging_dir)
            with os.fdopen(fd, "wb") as buffer:
                buffer.write(payload)
                buffer.flush()
                os.fsync(buffer.fileno())
            os.replace(staged, destination)
            staged = None
            written = destination.stat()
        except OSError as exc:
            if staged is not None:
                _discard(staged)
            raise StorageWriteFailed(
                "Failed to write uploaded file.",
                {"path": str(destination), "error": str(exc)},
            ) from exc
        return datetime.fromtimestamp(written.st_mtime, tz=timezone.utc)


def _discard(path: str) -> None:
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass
    except OSError as exc:
        LOG.warning("Could not remove staged upload %s: %s", path, exc)
