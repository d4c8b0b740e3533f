"""Local filesystem store for uploaded PDFs.

The store is a single flat directory. Every addressable file sits directly
inside it; the hidden ``.incoming`` directory only holds in-flight writes and
is never listed or served.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

LOG = logging.getLogger(__name__)

PDF_MEDIA_TYPE = "application/pdf"
PDF_SUFFIX = ".pdf"
STAGING_DIRNAME = ".incoming"


class UploadStoreError(Exception):
    """Base class for store failures; carries the HTTP status and public message."""

    status_code = 500
    public_message = "Storage operation failed"

    def __init__(self, message: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(message or self.public_message)
        self.context = context or {}


class ClientInputError(UploadStoreError):
    status_code = 400
    public_message = "Invalid request"


class MissingFile(ClientInputError):
    public_message = "No file provided"


class UnsupportedMediaType(ClientInputError):
    public_message = "Only PDF files are allowed"


class PayloadTooLarge(ClientInputError):
    public_message = "File size exceeds 50MB limit"


class InvalidName(ClientInputError):
    public_message = "Invalid filename"


class NotFoundError(UploadStoreError):
    status_code = 404
    public_message = "Not found"


class NotFound(NotFoundError):
    public_message = "File not found"


class StorageError(UploadStoreError):
    status_code = 500


class StorageWriteFailed(StorageError):
    public_message = "Failed to upload file"


class CatalogUnavailable(StorageError):
    public_message = "Failed to list uploaded PDFs"


class RetrievalFailed(StorageError):
    public_message = "Failed to serve file"


@dataclass(frozen=True)
class StoredFile:
    stored_name: str
    size_bytes: int
    created_at: datetime
    original_name: Optional[str] = None
    media_type: str = PDF_MEDIA_TYPE


class Store:
    """Location of the managed upload directory."""

    def __init__(self, root: Path | str):
        self.root = Path(root).resolve()

    @property
    def staging_dir(self) -> Path:
        return self.root / STAGING_DIRNAME

    def ensure_store_ready(self) -> None:
        """Create the store and its staging directory if absent. Safe to call repeatedly."""
        try:
            self.staging_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageWriteFailed(
                f"Upload directory not writable: {self.root}",
                {"path": str(self.root), "error": str(exc)},
            ) from exc

    def describe(self) -> dict[str, object]:
        exists = self.root.is_dir()
        writable = os.access(self.root, os.W_OK) if exists else False
        return {
            "path": str(self.root),
            "exists": exists,
            "writable": writable,
        }

    def __repr__(self) -> str:
        return f"Store({str(self.root)!r})"
