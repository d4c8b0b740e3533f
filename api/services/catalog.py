from __future__ import annotations

import os
from datetime import datetime, timezone
from typing import List, Optional

from api.services.storage import PDF_SUFFIX, CatalogUnavailable, Store, StoredFile


def _created_at(stats: os.stat_result) -> datetime:
    # st_birthtime is not reported on Linux
    birth = getattr(stats, "st_birthtime", None)
    return datetime.fromtimestamp(birth if birth else stats.st_mtime, tz=timezone.utc)


def _describe(entry: os.DirEntry) -> Optional[StoredFile]:
    """Stat one directory entry; None when it is not a PDF file or vanished mid-scan."""
    if not entry.name.endswith(PDF_SUFFIX):
        return None
    try:
        if not entry.is_file(follow_symlinks=False):
            return None
        stats = entry.stat(follow_symlinks=False)
    except FileNotFoundError:
        return None
    return StoredFile(
        stored_name=entry.name,
        size_bytes=stats.st_size,
        created_at=_created_at(stats),
    )


class Catalog:
    """Read-only listing of the PDFs currently in the store."""

    def __init__(self, store: Store):
        self._store = store

    def list(self) -> List[StoredFile]:
        """Return stored PDFs newest first. A store that was never created is empty."""
        root = self._store.root
        try:
            with os.scandir(root) as entries:
                described = [_describe(entry) for entry in entries]
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise CatalogUnavailable(
                "Failed to list upload directory.",
                {"path": str(root), "error": str(exc)},
            ) from exc

        files = [item for item in described if item is not None]
        files.sort(key=lambda item: item.created_at, reverse=True)
        return files
