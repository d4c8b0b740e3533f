from __future__ import annotations

import logging
from dataclasses import dataclass

from api.services.storage import PDF_MEDIA_TYPE, InvalidName, NotFound, RetrievalFailed, Store

LOG = logging.getLogger(__name__)

DEFAULT_CACHE_MAX_AGE = 3600
TRAVERSAL_MARKERS = ("..", "/", "\\", "\x00")


@dataclass(frozen=True)
class RetrievedFile:
    name: str
    content: bytes
    media_type: str = PDF_MEDIA_TYPE
    cache_control: str = f"public, max-age={DEFAULT_CACHE_MAX_AGE}"


def is_safe_name(name: str) -> bool:
    return bool(name) and not any(marker in name for marker in TRAVERSAL_MARKERS)


class Retriever:
    """Resolves client-supplied names to files directly inside the store."""

    def __init__(self, store: Store, cache_max_age: int = DEFAULT_CACHE_MAX_AGE):
        self._store = store
        self.cache_max_age = cache_max_age

    def fetch(self, name: str) -> RetrievedFile:
        if not is_safe_name(name):
            LOG.warning("Rejected unsafe filename %r", name)
            raise InvalidName(context={"name": name})

        root = self._store.root
        candidate = root / name
        try:
            if candidate.is_symlink():
                raise NotFound(context={"name": name})
            if candidate.resolve().parent != root:
                LOG.warning("Rejected filename %r resolving outside %s", name, root)
                raise InvalidName(context={"name": name})
            if not candidate.is_file():
                raise NotFound(context={"name": name})
            content = candidate.read_bytes()
        except FileNotFoundError as exc:
            raise NotFound(context={"name": name}) from exc
        except OSError as exc:
            raise RetrievalFailed(
                "Failed to read stored file.",
                {"path": str(candidate), "error": str(exc)},
            ) from exc

        return RetrievedFile(
            name=name,
            content=content,
            cache_control=f"public, max-age={self.cache_max_age}",
        )
