"""Request-scoped wiring between the FastAPI app and the storage components."""
from __future__ import annotations

import logging

from fastapi import Depends, HTTPException
from starlette.requests import Request

from api.config import Settings
from api.services.catalog import Catalog
from api.services.ingest import Ingestor
from api.services.retrieve import Retriever
from api.services.storage import StorageError, Store, UploadStoreError

LOG = logging.getLogger(__name__)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(settings: Settings = Depends(get_settings)) -> Store:
    return Store(settings.upload_root)


def get_ingestor(store: Store = Depends(get_store)) -> Ingestor:
    return Ingestor(store)


def get_catalog(store: Store = Depends(get_store)) -> Catalog:
    return Catalog(store)


def get_retriever(
    store: Store = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> Retriever:
    return Retriever(store, cache_max_age=settings.cache_max_age)


def http_error(exc: UploadStoreError) -> HTTPException:
    """Translate a store failure into the response the caller sees.

    Storage failures are logged with their full context; the caller only gets
    the generic message. Must be called from inside the ``except`` block.
    """
    if isinstance(exc, StorageError):
        LOG.exception("%s: %s | context=%s", type(exc).__name__, exc, exc.context)
    else:
        LOG.info("Rejected request: %s | context=%s", exc.public_message, exc.context)
    return HTTPException(status_code=exc.status_code, detail=exc.public_message)
