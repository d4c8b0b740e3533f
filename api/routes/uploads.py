from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request

from api import models
from api.deps import get_ingestor, http_error
from api.services.ingest import MAX_UPLOAD_BYTES, Ingestor
from api.services.storage import UploadStoreError

LOG = logging.getLogger(__name__)
router = APIRouter()

CHUNK_SIZE = 1024 * 1024


@router.post("/", response_model=models.FileUploadResponse)
async def upload_pdf(
    request: Request,
    file: Optional[UploadFile] = File(None),
    ingestor: Ingestor = Depends(get_ingestor),
) -> models.FileUploadResponse:
    return await _handle_upload(request, file, ingestor)


@router.post("", response_model=models.FileUploadResponse)
async def upload_pdf_no_slash(
    request: Request,
    file: Optional[UploadFile] = File(None),
    ingestor: Ingestor = Depends(get_ingestor),
) -> models.FileUploadResponse:
    return await _handle_upload(request, file, ingestor)


async def _handle_upload(request: Request, file: Optional[UploadFile], ingestor: Ingestor) -> models.FileUploadResponse:
    _log_upload_start(request, file)
    payload: Optional[bytes] = None
    media_type: Optional[str] = None
    name: Optional[str] = None
    declared_size: Optional[int] = None
    if file is not None:
        media_type = file.content_type
        name = file.filename
        declared_size = file.size
        try:
            payload = await _read_payload(file, declared_size)
        finally:
            await file.close()
        if declared_size is None:
            declared_size = len(payload)

    try:
        stored = await run_in_threadpool(ingestor.store, payload, media_type, name, declared_size)
    except UploadStoreError as exc:
        raise http_error(exc) from exc

    response = models.FileUploadResponse.from_stored(stored)
    _log_upload_complete(request, response)
    return response


async def _read_payload(file: UploadFile, declared_size: Optional[int]) -> bytes:
    """Buffer the upload, stopping one byte past the ceiling."""
    if declared_size is not None and declared_size > MAX_UPLOAD_BYTES:
        return b""
    buffer = bytearray()
    while len(buffer) <= MAX_UPLOAD_BYTES:
        chunk = await file.read(CHUNK_SIZE)
        if not chunk:
            break
        buffer.extend(chunk)
    return bytes(buffer[: MAX_UPLOAD_BYTES + 1])


def _log_upload_start(request: Request, file: Optional[UploadFile]) -> None:
    client = request.client.host if request.client else "unknown"
    LOG.info(
        "Upload started from %s | filename=%s | content_type=%s | content_length=%s",
        client,
        file.filename if file else None,
        file.content_type if file else None,
        request.headers.get("content-length"),
    )


def _log_upload_complete(request: Request, payload: models.FileUploadResponse) -> None:
    client = request.client.host if request.client else "unknown"
    LOG.info(
        "Upload completed from %s | stored=%s | original=%s | size=%d",
        client,
        payload.filename,
        payload.original_name,
        payload.size,
    )
