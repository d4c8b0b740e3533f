from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from starlette.concurrency import run_in_threadpool

from api import models
from api.deps import get_catalog, get_retriever, http_error
from api.services.catalog import Catalog
from api.services.retrieve import Retriever
from api.services.storage import UploadStoreError

router = APIRouter()


@router.get("/", response_model=models.FileListing)
async def list_uploaded_pdfs(catalog: Catalog = Depends(get_catalog)) -> models.FileListing:
    try:
        stored = await run_in_threadpool(catalog.list)
    except UploadStoreError as exc:
        raise http_error(exc) from exc
    return models.FileListing(files=[models.FileEntry.from_stored(item) for item in stored])


@router.get("", response_model=models.FileListing)
async def list_uploaded_pdfs_no_slash(catalog: Catalog = Depends(get_catalog)) -> models.FileListing:
    return await list_uploaded_pdfs(catalog)


@router.get("/{filename}", response_class=Response, name="fetch_uploaded_pdf")
async def fetch_uploaded_pdf(filename: str, retriever: Retriever = Depends(get_retriever)) -> Response:
    try:
        found = await run_in_threadpool(retriever.fetch, filename)
    except UploadStoreError as exc:
        raise http_error(exc) from exc
    return Response(
        content=found.content,
        media_type=found.media_type,
        headers={
            "Content-Disposition": f'inline; filename="{found.name}"',
            "Cache-Control": found.cache_control,
        },
    )
