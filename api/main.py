import logging
import os
from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import models
from api.config import Settings
from api.deps import get_store
from api.logging_config import setup_logging
from api.routes import uploaded_pdfs, uploads
from api.services.storage import Store

LOG = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    setup_logging(settings.log_level)

    app = FastAPI(title="PDF Upload Store", version="0.1.0")
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root() -> dict[str, object]:
        return {
            "service": "pdf-upload-store",
            "status": "ok",
            "docs": "/docs",
            "health": "/health",
        }

    @app.get("/health", response_model=models.HealthResponse)
    async def health(store: Store = Depends(get_store)) -> models.HealthResponse:
        return models.HealthResponse(status="ok", store=models.StoreStatus(**store.describe()))

    app.include_router(uploads.router, prefix="/api/upload", tags=["upload"])
    app.include_router(uploaded_pdfs.router, prefix="/api/uploaded-pdfs", tags=["uploaded-pdfs"])

    LOG.info("Serving uploads from %s", settings.upload_root)
    return app


def serve() -> None:
    uvicorn.run(
        "api.main:create_app",
        factory=True,
        host=os.getenv("PDF_STORE_HOST", "127.0.0.1"),
        port=int(os.getenv("PDF_STORE_PORT", "8000")),
    )


if __name__ == "__main__":
    serve()
