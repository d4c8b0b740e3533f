from datetime import datetime, timezone
from pathlib import Path

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient

from api.config import Settings
from api.deps import get_ingestor, get_store
from api.main import create_app
from api.services import catalog
from api.services.ingest import Ingestor
from api.services.storage import Store

FIXED_MILLIS = 1700000000000
PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\ntrailer\n<<>>\n%%EOF\n"


@pytest.fixture
def store_root(tmp_path: Path) -> Path:
    return tmp_path / "uploads"


@pytest.fixture
def store(store_root: Path) -> Store:
    return Store(store_root)


@pytest.fixture
def settings(store_root: Path) -> Settings:
    return Settings(upload_root=store_root, cors_origins=["http://testserver"])


@pytest.fixture
def app(settings: Settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def fixed_clock_client(app):
    def _ingestor(store: Store = Depends(get_store)) -> Ingestor:
        return Ingestor(store, clock=lambda: FIXED_MILLIS)

    app.dependency_overrides[get_ingestor] = _ingestor
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def mtime_clock(monkeypatch):
    """Order listings by st_mtime so tests can set upload times with os.utime."""
    monkeypatch.setattr(
        catalog,
        "_created_at",
        lambda stats: datetime.fromtimestamp(stats.st_mtime, tz=timezone.utc),
    )
