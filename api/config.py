"""Service configuration.

Values are read from environment variables once, when the application is
created, and handed to the storage components from there.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

DEFAULT_CORS_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:4173",
    "http://localhost:3000",
    "http://localhost:8000",
]


def _split_origins(raw: str) -> List[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@dataclass(frozen=True)
class Settings:
    upload_root: Path
    cors_origins: List[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    cache_max_age: int = 3600
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            upload_root=Path(os.getenv("PDF_UPLOAD_ROOT", "uploads")).resolve(),
            cors_origins=_split_origins(os.getenv("CORS_ALLOWED_ORIGINS", ",".join(DEFAULT_CORS_ORIGINS))),
            cache_max_age=int(os.getenv("PDF_CACHE_MAX_AGE", "3600")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
