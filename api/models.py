from datetime import datetime
from typing import List

from pydantic import BaseModel, Field

from api.services.storage import StoredFile


class FileUploadResponse(BaseModel):
    success: bool = True
    filename: str = Field(..., description="Stored name used to fetch the file later")
    original_name: str = Field(..., serialization_alias="originalName")
    size: int = Field(..., ge=0)

    @classmethod
    def from_stored(cls, stored: StoredFile) -> "FileUploadResponse":
        return cls(
            filename=stored.stored_name,
            original_name=stored.original_name or "",
            size=stored.size_bytes,
        )


class FileEntry(BaseModel):
    filename: str
    size: int = Field(..., ge=0)
    uploaded_at: datetime = Field(..., serialization_alias="uploadedAt")

    @classmethod
    def from_stored(cls, stored: StoredFile) -> "FileEntry":
        return cls(filename=stored.stored_name, size=stored.size_bytes, uploaded_at=stored.created_at)


class FileListing(BaseModel):
    files: List[FileEntry] = Field(default_factory=list)


class StoreStatus(BaseModel):
    path: str
    exists: bool
    writable: bool


class HealthResponse(BaseModel):
    status: str
    store: StoreStatus
