"""File schemas."""

from pydantic import AliasChoices, BaseModel, Field
from datetime import datetime
from typing import Optional, List


class FileRecordResponse(BaseModel):
    """File metadata as returned to clients.

    ``storage_path`` is left out: for local files it is an absolute path on
    the server.
    """
    id: str
    name: str
    mime_type: str
    size_bytes: int
    storage_key: str
    storage_backend: str
    owner_id: str
    folder_id: Optional[str] = None
    is_deleted: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class FileRename(BaseModel):
    """Rename request. ``newName`` is accepted for older clients."""
    name: str = Field(..., validation_alias=AliasChoices("name", "newName"))


class FileEnvelope(BaseModel):
    file: FileRecordResponse


class FileMessageResponse(BaseModel):
    message: str
    file: FileRecordResponse


class FileListResponse(BaseModel):
    files: List[FileRecordResponse]


class DownloadUrlResponse(BaseModel):
    url: str
