"""Folder schemas."""

from pydantic import AliasChoices, BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional, List

from .file import FileRecordResponse


class FolderCreate(BaseModel):
    """Schema for creating a folder. ``parent_id`` omitted = root level."""
    name: str
    parent_id: Optional[str] = None

    @field_validator('parent_id')
    @classmethod
    def blank_parent_is_root(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v


class FolderRename(BaseModel):
    """Rename request. ``newName`` is accepted for older clients."""
    name: str = Field(..., validation_alias=AliasChoices("name", "newName"))


class FolderResponse(BaseModel):
    id: str
    name: str
    owner_id: str
    parent_id: Optional[str] = None
    is_deleted: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class FolderEnvelope(BaseModel):
    folder: FolderResponse


class FolderMessageResponse(BaseModel):
    message: str
    folder: FolderResponse


class FolderListResponse(BaseModel):
    folders: List[FolderResponse]


class RootContentsResponse(BaseModel):
    """Top level of the caller's tree."""
    folders: List[FolderResponse]
    files: List[FileRecordResponse]


class FolderContentsResponse(BaseModel):
    """One level below a folder: direct subfolders and direct files."""
    folder: FolderResponse
    subfolders: List[FolderResponse]
    files: List[FileRecordResponse]


class SearchResponse(BaseModel):
    folders: List[FolderResponse]
    files: List[FileRecordResponse]
