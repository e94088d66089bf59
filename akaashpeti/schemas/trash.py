"""Trash schemas."""

from pydantic import BaseModel
from typing import Any, Dict, List

from .file import FileRecordResponse
from .folder import FolderResponse


class TrashListResponse(BaseModel):
    files: List[FileRecordResponse]
    folders: List[FolderResponse]


class RestoreRequest(BaseModel):
    type: str  # 'file' or 'folder'


class RestoreResponse(BaseModel):
    message: str
    restored: Dict[str, Any]


class PurgeResponse(BaseModel):
    message: str
    files_removed: int
    folders_removed: int
