"""Pydantic schemas for API validation."""

from .user import (
    SignupRequest,
    LoginRequest,
    ProfileUpdate,
    UserResponse,
    AuthResponse,
)
from .file import FileRecordResponse, FileRename
from .folder import FolderCreate, FolderRename, FolderResponse
from .sharing import ShareCreate, SharedItemResponse, LinkShareCreate, LinkShareResponse

__all__ = [
    "SignupRequest",
    "LoginRequest",
    "ProfileUpdate",
    "UserResponse",
    "AuthResponse",
    "FileRecordResponse",
    "FileRename",
    "FolderCreate",
    "FolderRename",
    "FolderResponse",
    "ShareCreate",
    "SharedItemResponse",
    "LinkShareCreate",
    "LinkShareResponse",
]
