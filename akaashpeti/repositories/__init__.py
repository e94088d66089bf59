"""Data access repositories."""

from .base import BaseRepository
from .file_repository import FileRepository
from .folder_repository import FolderRepository
from .share_repository import SharedItemRepository, LinkShareRepository

__all__ = [
    "BaseRepository",
    "FileRepository",
    "FolderRepository",
    "SharedItemRepository",
    "LinkShareRepository",
]
