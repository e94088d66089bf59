"""Database models."""

from .enums import ItemType, StorageBackend, ShareRole
from .user import User, AuditLog
from .folder import Folder
from .file import File
from .sharing import SharedItem, LinkShare

__all__ = [
    "ItemType", "StorageBackend", "ShareRole",
    "User", "AuditLog",
    "Folder", "File",
    "SharedItem", "LinkShare",
]
