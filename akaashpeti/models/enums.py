"""String enums stored in model columns."""

from enum import Enum


class ItemType(str, Enum):
    """Kinds of item that can be shared, linked or trashed."""
    FILE = "file"
    FOLDER = "folder"


class StorageBackend(str, Enum):
    """Where a file's bytes live. Stored verbatim in ``files.storage_backend``."""
    SUPABASE = "supabase"
    LOCAL = "local"


class ShareRole(str, Enum):
    """Roles a share grant can carry. ``owner`` is implicit and never stored."""
    VIEWER = "viewer"
    EDITOR = "editor"
