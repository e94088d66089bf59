"""Business logic services."""

from .permission_service import AccessResolver, AccessGrant, Role
from .storage_service import PersistenceGateway
from .link_share_service import LinkShareService, LinkResolver, ResolvedLink
from .share_service import ShareService
from .file_service import FileService
from .folder_service import FolderService
from .trash_service import TrashService

__all__ = [
    "AccessResolver",
    "AccessGrant",
    "Role",
    "PersistenceGateway",
    "LinkShareService",
    "LinkResolver",
    "ResolvedLink",
    "ShareService",
    "FileService",
    "FolderService",
    "TrashService",
]
