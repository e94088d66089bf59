"""Folder operations: create, list, browse and rename.

Folders form one tree per owner. ``parent_id`` NULL is the root level, and a
parent must always belong to the same owner as its child. Browsing a folder
is one level deep: direct subfolders and direct files.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.orm import Session

from ..exceptions import FolderNotFoundError
from ..models import File, Folder, ItemType
from ..repositories import FileRepository, FolderRepository
from .naming import normalize_item_name
from .permission_service import AccessGrant, AccessResolver, Role

logger = logging.getLogger(__name__)


@dataclass
class FolderContents:
    folder: Optional[Folder]
    subfolders: List[Folder]
    files: List[File]


class FolderService:
    """Folder CRUD behind a narrow interface.

    Public methods:
        create          -- new folder at root or under an owned parent
        list_for_owner  -- every active folder the user owns
        root            -- active root-level folders and files
        contents        -- one level below a folder (viewer access)
        rename          -- editor access
    """

    def __init__(self, db: Session):
        self.db = db
        self.folders = FolderRepository(db)
        self.files = FileRepository(db)
        self.access = AccessResolver(db)

    def create(self, owner_id: str, name: str, parent_id: Optional[str] = None) -> Folder:
        """Create a folder. A parent that is missing, someone else's, or
        in the trash (itself or through an ancestor) raises FolderNotFoundError."""
        name = normalize_item_name(name)
        if parent_id:
            parent = self.folders.get_owned(parent_id, owner_id)
            if parent.is_deleted or self.folders.has_trashed_ancestor(parent):
                raise FolderNotFoundError(parent_id)

        folder = Folder(name=name, owner_id=owner_id, parent_id=parent_id or None, is_deleted=False)
        self.folders.add(folder)
        self.db.commit()
        self.db.refresh(folder)
        logger.info("Folder created", extra={"folder_id": folder.id, "user_id": owner_id})
        return folder

    def list_for_owner(self, owner_id: str) -> List[Folder]:
        return self.folders.list_for_owner(owner_id)

    def root(self, owner_id: str) -> FolderContents:
        """Root level of the owner's tree. ``folder`` is None at the root."""
        return FolderContents(
            folder=None,
            subfolders=self.folders.list_root(owner_id),
            files=self.files.list_root(owner_id),
        )

    def _authorize(self, requester_id: str, folder_id: str, required_role: Role) -> AccessGrant:
        grant = self.access.resolve(requester_id, ItemType.FOLDER, folder_id, required_role)
        if grant.item.is_deleted and not grant.is_owner:
            raise FolderNotFoundError(folder_id)
        return grant

    def contents(self, folder_id: str, requester_id: str) -> FolderContents:
        folder = self._authorize(requester_id, folder_id, Role.VIEWER).item
        return FolderContents(
            folder=folder,
            subfolders=self.folders.list_children(folder.id),
            files=self.files.list_in_folder(folder.id),
        )

    def rename(self, folder_id: str, requester_id: str, name: str) -> Folder:
        name = normalize_item_name(name)
        folder = self._authorize(requester_id, folder_id, Role.EDITOR).item
        folder.name = name
        self.db.commit()
        self.db.refresh(folder)
        logger.info("Folder renamed", extra={"folder_id": folder_id, "user_id": requester_id})
        return folder
