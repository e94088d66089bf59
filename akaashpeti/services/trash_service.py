"""Trash lifecycle for files and folders.

    Active --trash--> Trashed --purge--> (gone)
       ^                 |
       +----restore------+

Every transition is owner-only and goes through owner-scoped lookups, so a
non-owner sees a 404 whether or not the item exists. Restoring an active
item returns it unchanged. Purging an active item is rejected.

Trashing a folder only flags the folder itself; its contents drop out of
every listing because they hang off a trashed parent, and come back with it
on restore. Nothing new can be created or uploaded anywhere below a trashed
folder. Purging a folder removes the whole subtree.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import DatabaseError, ValidationError
from ..models import File, Folder, ItemType
from ..repositories import (
    FileRepository,
    FolderRepository,
    LinkShareRepository,
    SharedItemRepository,
)
from . import audit_service
from .permission_service import parse_item_type
from .storage_service import PersistenceGateway

logger = logging.getLogger(__name__)


@dataclass
class TrashListing:
    files: List[File]
    folders: List[Folder]


@dataclass
class PurgeResult:
    """What a purge removed. ``blob_failures`` lists file ids whose bytes
    could not be deleted and need manual cleanup."""
    files_removed: int = 0
    folders_removed: int = 0
    blob_failures: List[str] = field(default_factory=list)


class TrashService:

    def __init__(self, db: Session, gateway: PersistenceGateway):
        self.db = db
        self.gateway = gateway
        self.files = FileRepository(db)
        self.folders = FolderRepository(db)
        self.shares = SharedItemRepository(db)
        self.links = LinkShareRepository(db)

    def _repo_for(self, kind: ItemType):
        return self.files if kind == ItemType.FILE else self.folders

    def list(self, owner_id: str) -> TrashListing:
        return TrashListing(
            files=self.files.list_for_owner(owner_id, deleted=True),
            folders=self.folders.list_for_owner(owner_id, deleted=True),
        )

    def trash(self, owner_id: str, item_type: Union[str, ItemType], item_id: str) -> Union[File, Folder]:
        """Move an item to the trash. Trashing a trashed item is a no-op."""
        kind = parse_item_type(item_type)
        item = self._repo_for(kind).get_owned(item_id, owner_id)
        if not item.is_deleted:
            item.is_deleted = True
            self.db.commit()
            self.db.refresh(item)
            audit_service.log(self.db, owner_id, "trash", kind.value, item_id)
        return item

    def restore(self, owner_id: str, item_type: Union[str, ItemType], item_id: str) -> Union[File, Folder]:
        """Bring an item back from the trash. Restoring an active item returns it as is."""
        kind = parse_item_type(item_type)
        item = self._repo_for(kind).get_owned(item_id, owner_id)
        if item.is_deleted:
            item.is_deleted = False
            self.db.commit()
            self.db.refresh(item)
            audit_service.log(self.db, owner_id, "restore", kind.value, item_id)
        return item

    def purge(self, owner_id: str, item_type: Union[str, ItemType], item_id: str) -> PurgeResult:
        """Permanently delete a trashed item, its grants, its links and its bytes.

        Rows are deleted in one transaction first; blobs are removed after the
        commit, and a failed blob removal is reported in the result rather
        than undoing the purge.

        Raises:
            ValidationError: bad type, or the item is not in the trash.
            FileRecordNotFoundError / FolderNotFoundError: not found or not owned.
        """
        kind = parse_item_type(item_type)
        item = self._repo_for(kind).get_owned(item_id, owner_id)
        if not item.is_deleted:
            raise ValidationError(
                "Item must be in the trash before it can be permanently deleted",
                field="item_id",
            )

        if kind == ItemType.FILE:
            doomed_folders: List[Folder] = []
            doomed_files: List[File] = [item]
        else:
            folder_ids = [item.id] + self.folders.descendant_ids(item.id)
            doomed_folders = self.db.query(Folder).filter(Folder.id.in_(folder_ids)).all()
            doomed_files = self.files.list_in_folders(folder_ids)

        try:
            for record in doomed_files:
                self.shares.delete_for_item(record.id, ItemType.FILE.value)
                self.links.delete_for_resource(record.id, ItemType.FILE.value)
                self.db.delete(record)
            for folder in doomed_folders:
                self.shares.delete_for_item(folder.id, ItemType.FOLDER.value)
                self.links.delete_for_resource(folder.id, ItemType.FOLDER.value)
                self.db.delete(folder)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseError("Failed to purge item", e) from e

        result = PurgeResult(files_removed=len(doomed_files), folders_removed=len(doomed_folders))
        for record in doomed_files:
            if not self.gateway.remove_blob(record):
                result.blob_failures.append(record.id)

        audit_service.log(
            self.db, owner_id, "purge", kind.value, item_id,
            details={
                "files_removed": result.files_removed,
                "folders_removed": result.folders_removed,
                "blob_failures": result.blob_failures,
            },
        )
        if result.blob_failures:
            logger.warning(
                "Purge left blobs behind",
                extra={"item_type": kind.value, "item_id": item_id, "file_ids": result.blob_failures},
            )
        return result
