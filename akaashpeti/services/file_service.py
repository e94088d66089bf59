"""File metadata operations: listing, lookup and rename.

Byte-level work (upload, download URLs, blob removal) lives in the
PersistenceGateway; moving files in and out of the trash lives in
TrashService.
"""

import logging
from typing import List

from sqlalchemy.orm import Session

from ..exceptions import FileRecordNotFoundError
from ..models import File, ItemType
from ..repositories import FileRepository
from .naming import normalize_item_name
from .permission_service import AccessGrant, AccessResolver, Role

logger = logging.getLogger(__name__)


class FileService:

    def __init__(self, db: Session):
        self.db = db
        self.files = FileRepository(db)
        self.access = AccessResolver(db)

    def list_for_owner(self, owner_id: str) -> List[File]:
        return self.files.list_for_owner(owner_id)

    def _authorize(self, requester_id: str, file_id: str, required_role: Role) -> AccessGrant:
        grant = self.access.resolve(requester_id, ItemType.FILE, file_id, required_role)
        # Trashed files are only visible to their owner.
        if grant.item.is_deleted and not grant.is_owner:
            raise FileRecordNotFoundError(file_id)
        return grant

    def get(self, file_id: str, requester_id: str) -> File:
        return self._authorize(requester_id, file_id, Role.VIEWER).item

    def rename(self, file_id: str, requester_id: str, name: str) -> File:
        """Rename a file. Needs editor access."""
        name = normalize_item_name(name)
        record = self._authorize(requester_id, file_id, Role.EDITOR).item
        record.name = name
        self.db.commit()
        self.db.refresh(record)
        logger.info("File renamed", extra={"file_id": file_id, "user_id": requester_id})
        return record
