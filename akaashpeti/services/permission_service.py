"""Access resolution: the one place where access rules are defined.

Every route that touches someone else's file or folder goes through
``AccessResolver.resolve``. Ownership-only routes (trash, restore, purge)
use owner-scoped repository lookups instead and never consult grants.

Rules, in order:
    1. The item's owner always gets role ``owner``, trashed or not.
    2. Otherwise the requester needs a SharedItem row for the item on which
       they are the recipient or the granting owner. No row = AccessDenied.
    3. ``editor`` requirement: some row must carry role ``editor``, or name
       the requester as its granting owner. Else InsufficientRole.
    4. ``viewer`` requirement: granted with the strongest row's role.
    5. ``owner`` requirement is only ever met by rule 1.

Store failures are raised as DatabaseError, never folded into a denial.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import (
    AccessDeniedError,
    DatabaseError,
    InsufficientRoleError,
    ValidationError,
)
from ..models import File, Folder, ItemType, SharedItem
from ..repositories import FileRepository, FolderRepository, SharedItemRepository

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """Effective access roles, weakest first."""
    VIEWER = "viewer"
    EDITOR = "editor"
    OWNER = "owner"


_ROLE_RANK: dict[str, int] = {
    Role.VIEWER.value: 1,
    Role.EDITOR.value: 2,
    Role.OWNER.value: 3,
}


@dataclass(frozen=True)
class AccessGrant:
    """Outcome of a successful resolution. Carries the loaded item so
    callers don't fetch it twice."""

    item_type: str
    item: Union[File, Folder]
    role: str

    @property
    def item_id(self) -> str:
        return self.item.id

    @property
    def is_owner(self) -> bool:
        return self.role == Role.OWNER.value


def parse_item_type(item_type: str) -> ItemType:
    try:
        return ItemType(item_type)
    except ValueError:
        raise ValidationError(
            "Invalid type. Must be 'file' or 'folder'.", field="item_type"
        ) from None


class AccessResolver:
    """Decides whether a requester may act on a file or folder, and as what."""

    def __init__(self, db: Session):
        self.db = db
        self.files = FileRepository(db)
        self.folders = FolderRepository(db)
        self.shares = SharedItemRepository(db)

    def _repo_for(self, item_type: ItemType):
        return self.files if item_type == ItemType.FILE else self.folders

    def resolve(
        self,
        requester_id: str,
        item_type: Union[str, ItemType],
        item_id: str,
        required_role: Union[str, Role] = Role.VIEWER,
    ) -> AccessGrant:
        """Resolve the requester's access to an item.

        Returns:
            AccessGrant with the effective role.

        Raises:
            FileRecordNotFoundError / FolderNotFoundError: item does not exist.
            AccessDeniedError: no ownership and no visible grant.
            InsufficientRoleError: a grant exists but is too weak.
            DatabaseError: the metadata store failed.
        """
        kind = parse_item_type(item_type)
        required = Role(required_role).value
        repo = self._repo_for(kind)

        try:
            item = repo.get_by_id_optional(item_id)
            if item is None:
                raise repo.not_found_error(item_id)

            if item.owner_id == requester_id:
                return AccessGrant(kind.value, item, Role.OWNER.value)

            grants = self.shares.find_visible_grants(item_id, kind.value, requester_id)
        except SQLAlchemyError as e:
            logger.error(
                "Access check failed",
                extra={"item_type": kind.value, "item_id": item_id, "requester": requester_id},
            )
            raise DatabaseError("Access check failed", e) from e

        if not grants:
            raise AccessDeniedError(kind.value, item_id)

        best = max(grants, key=lambda g: _ROLE_RANK.get(g.role, 0))

        if required == Role.OWNER.value:
            raise InsufficientRoleError(kind.value, item_id, required, best.role)

        if required == Role.EDITOR.value:
            if not any(self._grants_edit(g, requester_id) for g in grants):
                raise InsufficientRoleError(kind.value, item_id, required, best.role)
            return AccessGrant(kind.value, item, Role.EDITOR.value)

        return AccessGrant(kind.value, item, best.role)

    @staticmethod
    def _grants_edit(grant: SharedItem, requester_id: str) -> bool:
        return grant.role == Role.EDITOR.value or grant.owner_id == requester_id
