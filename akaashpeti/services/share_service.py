"""Direct shares: grants from an item's owner to another user.

A grant is a single row per (item, recipient). Sharing again with the same
recipient changes the role on that row instead of adding a second one.
Grants are never transitive: a recipient cannot re-share.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from ..exceptions import SharedItemNotFoundError, UserNotFoundError, ValidationError
from ..models import ItemType, ShareRole, SharedItem, User
from ..repositories import FileRepository, FolderRepository, SharedItemRepository
from . import audit_service, auth_service
from .permission_service import AccessResolver, Role

logger = logging.getLogger(__name__)

_UNNAMED = {
    ItemType.FILE.value: "Unnamed file",
    ItemType.FOLDER.value: "Unnamed folder",
}


@dataclass
class SharedItemView:
    """A grant plus the display name of the item it covers."""
    shared_item: SharedItem
    item_name: str


class ShareService:
    """Create, list and revoke share grants."""

    def __init__(self, db: Session):
        self.db = db
        self.shares = SharedItemRepository(db)
        self.files = FileRepository(db)
        self.folders = FolderRepository(db)

    def share(
        self,
        owner_id: str,
        item_type: str,
        item_id: str,
        role: str,
        shared_with: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Tuple[SharedItem, bool]:
        """Grant *role* on an item to another user, addressed by id or email.

        Returns:
            ``(grant, created)``; ``created`` is False when an existing grant
            was updated.

        Raises:
            ValidationError: bad role, no recipient given, self-share, trashed item.
            AccessDeniedError / InsufficientRoleError: requester is not the owner.
            UserNotFoundError: recipient does not exist.
        """
        try:
            role = ShareRole(role).value
        except ValueError:
            raise ValidationError("Invalid role. Must be 'viewer' or 'editor'.", field="role") from None

        grant = AccessResolver(self.db).resolve(owner_id, item_type, item_id, Role.OWNER)
        if grant.item.is_deleted:
            raise ValidationError("Cannot share an item that is in the trash", field="item_id")

        recipient = self._find_recipient(shared_with, email)
        if recipient.id == owner_id:
            raise ValidationError("Cannot share an item with yourself", field="shared_with")

        existing = self.shares.get_for_recipient(grant.item_id, grant.item_type, recipient.id)
        if existing is not None:
            existing.role = role
            self.db.commit()
            self.db.refresh(existing)
            shared_item, created = existing, False
        else:
            shared_item = SharedItem(
                item_id=grant.item_id,
                item_type=grant.item_type,
                owner_id=owner_id,
                shared_with=recipient.id,
                role=role,
            )
            self.shares.add(shared_item)
            self.db.commit()
            self.db.refresh(shared_item)
            created = True

        audit_service.log(
            self.db, owner_id, "share_create", "shared_item", shared_item.id,
            details={"item_type": shared_item.item_type, "item_id": shared_item.item_id,
                     "shared_with": recipient.id, "role": role},
        )
        return shared_item, created

    def _find_recipient(self, shared_with: Optional[str], email: Optional[str]) -> User:
        if shared_with:
            user = auth_service.get_user_by_id(self.db, shared_with)
            identifier = shared_with
        elif email:
            user = auth_service.get_user_by_email(self.db, email)
            identifier = email
        else:
            raise ValidationError("Recipient is required (shared_with or email)", field="shared_with")
        if user is None:
            raise UserNotFoundError(identifier)
        return user

    def shared_with_me(self, user_id: str) -> List[SharedItemView]:
        """Grants the user has received, skipping items that are trashed or gone."""
        views = []
        for shared_item in self.shares.list_shared_with(user_id):
            item = self._load_item(shared_item)
            if item is None or item.is_deleted:
                continue
            views.append(SharedItemView(shared_item, item.name))
        return views

    def shared_by_me(self, user_id: str) -> List[SharedItemView]:
        views = []
        for shared_item in self.shares.list_shared_by(user_id):
            item = self._load_item(shared_item)
            name = item.name if item is not None else _UNNAMED.get(shared_item.item_type, "Unknown item")
            views.append(SharedItemView(shared_item, name))
        return views

    def revoke(self, user_id: str, share_id: str) -> SharedItem:
        """Remove a grant. The granting owner may revoke it, and so may the
        recipient (leaving the share). Anyone else gets a 404."""
        shared_item = self.shares.get_by_id(share_id)
        if user_id not in (shared_item.owner_id, shared_item.shared_with):
            raise SharedItemNotFoundError(share_id)

        self.db.delete(shared_item)
        self.db.commit()
        audit_service.log(
            self.db, user_id, "share_revoke", "shared_item", share_id,
            details={"item_type": shared_item.item_type, "item_id": shared_item.item_id},
        )
        return shared_item

    def _load_item(self, shared_item: SharedItem):
        if shared_item.item_type == ItemType.FILE.value:
            return self.files.get_by_id_optional(shared_item.item_id)
        if shared_item.item_type == ItemType.FOLDER.value:
            return self.folders.get_by_id_optional(shared_item.item_id)
        return None
