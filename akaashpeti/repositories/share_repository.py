"""Repositories for share grants and public links."""

from typing import List, Optional

from sqlalchemy import or_

from ..exceptions import LinkShareNotFoundError, SharedItemNotFoundError
from ..models import LinkShare, SharedItem
from .base import BaseRepository


class SharedItemRepository(BaseRepository[SharedItem]):
    """Data access layer for share grants."""

    model_class = SharedItem
    not_found_error = SharedItemNotFoundError

    def find_visible_grants(self, item_id: str, item_type: str, user_id: str) -> List[SharedItem]:
        """Grants on the item where *user_id* is either the granting owner or
        the recipient. A grant row is visible to both parties."""
        return (
            self.db.query(SharedItem)
            .filter(
                SharedItem.item_id == item_id,
                SharedItem.item_type == item_type,
                or_(SharedItem.owner_id == user_id, SharedItem.shared_with == user_id),
            )
            .all()
        )

    def get_for_recipient(self, item_id: str, item_type: str, recipient_id: str) -> Optional[SharedItem]:
        return (
            self.db.query(SharedItem)
            .filter(
                SharedItem.item_id == item_id,
                SharedItem.item_type == item_type,
                SharedItem.shared_with == recipient_id,
            )
            .first()
        )

    def list_shared_with(self, user_id: str) -> List[SharedItem]:
        return (
            self.db.query(SharedItem)
            .filter(SharedItem.shared_with == user_id)
            .order_by(SharedItem.created_at.desc())
            .all()
        )

    def list_shared_by(self, user_id: str) -> List[SharedItem]:
        return (
            self.db.query(SharedItem)
            .filter(SharedItem.owner_id == user_id)
            .order_by(SharedItem.created_at.desc())
            .all()
        )

    def delete_for_item(self, item_id: str, item_type: str) -> int:
        return (
            self.db.query(SharedItem)
            .filter(SharedItem.item_id == item_id, SharedItem.item_type == item_type)
            .delete(synchronize_session=False)
        )


class LinkShareRepository(BaseRepository[LinkShare]):
    """Data access layer for public share links."""

    model_class = LinkShare
    not_found_error = LinkShareNotFoundError

    def get_by_token(self, token: str) -> Optional[LinkShare]:
        return self.db.query(LinkShare).filter(LinkShare.token == token).first()

    def list_for_owner(self, owner_id: str) -> List[LinkShare]:
        return (
            self.db.query(LinkShare)
            .filter(LinkShare.owner_id == owner_id)
            .order_by(LinkShare.created_at.desc())
            .all()
        )

    def delete_for_resource(self, resource_id: str, resource_type: str) -> int:
        return (
            self.db.query(LinkShare)
            .filter(LinkShare.resource_id == resource_id, LinkShare.resource_type == resource_type)
            .delete(synchronize_session=False)
        )
