"""Share grants and public share links.

SharedItem is a directed grant from an item's owner to one other user.
LinkShare is a bearer capability: whoever holds the token may read the
resource until ``expires_at`` (NULL = never expires).

Neither table has a foreign key to files/folders because ``item_id`` is
polymorphic over both; purging an item deletes its rows explicitly.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.sql import func
from ..database import Base
from .user import new_id


class SharedItem(Base):
    """One access grant: ``owner_id`` shares ``item`` with ``shared_with`` as ``role``."""

    __tablename__ = "shared_items"
    __table_args__ = (
        UniqueConstraint("item_id", "item_type", "shared_with", name="uq_shared_items_recipient"),
        Index("ix_shared_items_item", "item_id", "item_type"),
        Index("ix_shared_items_shared_with", "shared_with"),
        Index("ix_shared_items_owner_id", "owner_id"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    item_id = Column(String(36), nullable=False)
    item_type = Column(String(10), nullable=False)
    owner_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    shared_with = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    role = Column(String(10), nullable=False, default="viewer")
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class LinkShare(Base):
    """Public link to a file or folder, addressed by an unguessable token."""

    __tablename__ = "link_shares"
    __table_args__ = (
        Index("ix_link_shares_owner_id", "owner_id"),
        Index("ix_link_shares_resource", "resource_id", "resource_type"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    resource_id = Column(String(36), nullable=False)
    resource_type = Column(String(10), nullable=False)
    token = Column(String(128), unique=True, nullable=False)
    owner_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
