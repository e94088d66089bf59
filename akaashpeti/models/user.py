"""User and AuditLog models.

Users authenticate with email/password and receive JWT tokens.
AuditLog records state-changing operations for accountability.
"""

import uuid

from sqlalchemy import Column, String, DateTime, Integer, Text, ForeignKey
from sqlalchemy.sql import func
from ..database import Base


def new_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    """User account. Identity (id, email) is fixed after signup; name and
    image_url are editable profile fields."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(Text, nullable=False)
    name = Column(String(255), nullable=True)
    image_url = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class AuditLog(Base):
    """Immutable record of state-changing operations.

    Written by the service layer, never modified. Rows older than the
    configured retention are purged at startup.
    Fields:
        action       : signup, login, login_failed, share_create, share_revoke,
                        link_create, link_revoke, trash, restore, purge
        resource_type: user, file, folder, shared_item, link_share
        resource_id  : ID of the affected resource
        details      : JSON string with additional context
    """

    __tablename__ = "audit_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    action = Column(String(50), nullable=False)
    resource_type = Column(String(50), nullable=False)
    resource_id = Column(String(255), nullable=True)
    details = Column(Text, nullable=True)
    ip_address = Column(String(45), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
