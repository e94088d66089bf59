"""Public share links: creation, listing, revocation and token resolution.

Link resolution is the one read path that skips the AccessResolver. Holding
the token is the capability; expiry is checked when the link is read, and an
expired row stays in place until its owner revokes it.
"""

import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Union

from sqlalchemy.orm import Session

from ..core.config import settings
from ..exceptions import (
    FileRecordNotFoundError,
    FolderNotFoundError,
    LinkExpiredError,
    LinkShareNotFoundError,
    ValidationError,
)
from ..models import File, Folder, ItemType, LinkShare
from ..repositories import FileRepository, FolderRepository, LinkShareRepository
from . import audit_service
from .permission_service import AccessResolver, Role
from .storage_service import PersistenceGateway

logger = logging.getLogger(__name__)

# 32 random bytes, URL-safe base64 encoded.
TOKEN_BYTES = 32


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC. SQLite hands back naive values."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_expired(link: LinkShare, now: datetime) -> bool:
    expires_at = as_utc(link.expires_at)
    return expires_at is not None and expires_at < now


def build_link_url(token: str) -> str:
    return f"{settings.app_url.rstrip('/')}/api/link-shares/{token}"


@dataclass
class ResolvedLink:
    """A live link together with what it points at.

    File links carry ``signed_url``; folder links carry ``contents`` (the
    folder's active files, one level deep).
    """

    link_share: LinkShare
    resource_type: str
    resource: Union[File, Folder]
    signed_url: Optional[str] = None
    contents: List[File] = field(default_factory=list)


class LinkShareService:
    """Owner-side management of public links."""

    def __init__(self, db: Session):
        self.db = db
        self.links = LinkShareRepository(db)

    def create(
        self,
        owner_id: str,
        resource_type: str,
        resource_id: str,
        expires_at: Optional[datetime] = None,
    ) -> LinkShare:
        """Create a link for an item the requester owns.

        Raises:
            ValidationError: bad resource type, or the item is in the trash.
            AccessDeniedError / InsufficientRoleError: requester is not the owner.
        """
        grant = AccessResolver(self.db).resolve(owner_id, resource_type, resource_id, Role.OWNER)
        if grant.item.is_deleted:
            raise ValidationError("Cannot share an item that is in the trash", field="resource_id")

        # A past expiry is accepted; the link simply resolves as expired.
        link = LinkShare(
            resource_id=grant.item_id,
            resource_type=grant.item_type,
            token=secrets.token_urlsafe(TOKEN_BYTES),
            owner_id=owner_id,
            expires_at=as_utc(expires_at),
        )
        self.links.add(link)
        self.db.commit()
        self.db.refresh(link)

        audit_service.log(
            self.db, owner_id, "link_create", "link_share", link.id,
            details={"resource_type": link.resource_type, "resource_id": link.resource_id},
        )
        logger.info(
            "Link share created",
            extra={"link_id": link.id, "resource_type": link.resource_type, "resource_id": link.resource_id},
        )
        return link

    def list_for_owner(self, owner_id: str) -> List[LinkShare]:
        return self.links.list_for_owner(owner_id)

    def revoke(self, owner_id: str, link_id: str) -> LinkShare:
        """Delete one of the owner's links. Someone else's link is a 404."""
        link = self.links.get_owned(link_id, owner_id)
        self.db.delete(link)
        self.db.commit()
        audit_service.log(self.db, owner_id, "link_revoke", "link_share", link_id)
        return link


class LinkResolver:
    """Turns a public token into the resource it grants."""

    def __init__(self, db: Session, gateway: PersistenceGateway):
        self.db = db
        self.gateway = gateway
        self.links = LinkShareRepository(db)
        self.files = FileRepository(db)
        self.folders = FolderRepository(db)

    def resolve(self, token: str, now: Optional[datetime] = None) -> ResolvedLink:
        """Resolve *token*.

        Raises:
            LinkShareNotFoundError: unknown token.
            LinkExpiredError: ``expires_at`` is before *now*.
            FileRecordNotFoundError / FolderNotFoundError: target gone or trashed.
        """
        now = as_utc(now) or datetime.now(timezone.utc)

        link = self.links.get_by_token(token)
        if link is None:
            raise LinkShareNotFoundError()

        if is_expired(link, now):
            logger.info("Expired link requested", extra={"link_id": link.id})
            raise LinkExpiredError(as_utc(link.expires_at).isoformat())

        if link.resource_type == ItemType.FILE.value:
            record = self.files.get_by_id_optional(link.resource_id)
            if record is None or record.is_deleted:
                raise FileRecordNotFoundError(link.resource_id)
            url = self.gateway.signed_url_for(record, settings.signed_url_ttl_link)
            return ResolvedLink(link, ItemType.FILE.value, record, signed_url=url)

        if link.resource_type == ItemType.FOLDER.value:
            folder = self.folders.get_by_id_optional(link.resource_id)
            if folder is None or folder.is_deleted:
                raise FolderNotFoundError(link.resource_id)
            contents = self.files.list_in_folder(folder.id)
            return ResolvedLink(link, ItemType.FOLDER.value, folder, contents=contents)

        # Rows are only written through create(), which validates the type.
        raise LinkShareNotFoundError()
