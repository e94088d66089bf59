"""Public link API.

    GET    /api/link-shares         : caller's links
    POST   /api/link-shares         : create a link to an owned item
    GET    /api/link-shares/{token} : resolve a link (no auth)
    DELETE /api/link-shares/{id}    : revoke
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..core.auth import AuthContext, require_auth
from ..database import get_db
from ..models import ItemType
from ..schemas.file import FileRecordResponse
from ..schemas.folder import FolderResponse
from ..schemas.sharing import (
    LinkedFile,
    LinkedFolder,
    LinkResolveResponse,
    LinkShareCreate,
    LinkShareCreateResponse,
    LinkShareListResponse,
    LinkShareResponse,
    MessageResponse,
)
from ..services import LinkResolver, LinkShareService, PersistenceGateway
from ..services.link_share_service import build_link_url
from .dependencies import get_gateway

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/link-shares", tags=["link-shares"])


@router.get("", response_model=LinkShareListResponse)
def list_links(
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    links = LinkShareService(db).list_for_owner(auth.user_id)
    return LinkShareListResponse(links=[LinkShareResponse.model_validate(link) for link in links])


@router.post("", response_model=LinkShareCreateResponse, status_code=201)
def create_link(
    body: LinkShareCreate,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    link = LinkShareService(db).create(
        auth.user_id, body.resource_type, body.resource_id, body.expires_at
    )
    return LinkShareCreateResponse(
        message="Public link created successfully",
        link=build_link_url(link.token),
        share=LinkShareResponse.model_validate(link),
    )


@router.get("/{token}", response_model=LinkResolveResponse)
def resolve_link(
    token: str,
    db: Session = Depends(get_db),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    """Resolve a public link. No authentication: the token is the credential."""
    resolved = LinkResolver(db, gateway).resolve(token)

    if resolved.resource_type == ItemType.FILE.value:
        base = FileRecordResponse.model_validate(resolved.resource).model_dump()
        resource = LinkedFile(**base, signed_url=resolved.signed_url)
    else:
        base = FolderResponse.model_validate(resolved.resource).model_dump()
        resource = LinkedFolder(
            **base,
            contents=[FileRecordResponse.model_validate(f) for f in resolved.contents],
        )

    return LinkResolveResponse(
        link_share=LinkShareResponse.model_validate(resolved.link_share),
        resource=resource,
    )


@router.delete("/{link_id}", response_model=MessageResponse)
def revoke_link(
    link_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    LinkShareService(db).revoke(auth.user_id, link_id)
    return MessageResponse(message="Public link revoked")
