"""Direct share API: grant, list and revoke access for other users."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..core.auth import AuthContext, require_auth
from ..database import get_db
from ..schemas.sharing import (
    MessageResponse,
    ShareCreate,
    ShareCreateResponse,
    SharedByMeResponse,
    SharedItemResponse,
    SharedWithMeResponse,
)
from ..services import ShareService
from ..services.share_service import SharedItemView

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/share", tags=["share"])


def _view_response(view: SharedItemView) -> SharedItemResponse:
    response = SharedItemResponse.model_validate(view.shared_item)
    response.item_name = view.item_name
    return response


@router.post("", response_model=ShareCreateResponse, status_code=201)
def share_item(
    body: ShareCreate,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """Share a file or folder you own. Sharing again with the same user
    replaces their role."""
    shared_item, created = ShareService(db).share(
        owner_id=auth.user_id,
        item_type=body.item_type,
        item_id=body.item_id,
        role=body.role,
        shared_with=body.shared_with,
        email=body.email,
    )
    return ShareCreateResponse(
        message="Item shared successfully" if created else "Share updated",
        shared_item=SharedItemResponse.model_validate(shared_item),
    )


@router.get("/shared-with-me", response_model=SharedWithMeResponse)
def shared_with_me(
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    views = ShareService(db).shared_with_me(auth.user_id)
    return SharedWithMeResponse(shared_with_me=[_view_response(v) for v in views])


@router.get("/shared-by-me", response_model=SharedByMeResponse)
def shared_by_me(
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    views = ShareService(db).shared_by_me(auth.user_id)
    return SharedByMeResponse(shared_by_me=[_view_response(v) for v in views])


@router.delete("/{share_id}", response_model=MessageResponse)
def revoke_share(
    share_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    ShareService(db).revoke(auth.user_id, share_id)
    return MessageResponse(message="Share revoked")
