"""Trash API: list, restore and purge. Owner-only throughout."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..core.auth import AuthContext, require_auth
from ..database import get_db
from ..models import ItemType
from ..schemas.file import FileRecordResponse
from ..schemas.folder import FolderResponse
from ..schemas.trash import PurgeResponse, RestoreRequest, RestoreResponse, TrashListResponse
from ..services import PersistenceGateway, TrashService
from ..services.permission_service import parse_item_type
from .dependencies import get_gateway

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/trash", tags=["trash"])


@router.get("", response_model=TrashListResponse)
def list_trash(
    auth: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    listing = TrashService(db, gateway).list(auth.user_id)
    return TrashListResponse(
        files=[FileRecordResponse.model_validate(f) for f in listing.files],
        folders=[FolderResponse.model_validate(f) for f in listing.folders],
    )


@router.patch("/restore/{item_id}", response_model=RestoreResponse)
def restore_item(
    item_id: str,
    body: RestoreRequest,
    auth: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    kind = parse_item_type(body.type)
    item = TrashService(db, gateway).restore(auth.user_id, kind, item_id)
    schema = FileRecordResponse if kind == ItemType.FILE else FolderResponse
    return RestoreResponse(
        message=f"{kind.value} restored successfully",
        restored=schema.model_validate(item).model_dump(),
    )


@router.delete("/{item_type}/{item_id}", response_model=PurgeResponse)
def purge_item(
    item_type: str,
    item_id: str,
    auth: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    """Permanently delete a trashed file or folder (with everything under it)."""
    kind = parse_item_type(item_type)
    result = TrashService(db, gateway).purge(auth.user_id, kind, item_id)
    return PurgeResponse(
        message=f"{kind.value.capitalize()} permanently deleted",
        files_removed=result.files_removed,
        folders_removed=result.folders_removed,
    )
