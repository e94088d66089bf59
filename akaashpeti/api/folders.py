"""Folder API: create, list, browse, rename and trash.

Single router for all folder operations. Delegates to FolderService;
trashing goes through TrashService like every other trash transition.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..core.auth import AuthContext, require_auth
from ..database import get_db
from ..models import ItemType
from ..schemas.file import FileRecordResponse
from ..schemas.folder import (
    FolderContentsResponse,
    FolderCreate,
    FolderEnvelope,
    FolderListResponse,
    FolderMessageResponse,
    FolderRename,
    FolderResponse,
    RootContentsResponse,
)
from ..services import FolderService, PersistenceGateway, TrashService
from .dependencies import get_gateway

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/folders", tags=["folders"])


@router.post("", response_model=FolderMessageResponse, status_code=201)
def create_folder(
    data: FolderCreate,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    folder = FolderService(db).create(auth.user_id, data.name, data.parent_id)
    return FolderMessageResponse(
        message="Folder created successfully",
        folder=FolderResponse.model_validate(folder),
    )


@router.get("", response_model=FolderListResponse)
def list_folders(
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """Every active folder the caller owns, at any depth."""
    folders = FolderService(db).list_for_owner(auth.user_id)
    return FolderListResponse(folders=[FolderResponse.model_validate(f) for f in folders])


@router.get("/root", response_model=RootContentsResponse)
def get_root_contents(
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    root = FolderService(db).root(auth.user_id)
    return RootContentsResponse(
        folders=[FolderResponse.model_validate(f) for f in root.subfolders],
        files=[FileRecordResponse.model_validate(f) for f in root.files],
    )


@router.get("/{folder_id}/contents", response_model=FolderContentsResponse)
def get_folder_contents(
    folder_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """Direct subfolders and files of a folder. Needs viewer access."""
    contents = FolderService(db).contents(folder_id, auth.user_id)
    return FolderContentsResponse(
        folder=FolderResponse.model_validate(contents.folder),
        subfolders=[FolderResponse.model_validate(f) for f in contents.subfolders],
        files=[FileRecordResponse.model_validate(f) for f in contents.files],
    )


@router.patch("/{folder_id}", response_model=FolderEnvelope)
def rename_folder(
    folder_id: str,
    body: FolderRename,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    folder = FolderService(db).rename(folder_id, auth.user_id, body.name)
    return FolderEnvelope(folder=FolderResponse.model_validate(folder))


@router.delete("/{folder_id}", response_model=FolderMessageResponse)
def trash_folder(
    folder_id: str,
    auth: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    folder = TrashService(db, gateway).trash(auth.user_id, ItemType.FOLDER, folder_id)
    return FolderMessageResponse(
        message="Folder moved to trash",
        folder=FolderResponse.model_validate(folder),
    )
