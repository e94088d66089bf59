"""File API: upload, list, read, rename, download, trash and restore.

Upload and download go through the PersistenceGateway; every read or
write on a single file is gated by the AccessResolver, except trash and
restore which are owner-only.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from ..core.auth import AuthContext, require_auth
from ..database import get_db
from ..exceptions import ValidationError
from ..models import ItemType, StorageBackend
from ..schemas.file import (
    DownloadUrlResponse,
    FileEnvelope,
    FileListResponse,
    FileMessageResponse,
    FileRecordResponse,
    FileRename,
)
from ..services import FileService, PersistenceGateway, TrashService
from .dependencies import get_gateway

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/files", tags=["files"])


@router.post("", response_model=FileMessageResponse)
def upload_file(
    file: Optional[UploadFile] = File(None),
    folder_id: Optional[str] = Form(None),
    auth: AuthContext = Depends(require_auth),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    """Upload one file (multipart field ``file``), optionally into a folder."""
    if file is None or not file.filename:
        raise ValidationError("No file uploaded", field="file")

    data = file.file.read()
    record = gateway.store(
        owner_id=auth.user_id,
        folder_id=folder_id or None,
        original_name=file.filename,
        mime_type=file.content_type,
        size_bytes=len(data),
        data=data,
    )
    if record.storage_backend == StorageBackend.LOCAL.value:
        message = "File saved locally"
    else:
        message = "Uploaded to object storage"
    return FileMessageResponse(message=message, file=FileRecordResponse.model_validate(record))


@router.get("", response_model=FileListResponse)
def list_files(
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """The caller's active files, newest first."""
    files = FileService(db).list_for_owner(auth.user_id)
    return FileListResponse(files=[FileRecordResponse.model_validate(f) for f in files])


@router.patch("/restore/{file_id}", response_model=FileMessageResponse)
def restore_file(
    file_id: str,
    auth: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    record = TrashService(db, gateway).restore(auth.user_id, ItemType.FILE, file_id)
    return FileMessageResponse(message="File restored", file=FileRecordResponse.model_validate(record))


@router.get("/{file_id}", response_model=FileEnvelope)
def get_file(
    file_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    record = FileService(db).get(file_id, auth.user_id)
    return FileEnvelope(file=FileRecordResponse.model_validate(record))


@router.patch("/{file_id}", response_model=FileEnvelope)
def rename_file(
    file_id: str,
    body: FileRename,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    record = FileService(db).rename(file_id, auth.user_id, body.name)
    return FileEnvelope(file=FileRecordResponse.model_validate(record))


@router.get("/{file_id}/download", response_model=DownloadUrlResponse)
def download_file(
    file_id: str,
    auth: AuthContext = Depends(require_auth),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    """Short-lived URL for the file's bytes."""
    return DownloadUrlResponse(url=gateway.resolve_download_url(file_id, auth.user_id))


@router.delete("/{file_id}", response_model=FileMessageResponse)
def trash_file(
    file_id: str,
    auth: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    """Soft delete: moves the file to the caller's trash."""
    record = TrashService(db, gateway).trash(auth.user_id, ItemType.FILE, file_id)
    return FileMessageResponse(message="File moved to trash", file=FileRecordResponse.model_validate(record))
