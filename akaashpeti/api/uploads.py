"""Serves bytes of locally stored files through signed, expiring URLs.

URLs are minted by the PersistenceGateway (download endpoint and public
links); this route only checks the signature and streams the file.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.url_signer import UPLOADS_ROUTE, verify_upload_signature
from ..database import get_db
from ..exceptions import FileRecordNotFoundError, ForbiddenError
from ..models import File, StorageBackend
from ..storage import LocalDiskStore
from .dependencies import get_local_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix=UPLOADS_ROUTE, tags=["uploads"])


@router.get("/{storage_key}", response_class=FileResponse)
def serve_upload(
    storage_key: str,
    expires: Optional[int] = Query(None),
    signature: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    local_store: LocalDiskStore = Depends(get_local_store),
):
    if expires is None or not signature:
        raise ForbiddenError("Missing download signature")
    if not verify_upload_signature(storage_key, expires, signature, settings.jwt_secret_key):
        logger.info("Rejected upload URL", extra={"storage_key": storage_key})
        raise ForbiddenError("Invalid or expired download link")

    record = (
        db.query(File)
        .filter(File.storage_backend == StorageBackend.LOCAL.value, File.storage_key == storage_key)
        .first()
    )
    path = local_store.resolve(storage_key)
    if record is None or path is None or not path.is_file():
        raise FileRecordNotFoundError(storage_key)

    return FileResponse(path, media_type=record.mime_type, filename=record.name)
