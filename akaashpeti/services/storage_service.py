"""Persistence gateway: stores upload bytes and keeps the file row honest.

Write path: try the object store first; if it refuses, write to local disk;
then insert one File row naming the backend that actually holds the bytes.

    object store ok           -> storage_backend="supabase", key == path
    object store down, disk ok -> storage_backend="local", key = filename, path = absolute
    both down                  -> PersistenceFailedError
    bytes written, row failed  -> OrphanedBlobError (blob left for reconciliation)

Read path: ``resolve_download_url`` checks access, then signs a URL for
whichever backend the row names.
"""

import logging
import time
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.url_signer import sign_upload_url
from ..exceptions import (
    FileRecordNotFoundError,
    FolderNotFoundError,
    ObjectStoreError,
    OrphanedBlobError,
    PersistenceFailedError,
    UnknownStorageBackendError,
)
from ..models import File, ItemType, StorageBackend
from ..repositories import FileRepository, FolderRepository
from ..storage import LocalDiskStore, ObjectStore
from ..storage.local_disk import safe_filename, shorten_filename
from .naming import MAX_NAME_LENGTH
from .permission_service import AccessResolver, Role

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"


class PersistenceGateway:
    """Dual-backend file persistence.

    Both stores are injected; nothing here reaches for a global client.
    """

    def __init__(
        self,
        db: Session,
        object_store: ObjectStore,
        local_store: LocalDiskStore,
        signing_secret: Optional[str] = None,
    ):
        self.db = db
        self.object_store = object_store
        self.local_store = local_store
        self.signing_secret = signing_secret or settings.jwt_secret_key
        self.files = FileRepository(db)
        self.folders = FolderRepository(db)

    # -- write path --------------------------------------------------------

    def store(
        self,
        owner_id: str,
        folder_id: Optional[str],
        original_name: str,
        mime_type: Optional[str],
        size_bytes: Optional[int],
        data: bytes,
    ) -> File:
        """Persist an upload and return its committed File row."""
        if folder_id:
            folder = self.folders.get_owned(folder_id, owner_id)
            if folder.is_deleted or self.folders.has_trashed_ancestor(folder):
                raise FolderNotFoundError(folder_id)

        name = shorten_filename(safe_filename(original_name), MAX_NAME_LENGTH)
        mime_type = mime_type or DEFAULT_MIME_TYPE
        size_bytes = len(data) if size_bytes is None else size_bytes
        now_ms = int(time.time() * 1000)
        storage_key = f"{owner_id}/{now_ms}_{name}"

        try:
            self.object_store.put(storage_key, data, mime_type)
        except ObjectStoreError as primary_error:
            logger.warning(
                "Object store upload failed, falling back to local disk",
                extra={"owner_id": owner_id, "storage_key": storage_key, "error": primary_error.message},
            )
            try:
                filename, path = self.local_store.write(name, data, now_ms=now_ms)
            except OSError as fallback_error:
                logger.error(
                    "Upload failed on both backends",
                    extra={
                        "owner_id": owner_id,
                        "file_name": name,
                        "primary_error": primary_error.message,
                        "fallback_error": str(fallback_error),
                    },
                )
                raise PersistenceFailedError() from fallback_error

            return self._insert_row(
                owner_id, folder_id, name, mime_type, size_bytes,
                backend=StorageBackend.LOCAL,
                storage_key=filename,
                storage_path=str(path),
            )

        return self._insert_row(
            owner_id, folder_id, name, mime_type, size_bytes,
            backend=StorageBackend.SUPABASE,
            storage_key=storage_key,
            storage_path=storage_key,
        )

    def _insert_row(
        self,
        owner_id: str,
        folder_id: Optional[str],
        name: str,
        mime_type: str,
        size_bytes: int,
        backend: StorageBackend,
        storage_key: str,
        storage_path: str,
    ) -> File:
        record = File(
            name=name,
            mime_type=mime_type,
            size_bytes=size_bytes,
            storage_key=storage_key,
            storage_path=storage_path,
            storage_backend=backend.value,
            owner_id=owner_id,
            folder_id=folder_id or None,
            is_deleted=False,
        )
        try:
            self.files.add(record)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(
                "File row insert failed after blob write; blob is orphaned",
                extra={"storage_backend": backend.value, "storage_key": storage_key},
            )
            raise OrphanedBlobError(backend.value, storage_key, e) from e

        self.db.refresh(record)
        logger.info(
            "File stored",
            extra={"file_id": record.id, "storage_backend": backend.value, "size_bytes": size_bytes},
        )
        return record

    # -- read path ---------------------------------------------------------

    def resolve_download_url(self, file_id: str, requester_id: str) -> str:
        """URL the requester can fetch the bytes from.

        Needs viewer access. Collaborators cannot download a file its owner
        has trashed; the owner still can.
        """
        grant = AccessResolver(self.db).resolve(requester_id, ItemType.FILE, file_id, Role.VIEWER)
        record = grant.item
        if record.is_deleted and not grant.is_owner:
            raise FileRecordNotFoundError(file_id)
        return self.signed_url_for(record, settings.signed_url_ttl_download)

    def signed_url_for(self, record: File, expires_in: int) -> str:
        """Time-limited URL for *record*'s bytes on whichever backend holds them."""
        if record.storage_backend == StorageBackend.SUPABASE.value:
            return self.object_store.create_signed_url(record.storage_path, expires_in)
        if record.storage_backend == StorageBackend.LOCAL.value:
            return sign_upload_url(record.storage_key, self.signing_secret, expires_in)
        raise UnknownStorageBackendError(record.id, record.storage_backend)

    # -- removal -----------------------------------------------------------

    def remove_blob(self, record: File) -> bool:
        """Delete *record*'s bytes. Failures are logged, not raised: the row
        is already gone and the leftover blob needs manual cleanup."""
        try:
            if record.storage_backend == StorageBackend.SUPABASE.value:
                self.object_store.remove([record.storage_key])
                return True
            if record.storage_backend == StorageBackend.LOCAL.value:
                return self.local_store.delete(record.storage_path)
        except (ObjectStoreError, OSError, ValueError) as e:
            logger.warning(
                "Blob removal failed",
                extra={
                    "file_id": record.id,
                    "storage_backend": record.storage_backend,
                    "storage_key": record.storage_key,
                    "error": str(e),
                },
            )
            return False

        logger.warning(
            "Blob removal skipped for unknown backend",
            extra={"file_id": record.id, "storage_backend": record.storage_backend},
        )
        return False
