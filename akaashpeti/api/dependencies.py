"""Shared FastAPI dependencies for the storage backends.

Routes never build clients themselves. Tests replace ``get_object_store``
(and ``get_local_store`` when needed) through ``app.dependency_overrides``.
"""

import logging
from functools import lru_cache
from fastapi import Depends
from sqlalchemy.orm import Session

from ..core.config import settings
from ..database import get_db
from ..services.storage_service import PersistenceGateway
from ..storage import LocalDiskStore, ObjectStore, SupabaseObjectStore, UnconfiguredObjectStore

logger = logging.getLogger(__name__)


@lru_cache
def get_object_store() -> ObjectStore:
    """Process-wide object store client."""
    if not settings.object_store_configured:
        logger.warning("Supabase storage is not configured; uploads will use local disk")
        return UnconfiguredObjectStore()
    return SupabaseObjectStore.from_credentials(
        settings.supabase_url,
        settings.supabase_service_role_key,
        settings.storage_bucket,
    )


@lru_cache
def get_local_store() -> LocalDiskStore:
    return LocalDiskStore(settings.upload_dir)


def get_gateway(
    db: Session = Depends(get_db),
    object_store: ObjectStore = Depends(get_object_store),
    local_store: LocalDiskStore = Depends(get_local_store),
) -> PersistenceGateway:
    return PersistenceGateway(db, object_store, local_store)

