"""Object store interface and its Supabase Storage implementation.

Services depend on the :class:`ObjectStore` protocol, never on the Supabase
client directly; the API layer injects a concrete store through
``get_object_store`` and tests swap in an in-memory one.

Every failure crossing this boundary is raised as ``ObjectStoreError`` so
callers can tell an unavailable store apart from a denial or a bad request.
"""

import logging
from typing import List, Protocol, runtime_checkable

from supabase import Client, create_client

from ..exceptions import ObjectStoreError

logger = logging.getLogger(__name__)


@runtime_checkable
class ObjectStore(Protocol):
    """Key-addressed blob storage with time-limited signed URLs."""

    def put(self, key: str, data: bytes, content_type: str) -> None:
        """Store *data* under *key*. Raises ObjectStoreError on failure."""
        ...

    def create_signed_url(self, key: str, expires_in: int) -> str:
        """Return a URL granting read access to *key* for *expires_in* seconds."""
        ...

    def remove(self, keys: List[str]) -> None:
        """Delete the given keys. Missing keys are not an error."""
        ...


class SupabaseObjectStore:
    """ObjectStore backed by one Supabase Storage bucket."""

    def __init__(self, client: Client, bucket: str):
        self._client = client
        self.bucket = bucket

    @classmethod
    def from_credentials(cls, url: str, key: str, bucket: str) -> "SupabaseObjectStore":
        return cls(create_client(url, key), bucket)

    def _bucket(self):
        return self._client.storage.from_(self.bucket)

    def put(self, key: str, data: bytes, content_type: str) -> None:
        try:
            self._bucket().upload(
                path=key,
                file=data,
                file_options={"content-type": content_type},
            )
        except Exception as e:
            raise ObjectStoreError(f"Upload to bucket '{self.bucket}' failed", e) from e

    def create_signed_url(self, key: str, expires_in: int) -> str:
        try:
            result = self._bucket().create_signed_url(key, expires_in)
        except Exception as e:
            raise ObjectStoreError("Could not generate signed URL", e) from e

        # storage3 has returned both spellings across releases.
        url = None
        if isinstance(result, dict):
            url = result.get("signedUrl") or result.get("signedURL")
        if not url:
            raise ObjectStoreError("Object store returned no signed URL")
        return url

    def remove(self, keys: List[str]) -> None:
        if not keys:
            return
        try:
            self._bucket().remove(keys)
        except Exception as e:
            raise ObjectStoreError(f"Removing {len(keys)} object(s) failed", e) from e


class UnconfiguredObjectStore:
    """Stand-in used when no Supabase credentials are configured.

    Every call fails with ObjectStoreError, so uploads take the local-disk
    path and signing requests surface as server errors.
    """

    def put(self, key: str, data: bytes, content_type: str) -> None:
        raise ObjectStoreError("Object storage is not configured")

    def create_signed_url(self, key: str, expires_in: int) -> str:
        raise ObjectStoreError("Object storage is not configured")

    def remove(self, keys: List[str]) -> None:
        raise ObjectStoreError("Object storage is not configured")
