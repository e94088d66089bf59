"""Time-limited signed URLs for files held on local disk.

The object store signs its own URLs; locally stored bytes are served by the
``/uploads`` route, which only answers requests carrying a valid signature
produced here. Same HMAC-SHA256 construction as the bearer tokens.
"""

import hashlib
import hmac
import time
from typing import Optional
from urllib.parse import quote, urlencode

UPLOADS_ROUTE = "/uploads"


def _signature(storage_key: str, expires: int, secret: str) -> str:
    message = f"{storage_key}:{expires}".encode()
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


def sign_upload_url(
    storage_key: str,
    secret: str,
    expires_in: int,
    now: Optional[float] = None,
) -> str:
    """Return ``/uploads/<key>?expires=..&signature=..`` valid for *expires_in* seconds."""
    if now is None:
        now = time.time()
    expires = int(now + expires_in)
    query = urlencode({"expires": expires, "signature": _signature(storage_key, expires, secret)})
    return f"{UPLOADS_ROUTE}/{quote(storage_key)}?{query}"


def verify_upload_signature(
    storage_key: str,
    expires: int,
    signature: str,
    secret: str,
    now: Optional[float] = None,
) -> bool:
    """Check a signature produced by :func:`sign_upload_url`. False when expired or forged."""
    if now is None:
        now = time.time()
    if now > expires:
        return False
    return hmac.compare_digest(_signature(storage_key, expires, secret), signature)
