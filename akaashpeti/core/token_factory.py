"""Pure functions for creating and decoding JWT bearer tokens.

No classes, no state: just encode/decode. Used by the auth dependency and
by the signup/login endpoints. Tokens carry the user's ``id`` and ``email``.
"""

import hashlib
import hmac
import base64
import json
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

TOKEN_ISSUER = "akaashpeti"


@dataclass(frozen=True)
class TokenPayload:
    """Decoded JWT payload. Immutable."""
    user_id: str
    email: str
    exp: datetime


def create_token(
    user_id: str,
    email: str,
    secret: str,
    algorithm: str = "HS256",
    expires_hours: int = 24 * 7,
) -> str:
    """Create a signed JWT token.

    Args:
        user_id: Id of the authenticated user (``id`` claim).
        email: Email of the authenticated user (``email`` claim).
        secret: HMAC signing key.
        algorithm: Only HS256 supported.
        expires_hours: Hours until expiry. Defaults to seven days.

    Returns:
        Encoded JWT string.
    """
    if algorithm != "HS256":
        raise ValueError(f"Unsupported algorithm: {algorithm}")

    now = time.time()
    payload = {
        "id": user_id,
        "email": email,
        "iat": int(now),
        "exp": int(now + expires_hours * 3600),
        "iss": TOKEN_ISSUER,
    }

    header = {"alg": "HS256", "typ": "JWT"}
    segments = [
        _b64encode(json.dumps(header).encode()),
        _b64encode(json.dumps(payload).encode()),
    ]
    signing_input = b".".join(segments)
    signature = hmac.new(secret.encode(), signing_input, hashlib.sha256).digest()
    segments.append(_b64encode(signature))
    return b".".join(segments).decode()


def decode_token(token: str, secret: str, algorithm: str = "HS256") -> Optional[TokenPayload]:
    """Decode and validate a JWT token.

    Returns ``None`` on any validation failure (bad signature, expired, malformed,
    missing ``id`` claim) rather than raising: callers decide what to do with absence.
    """
    if algorithm != "HS256":
        return None

    try:
        parts = token.encode().split(b".")
        if len(parts) != 3:
            return None

        signing_input = parts[0] + b"." + parts[1]
        expected_sig = hmac.new(secret.encode(), signing_input, hashlib.sha256).digest()
        actual_sig = _b64decode(parts[2])

        if not hmac.compare_digest(expected_sig, actual_sig):
            return None

        payload = json.loads(_b64decode(parts[1]))

        exp = payload.get("exp", 0)
        if time.time() > exp:
            return None

        user_id = payload.get("id")
        if not user_id:
            return None

        return TokenPayload(
            user_id=str(user_id),
            email=payload.get("email", ""),
            exp=datetime.fromtimestamp(exp, tz=timezone.utc),
        )
    except (json.JSONDecodeError, KeyError, ValueError, IndexError, TypeError):
        return None


# --- base64url helpers (no padding, URL-safe) ---

def _b64encode(data: bytes) -> bytes:
    return base64.urlsafe_b64encode(data).rstrip(b"=")


def _b64decode(data: bytes) -> bytes:
    padding = 4 - len(data) % 4
    if padding != 4:
        data += b"=" * padding
    return base64.urlsafe_b64decode(data)
