"""Authentication module: FastAPI dependency for bearer-token auth.

Public interface:
    ``require_auth``: returns AuthContext or raises 401.

Every route except signup, login, public link resolution, signed
``/uploads`` fetches and the health probes depends on ``require_auth``.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .config import settings
from .token_factory import TokenPayload, decode_token
from ..database import get_db
from ..exceptions import AuthenticationError

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthContext:
    """Identity of the authenticated caller, resolved from the token and
    confirmed against the users table."""

    user_id: str
    email: str


def require_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    db: Session = Depends(get_db),
) -> AuthContext:
    """Require a valid JWT and return the caller's AuthContext."""
    if credentials is None:
        raise AuthenticationError("Missing authentication token")

    payload = decode_token(
        credentials.credentials, settings.jwt_secret_key, settings.jwt_algorithm
    )
    if payload is None:
        raise AuthenticationError("Invalid or expired token")

    return _load_auth_context(payload, db)


def _load_auth_context(payload: TokenPayload, db: Session) -> AuthContext:
    """Confirm the token's user still exists."""
    from ..models.user import User

    user = db.query(User).filter(User.id == payload.user_id).first()
    if user is None:
        logger.warning("Token for unknown user", extra={"user_id": payload.user_id})
        raise AuthenticationError("User not found")

    return AuthContext(user_id=user.id, email=user.email)
