"""Authentication service: user accounts, password hashing, profiles.

All password operations use bcrypt via passlib. Passwords are never stored
or logged in plaintext. The service layer owns user lifecycle; endpoints
are thin wrappers.
"""

import logging
from typing import Optional

from passlib.hash import bcrypt
from sqlalchemy.orm import Session

from ..core.config import settings
from ..exceptions import ValidationError, AuthenticationError
from ..models.user import User

logger = logging.getLogger(__name__)

# NIST SP 800-63B recommends at least 8 characters.
MIN_PASSWORD_LENGTH = 8


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def register_user(
    db: Session,
    email: str,
    password: str,
    name: Optional[str] = None,
) -> User:
    """Create a new user account.

    Raises ValidationError if email is already taken or inputs are invalid.
    """
    email = _normalize_email(email)
    if not email or "@" not in email:
        raise ValidationError("Valid email address required", field="email")
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters", field="password"
        )

    existing = get_user_by_email(db, email)
    if existing is not None:
        raise ValidationError("Email already registered", field="email")

    user = User(
        email=email,
        password_hash=bcrypt.using(rounds=settings.password_hash_rounds).hash(password),
        name=name.strip() if name and name.strip() else None,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("User registered", extra={"user_id": user.id})
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    """Validate credentials and return the user.

    Raises AuthenticationError on unknown email or wrong password, with the
    same message for both.
    """
    user = get_user_by_email(db, email)

    if user is None or not user.password_hash:
        raise AuthenticationError("Invalid email or password")

    if not bcrypt.verify(password, user.password_hash):
        raise AuthenticationError("Invalid email or password")

    return user


def get_user_by_id(db: Session, user_id: str) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == _normalize_email(email)).first()


def list_users(db: Session) -> list[User]:
    """All accounts, oldest first. Used by clients to pick share recipients."""
    return db.query(User).order_by(User.created_at, User.email).all()


def update_profile(
    db: Session,
    user_id: str,
    name: Optional[str] = None,
    image_url: Optional[str] = None,
) -> User:
    """Update the editable profile fields. ``None`` leaves a field unchanged;
    an empty string clears it."""
    user = get_user_by_id(db, user_id)
    if user is None:
        raise AuthenticationError("User not found")

    if name is not None:
        user.name = name.strip() or None
    if image_url is not None:
        user.image_url = image_url.strip() or None

    db.commit()
    db.refresh(user)
    return user
