"""Authentication and user API endpoints.

Public endpoints:
    POST  /api/auth/signup : create account, returns a token
    POST  /api/auth/login  : authenticate and receive a token

Authenticated endpoints:
    GET   /api/auth/me     : current user
    GET   /api/users       : directory of accounts (for picking share recipients)
    PATCH /api/users/me    : update name / avatar
"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..core.auth import AuthContext, require_auth
from ..core.config import settings
from ..core.token_factory import create_token
from ..database import get_db
from ..exceptions import AuthenticationError
from ..models.user import User
from ..schemas.user import (
    AuthResponse,
    LoginRequest,
    MeResponse,
    ProfileUpdate,
    SignupRequest,
    UserListResponse,
    UserResponse,
)
from ..services import audit_service, auth_service
from ..middleware.request_context import client_address

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])
users_router = APIRouter(prefix="/api/users", tags=["Users"])


def _issue_token(user: User) -> str:
    return create_token(
        user_id=user.id,
        email=user.email,
        secret=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        expires_hours=settings.jwt_expires_hours,
    )


@router.post(
    "/signup",
    response_model=AuthResponse,
    status_code=201,
    summary="Create an account",
)
def signup(body: SignupRequest, request: Request, db: Session = Depends(get_db)):
    user = auth_service.register_user(db, body.email, body.password, body.name)
    audit_service.log(db, user.id, "signup", "user", user.id, ip_address=client_address(request))
    return AuthResponse(token=_issue_token(user), user=UserResponse.model_validate(user))


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Authenticate and receive JWT",
)
def login(body: LoginRequest, request: Request, db: Session = Depends(get_db)):
    try:
        user = auth_service.authenticate(db, body.email, body.password)
    except AuthenticationError:
        audit_service.log(
            db, None, "login_failed", "user",
            details={"email": body.email.strip().lower()},
            ip_address=client_address(request),
        )
        raise
    audit_service.log(db, user.id, "login", "user", user.id, ip_address=client_address(request))
    return AuthResponse(token=_issue_token(user), user=UserResponse.model_validate(user))


@router.get(
    "/me",
    response_model=MeResponse,
    summary="Get current user",
)
def get_me(auth: AuthContext = Depends(require_auth), db: Session = Depends(get_db)):
    user = auth_service.get_user_by_id(db, auth.user_id)
    if user is None:
        raise AuthenticationError("User not found")
    return MeResponse(user=UserResponse.model_validate(user))


@users_router.get(
    "",
    response_model=UserListResponse,
    summary="List all users",
)
def list_users(auth: AuthContext = Depends(require_auth), db: Session = Depends(get_db)):
    users = auth_service.list_users(db)
    return UserListResponse(users=[UserResponse.model_validate(u) for u in users])


@users_router.patch(
    "/me",
    response_model=MeResponse,
    summary="Update the current user's profile",
)
def update_me(
    body: ProfileUpdate,
    auth: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
):
    user = auth_service.update_profile(db, auth.user_id, name=body.name, image_url=body.image_url)
    return MeResponse(user=UserResponse.model_validate(user))
