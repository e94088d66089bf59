"""Account and profile schemas."""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List


class SignupRequest(BaseModel):
    email: str = Field(..., description="Email address")
    password: str = Field(..., description="Password (min 8 characters)")
    name: Optional[str] = Field(None, description="Display name")

    model_config = {
        "json_schema_extra": {
            "examples": [{"email": "alice@example.com", "password": "securepass", "name": "Alice"}]
        }
    }


class LoginRequest(BaseModel):
    email: str
    password: str


class ProfileUpdate(BaseModel):
    """Editable profile fields. Omitted fields are left unchanged."""
    name: Optional[str] = None
    image_url: Optional[str] = None


class UserResponse(BaseModel):
    """Public view of an account. Never includes the password hash."""
    id: str
    email: str
    name: Optional[str] = None
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AuthResponse(BaseModel):
    token: str
    user: UserResponse


class MeResponse(BaseModel):
    user: UserResponse


class UserListResponse(BaseModel):
    users: List[UserResponse]
