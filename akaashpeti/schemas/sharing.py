"""Share grant and public link schemas."""

from pydantic import AliasChoices, BaseModel, Field
from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from .file import FileRecordResponse
from .folder import FolderResponse


class MessageResponse(BaseModel):
    message: str


# -- Direct shares ---------------------------------------------------------

class ShareCreate(BaseModel):
    """Share an item with one user, addressed by id (``shared_with``) or email."""
    item_type: str
    item_id: str
    shared_with: Optional[str] = None
    email: Optional[str] = None
    role: str = Field("viewer", validation_alias=AliasChoices("role", "access_level"))

    model_config = {
        "json_schema_extra": {
            "examples": [{"item_type": "file", "item_id": "<file id>", "email": "bob@example.com", "role": "viewer"}]
        }
    }


class SharedItemResponse(BaseModel):
    id: str
    item_id: str
    item_type: str
    owner_id: str
    shared_with: str
    role: str
    created_at: Optional[datetime] = None
    item_name: Optional[str] = None

    class Config:
        from_attributes = True


class ShareCreateResponse(BaseModel):
    message: str
    shared_item: SharedItemResponse


class SharedWithMeResponse(BaseModel):
    shared_with_me: List[SharedItemResponse]


class SharedByMeResponse(BaseModel):
    shared_by_me: List[SharedItemResponse]


# -- Public links ----------------------------------------------------------

class LinkShareCreate(BaseModel):
    """``expires_at`` omitted or null = the link never expires."""
    resource_id: str
    resource_type: str
    expires_at: Optional[datetime] = None


class LinkShareResponse(BaseModel):
    id: str
    resource_id: str
    resource_type: str
    token: str
    owner_id: str
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class LinkShareCreateResponse(BaseModel):
    message: str
    link: str
    share: LinkShareResponse


class LinkShareListResponse(BaseModel):
    links: List[LinkShareResponse]


class LinkedFile(FileRecordResponse):
    resource_type: Literal["file"] = "file"
    signed_url: str


class LinkedFolder(FolderResponse):
    resource_type: Literal["folder"] = "folder"
    contents: List[FileRecordResponse] = []


class LinkResolveResponse(BaseModel):
    link_share: LinkShareResponse
    resource: Annotated[Union[LinkedFile, LinkedFolder], Field(discriminator="resource_type")]
