"""Search API."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..core.auth import AuthContext, require_auth
from ..database import get_db
from ..schemas.file import FileRecordResponse
from ..schemas.folder import FolderResponse, SearchResponse
from ..services.search_service import search_items

router = APIRouter(prefix="/api/search", tags=["search"])


@router.get("", response_model=SearchResponse)
def search(
    q: Optional[str] = Query(None, description="Substring to match against names"),
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    results = search_items(db, auth.user_id, q)
    return SearchResponse(
        folders=[FolderResponse.model_validate(f) for f in results.folders],
        files=[FileRecordResponse.model_validate(f) for f in results.files],
    )
