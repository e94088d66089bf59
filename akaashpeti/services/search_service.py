"""Name search across the caller's own files and folders."""

from dataclasses import dataclass
from typing import List

from sqlalchemy.orm import Session

from ..exceptions import ValidationError
from ..models import File, Folder
from ..repositories import FileRepository, FolderRepository


@dataclass
class SearchResults:
    folders: List[Folder]
    files: List[File]


def search_items(db: Session, owner_id: str, query: str) -> SearchResults:
    """Case-insensitive substring match on names. Trashed items are excluded."""
    query = (query or "").strip()
    if not query:
        raise ValidationError("Search query required", field="q")
    return SearchResults(
        folders=FolderRepository(db).search(owner_id, query),
        files=FileRepository(db).search(owner_id, query),
    )
