"""Repository for file metadata rows."""

from typing import Iterable, List

from ..exceptions import FileRecordNotFoundError
from ..models import File
from .base import LIKE_ESCAPE, BaseRepository, contains_pattern


class FileRepository(BaseRepository[File]):
    """Data access layer for files."""

    model_class = File
    not_found_error = FileRecordNotFoundError

    def list_for_owner(self, owner_id: str, deleted: bool = False) -> List[File]:
        """Owner's files, newest first. ``deleted=True`` lists the trash."""
        return (
            self.db.query(File)
            .filter(File.owner_id == owner_id, File.is_deleted.is_(deleted))
            .order_by(File.created_at.desc())
            .all()
        )

    def list_root(self, owner_id: str) -> List[File]:
        """Active files that sit outside any folder."""
        return (
            self.db.query(File)
            .filter(
                File.owner_id == owner_id,
                File.folder_id.is_(None),
                File.is_deleted.is_(False),
            )
            .order_by(File.name)
            .all()
        )

    def list_in_folder(self, folder_id: str) -> List[File]:
        """Active files directly inside *folder_id* (no recursion)."""
        return (
            self.db.query(File)
            .filter(File.folder_id == folder_id, File.is_deleted.is_(False))
            .order_by(File.name)
            .all()
        )

    def list_in_folders(self, folder_ids: Iterable[str]) -> List[File]:
        """Every file (active or trashed) inside any of *folder_ids*."""
        folder_ids = list(folder_ids)
        if not folder_ids:
            return []
        return self.db.query(File).filter(File.folder_id.in_(folder_ids)).all()

    def search(self, owner_id: str, query: str) -> List[File]:
        """Case-insensitive substring match on name over the owner's active files."""
        return (
            self.db.query(File)
            .filter(
                File.owner_id == owner_id,
                File.is_deleted.is_(False),
                File.name.ilike(contains_pattern(query), escape=LIKE_ESCAPE),
            )
            .order_by(File.name)
            .all()
        )
