"""Repository for folder rows."""

from typing import List

from ..exceptions import FolderNotFoundError
from ..models import Folder
from .base import LIKE_ESCAPE, BaseRepository, contains_pattern


class FolderRepository(BaseRepository[Folder]):
    """Data access layer for folders."""

    model_class = Folder
    not_found_error = FolderNotFoundError

    def list_for_owner(self, owner_id: str, deleted: bool = False) -> List[Folder]:
        return (
            self.db.query(Folder)
            .filter(Folder.owner_id == owner_id, Folder.is_deleted.is_(deleted))
            .order_by(Folder.name)
            .all()
        )

    def list_root(self, owner_id: str) -> List[Folder]:
        return (
            self.db.query(Folder)
            .filter(
                Folder.owner_id == owner_id,
                Folder.parent_id.is_(None),
                Folder.is_deleted.is_(False),
            )
            .order_by(Folder.name)
            .all()
        )

    def list_children(self, parent_id: str) -> List[Folder]:
        """Active subfolders directly under *parent_id*."""
        return (
            self.db.query(Folder)
            .filter(Folder.parent_id == parent_id, Folder.is_deleted.is_(False))
            .order_by(Folder.name)
            .all()
        )

    def descendant_ids(self, folder_id: str) -> List[str]:
        """Ids of every folder below *folder_id*, trashed or not, breadth-first."""
        found: List[str] = []
        frontier = [folder_id]
        while frontier:
            children = [
                row.id
                for row in self.db.query(Folder.id).filter(Folder.parent_id.in_(frontier)).all()
            ]
            # Guards against a corrupted parent_id cycle.
            children = [c for c in children if c not in found and c != folder_id]
            found.extend(children)
            frontier = children
        return found

    def has_trashed_ancestor(self, folder: Folder) -> bool:
        """True when any folder above *folder* is in the trash."""
        seen = {folder.id}
        parent_id = folder.parent_id
        while parent_id and parent_id not in seen:
            parent = self.get_by_id_optional(parent_id)
            if parent is None:
                return False
            if parent.is_deleted:
                return True
            seen.add(parent_id)
            parent_id = parent.parent_id
        return False

    def search(self, owner_id: str, query: str) -> List[Folder]:
        return (
            self.db.query(Folder)
            .filter(
                Folder.owner_id == owner_id,
                Folder.is_deleted.is_(False),
                Folder.name.ilike(contains_pattern(query), escape=LIKE_ESCAPE),
            )
            .order_by(Folder.name)
            .all()
        )
