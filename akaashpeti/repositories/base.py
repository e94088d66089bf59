"""Base repository with shared get-by-ID patterns.

Subclasses specify model_class, id_column, and not_found_error; the base
provides the common lookups plus the owner-scoped variants every
user-owned table needs.

Override _base_query() to apply default filters.
"""

from typing import TypeVar, Generic, Optional, Type
from sqlalchemy.orm import Session, Query

from ..database import Base
from ..exceptions import AppException

ModelT = TypeVar("ModelT", bound=Base)

LIKE_ESCAPE = "\\"


def contains_pattern(query: str) -> str:
    """LIKE pattern matching *query* literally anywhere in a value.

    Use with ``escape=LIKE_ESCAPE``.
    """
    escaped = (
        query.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


class BaseRepository(Generic[ModelT]):
    """Shared repository logic for SQLAlchemy models.

    Class variables to set in subclasses:
        model_class:     The SQLAlchemy model (e.g., File)
        id_column:       Name of the primary-key column (default "id")
        not_found_error: Exception class to raise from get_by_id
    """

    model_class: Type[ModelT]
    id_column: str = "id"
    not_found_error: Type[AppException]

    def __init__(self, db: Session):
        self.db = db

    def _base_query(self) -> Query:
        """Base query for the lookups below. Override to add default filters."""
        return self.db.query(self.model_class)

    def get_by_id(self, entity_id: str) -> ModelT:
        """Get entity by primary key. Raises not_found_error if missing."""
        entity = self.get_by_id_optional(entity_id)
        if not entity:
            raise self.not_found_error(entity_id)
        return entity

    def get_by_id_optional(self, entity_id: str) -> Optional[ModelT]:
        """Get entity by primary key, or None if not found."""
        col = getattr(self.model_class, self.id_column)
        return self._base_query().filter(col == entity_id).first()

    def get_owned(self, entity_id: str, owner_id: str) -> ModelT:
        """Get entity by primary key if *owner_id* owns it.

        Someone else's row raises not_found_error, same as a missing one,
        so ownership-only routes never reveal that an id exists.
        """
        col = getattr(self.model_class, self.id_column)
        entity = (
            self._base_query()
            .filter(col == entity_id, self.model_class.owner_id == owner_id)
            .first()
        )
        if not entity:
            raise self.not_found_error(entity_id)
        return entity

    def add(self, entity: ModelT) -> ModelT:
        """Stage a new row and flush so server defaults are populated."""
        self.db.add(entity)
        self.db.flush()
        return entity
