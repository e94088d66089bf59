"""File metadata model."""

from sqlalchemy import BigInteger, Boolean, Column, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.sql import func
from ..database import Base
from .user import new_id


class File(Base):
    """Metadata row for an uploaded file.

    ``storage_backend`` together with ``storage_key``/``storage_path`` is the
    only locator for the bytes:

        supabase: object key in the storage bucket; key and path are equal
        local   : key is the filename in UPLOAD_DIR, path is its absolute path
    """

    __tablename__ = "files"
    __table_args__ = (
        Index("ix_files_owner_id", "owner_id"),
        Index("ix_files_folder_id", "folder_id"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    mime_type = Column(String(255), nullable=False, default="application/octet-stream")
    size_bytes = Column(BigInteger, nullable=False, default=0)

    storage_key = Column(Text, nullable=False)
    storage_path = Column(Text, nullable=False)
    storage_backend = Column(String(20), nullable=False)

    owner_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    folder_id = Column(String(36), ForeignKey("folders.id", ondelete="SET NULL"), nullable=True)

    is_deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
