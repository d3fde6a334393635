"""SQLAlchemy ORM models for MdShelf."""

from mdshelf.models.base import Base
from mdshelf.models.kv_entry import KvEntry

__all__ = [
    "Base",
    "KvEntry",
]
