"""Stored records — JSON documents kept in the metadata store.

Field names are camelCase on the wire (``lastAccessedAt``, ``folderId`` ...)
and snake_case in Python. Unset optional fields are omitted when written so
that a cleared ``archivedAt`` or ``folderId`` disappears from the record.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class FileSource(str, Enum):
    UPLOAD = "upload"
    PASTE = "paste"


class Record(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @model_validator(mode="after")
    def _assume_utc(self):
        """Naive timestamps from hand-edited or legacy records are UTC."""
        for name in type(self).model_fields:
            value = getattr(self, name)
            if isinstance(value, datetime) and value.tzinfo is None:
                setattr(self, name, value.replace(tzinfo=timezone.utc))
        return self


class FileMeta(Record):
    """Per-file metadata stored under ``meta:{id}``."""

    id: str = ""
    filename: str
    source: FileSource = FileSource.UPLOAD
    size: int = 0
    created: datetime | None = None
    last_accessed_at: datetime | None = None
    archived_at: datetime | None = None
    folder_id: str | None = None

    @property
    def is_archived(self) -> bool:
        return self.archived_at is not None

    @property
    def reference_time(self) -> datetime | None:
        """Timestamp the retention age is measured from."""
        return self.last_accessed_at or self.created


class Folder(Record):
    """Named group of file ids; element of the ``folders`` list."""

    id: str
    name: str
    file_ids: list[str] = Field(default_factory=list)
    created: datetime


class HistoryEntry(Record):
    """One viewed file; element of the ``history`` list."""

    id: str
    filename: str
    source: FileSource = FileSource.UPLOAD
    viewed_at: datetime


META_PREFIX = "meta:"
HISTORY_KEY = "history"
FOLDERS_KEY = "folders"
FOLDER_ID_PREFIX = "folder-"


def meta_key(file_id: str) -> str:
    return f"{META_PREFIX}{file_id}"
