"""File, history and folder API schemas (camelCase JSON)."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from mdshelf.schemas.records import FileMeta, FileSource, Folder


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FileItem(ApiModel):
    """File metadata for listing."""
    id: str
    filename: str
    display_name: str
    source: FileSource
    size: int
    modified: datetime | None = None
    last_accessed_at: datetime | None = None
    folder_id: str | None = None

    @classmethod
    def from_meta(cls, meta: FileMeta) -> "FileItem":
        return cls(
            id=meta.id,
            filename=meta.filename,
            display_name=meta.filename,
            source=meta.source,
            size=meta.size,
            modified=meta.created,
            last_accessed_at=meta.last_accessed_at,
            folder_id=meta.folder_id,
        )


class FileContentResponse(ApiModel):
    id: str
    filename: str
    content: str
    folder_id: str | None = None


class CreatedFile(ApiModel):
    id: str
    filename: str


class PasteRequest(ApiModel):
    content: str | None = None
    title: str | None = None


class RenameRequest(ApiModel):
    filename: str | None = None


class FolderNameRequest(ApiModel):
    name: str | None = None


class AddFileRequest(ApiModel):
    file_id: str


class MoveFileRequest(ApiModel):
    target_folder_id: str


class FolderOut(ApiModel):
    id: str
    name: str
    file_ids: list[str] = Field(default_factory=list)
    created: datetime
    files: list[FileItem] = Field(default_factory=list)

    @classmethod
    def from_folder(cls, folder: Folder, files: list[FileMeta] | None = None) -> "FolderOut":
        return cls(
            id=folder.id,
            name=folder.name,
            file_ids=list(folder.file_ids),
            created=folder.created,
            files=[FileItem.from_meta(m) for m in files or []],
        )


class FolderDeleted(ApiModel):
    success: bool = True
    deleted_file_ids: list[str] = Field(default_factory=list)
