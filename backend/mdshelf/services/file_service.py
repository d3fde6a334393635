"""Markdown file ingestion, listing, retrieval, rename and delete."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from mdshelf.errors import NotFoundError, ValidationFailedError
from mdshelf.schemas.records import FileMeta, FileSource
from mdshelf.services.history_service import HistoryManager
from mdshelf.services.metadata import delete_meta, iter_meta, load_meta, save_meta
from mdshelf.storage import BlobStore, KvStore, blob_key
from mdshelf.utils.clock import Clock, utcnow

logger = logging.getLogger(__name__)

DEFAULT_UPLOAD_NAME = "untitled.md"
DEFAULT_PASTE_TITLE = "Pasted Markdown"


@dataclass
class FileContent:
    meta: FileMeta
    content: str


class FileService:
    """Creates files and serves them; viewing goes through the history manager."""

    def __init__(
        self,
        store: KvStore,
        blobs: BlobStore,
        history: HistoryManager,
        clock: Clock = utcnow,
    ):
        self._store = store
        self._blobs = blobs
        self._history = history
        self._clock = clock

    async def upload(self, filename: str | None, content: str) -> FileMeta:
        name = filename or DEFAULT_UPLOAD_NAME
        if not name.lower().endswith(".md"):
            raise ValidationFailedError("Only .md files are accepted")
        return await self._create(name, content, FileSource.UPLOAD)

    async def paste(self, content: str | None, title: str | None = None) -> FileMeta:
        if not content or not isinstance(content, str):
            raise ValidationFailedError("No content provided")
        name = (title or "").strip() or DEFAULT_PASTE_TITLE
        return await self._create(name, content, FileSource.PASTE)

    async def _create(self, filename: str, content: str, source: FileSource) -> FileMeta:
        file_id = str(uuid.uuid4())
        now = self._clock()

        await self._blobs.put(blob_key(file_id), content)
        meta = FileMeta(
            id=file_id,
            filename=filename,
            source=source,
            size=len(content.encode("utf-8")),
            created=now,
            last_accessed_at=now,
        )
        await save_meta(self._store, meta)
        await self._history.record_view(file_id, filename, source)

        logger.info("Stored %s '%s' (%s, %d bytes)", file_id, filename, source.value, meta.size)
        return meta

    async def list_files(self) -> list[FileMeta]:
        """Every live, non-archived file. Corrupt records are skipped."""
        files: list[FileMeta] = []
        async for _file_id, meta in iter_meta(self._store):
            if meta is None or meta.is_archived:
                continue
            files.append(meta)
        return files

    async def get_file(self, file_id: str) -> FileContent:
        """Return content and record the view (un-archives the file)."""
        content = await self._blobs.get(blob_key(file_id))
        if content is None:
            raise NotFoundError("File not found")

        meta = await load_meta(self._store, file_id)
        if meta is None:
            # Blob without metadata: serve with defaults.
            meta = FileMeta(id=file_id, filename=f"{file_id}.md", source=FileSource.UPLOAD)

        await self._history.record_view(file_id, meta.filename, meta.source)
        return FileContent(meta=await load_meta(self._store, file_id) or meta, content=content)

    async def rename(self, file_id: str, filename: str | None) -> FileMeta:
        trimmed = (filename or "").strip()
        if not trimmed:
            raise ValidationFailedError("Filename is required")

        meta = await load_meta(self._store, file_id)
        if meta is None:
            raise NotFoundError("File not found")

        meta.filename = trimmed
        await save_meta(self._store, meta)
        await self._history.rename_entry(file_id, trimmed)
        return meta

    async def delete(self, file_id: str) -> None:
        """Remove blob, metadata and history entry.

        Folder membership lists are not touched; dangling ids are filtered
        when folders are read.
        """
        await self._blobs.delete(blob_key(file_id))
        await delete_meta(self._store, file_id)
        await self._history.remove_entry(file_id)
        logger.info("Deleted file %s", file_id)
