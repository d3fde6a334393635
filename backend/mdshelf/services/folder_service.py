"""Folders — named groups of files with a denormalized back-reference.

The ``folders`` list is the authoritative membership index; ``folderId`` on
file metadata is a cache used for lookups and retention exemption. The two
are written separately without a transaction, so readers filter ids whose
metadata is gone and the retention sweep clears stale ``folderId`` values.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field

from mdshelf.errors import NotFoundError, ValidationFailedError
from mdshelf.schemas.records import FOLDER_ID_PREFIX, FOLDERS_KEY, FileMeta, Folder
from mdshelf.services.history_service import HistoryManager
from mdshelf.services.metadata import delete_meta, load_meta, save_meta
from mdshelf.storage import BlobStore, KvStore, blob_key
from mdshelf.utils.clock import Clock, utcnow

logger = logging.getLogger(__name__)


@dataclass
class FolderView:
    """A folder with its member ids resolved to metadata."""

    folder: Folder
    files: list[FileMeta] = field(default_factory=list)


def _clean_name(name: str | None) -> str:
    trimmed = (name or "").strip()
    if not trimmed:
        raise ValidationFailedError("Folder name is required")
    return trimmed


def _find(folders: list[Folder], folder_id: str) -> Folder:
    for folder in folders:
        if folder.id == folder_id:
            return folder
    raise NotFoundError("Folder not found")


class FolderManager:
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

    async def read(self) -> list[Folder]:
        return await self._store.get_list(FOLDERS_KEY, Folder)

    async def _write(self, folders: list[Folder]) -> None:
        await self._store.put_list(FOLDERS_KEY, folders)

    async def membership(self) -> dict[str, set[str]]:
        """Folder id -> member file ids, straight from the folder list."""
        return {f.id: set(f.file_ids) for f in await self.read()}

    async def create(self, name: str | None) -> Folder:
        folder = Folder(
            id=f"{FOLDER_ID_PREFIX}{uuid.uuid4()}",
            name=_clean_name(name),
            file_ids=[],
            created=self._clock(),
        )
        folders = await self.read()
        folders.append(folder)
        await self._write(folders)
        logger.info("Created folder %s '%s'", folder.id, folder.name)
        return folder

    async def rename(self, folder_id: str, name: str | None) -> Folder:
        trimmed = _clean_name(name)
        folders = await self.read()
        folder = _find(folders, folder_id)
        folder.name = trimmed
        await self._write(folders)
        return folder

    async def add_file(self, folder_id: str, file_id: str) -> Folder:
        """File ``file_id`` under ``folder_id``, taking it out of any other folder."""
        folders = await self.read()
        target = _find(folders, folder_id)
        meta = await load_meta(self._store, file_id)
        if meta is None:
            raise NotFoundError("File not found")

        for folder in folders:
            if folder.id != folder_id and file_id in folder.file_ids:
                folder.file_ids = [i for i in folder.file_ids if i != file_id]
        if file_id not in target.file_ids:
            target.file_ids.append(file_id)
        await self._write(folders)

        # Second, separate write: a crash here leaves folderId behind.
        meta.folder_id = folder_id
        await save_meta(self._store, meta)
        return target

    async def remove_file(self, folder_id: str, file_id: str) -> Folder:
        folders = await self.read()
        folder = _find(folders, folder_id)
        folder.file_ids = [i for i in folder.file_ids if i != file_id]
        await self._write(folders)

        try:
            meta = await load_meta(self._store, file_id)
            if meta is not None and meta.folder_id == folder_id:
                meta.folder_id = None
                await save_meta(self._store, meta)
        except Exception as e:
            logger.warning("Failed to clear folderId on %s: %s", file_id, e)
        return folder

    async def move(self, source_id: str, file_id: str, target_id: str) -> Folder:
        folders = await self.read()
        _find(folders, source_id)
        target = _find(folders, target_id)
        meta = await load_meta(self._store, file_id)
        if meta is None:
            raise NotFoundError("File not found")

        for folder in folders:
            if folder.id != target_id and file_id in folder.file_ids:
                folder.file_ids = [i for i in folder.file_ids if i != file_id]
        # Idempotent against a double-submitted move.
        if file_id not in target.file_ids:
            target.file_ids.append(file_id)
        await self._write(folders)

        meta.folder_id = target_id
        await save_meta(self._store, meta)
        return target

    async def delete(self, folder_id: str) -> list[str]:
        """Delete a folder together with every member file.

        There is no rollback: a failure part-way leaves the remaining members
        and the folder record in place.
        """
        folder = _find(await self.read(), folder_id)

        deleted: list[str] = []
        for file_id in folder.file_ids:
            await self._blobs.delete(blob_key(file_id))
            await delete_meta(self._store, file_id)
            deleted.append(file_id)
        await self._history.remove_entries(deleted)

        # Re-read so concurrent changes to other folders are not clobbered.
        folders = [f for f in await self.read() if f.id != folder_id]
        await self._write(folders)
        logger.info("Deleted folder %s with %d file(s)", folder_id, len(deleted))
        return deleted

    async def _resolve(self, folder: Folder) -> FolderView:
        files: list[FileMeta] = []
        for file_id in folder.file_ids:
            meta = await load_meta(self._store, file_id)
            if meta is not None:
                files.append(meta)
        return FolderView(folder=folder, files=files)

    async def get(self, folder_id: str) -> FolderView:
        return await self._resolve(_find(await self.read(), folder_id))

    async def list(self) -> list[FolderView]:
        """Every folder with resolved files; dangling ids are skipped, not removed."""
        return [await self._resolve(f) for f in await self.read()]
