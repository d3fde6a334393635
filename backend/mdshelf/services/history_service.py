"""View history — recency-ordered, size-capped log of viewed files."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable

from mdshelf.schemas.records import HISTORY_KEY, FileSource, HistoryEntry
from mdshelf.services.metadata import load_meta, save_meta
from mdshelf.storage import KvStore
from mdshelf.utils.clock import Clock, utcnow

logger = logging.getLogger(__name__)


class HistoryManager:
    """Maintains the global ``history`` list and the retention clock.

    The list is read-modify-written as a whole; concurrent writers can lose
    updates.
    """

    def __init__(self, store: KvStore, limit: int = 100, clock: Clock = utcnow):
        self._store = store
        self._limit = limit
        self._clock = clock

    async def read(self) -> list[HistoryEntry]:
        """Raw history, including entries for archived or deleted files."""
        return await self._store.get_list(HISTORY_KEY, HistoryEntry)

    async def _write(self, entries: list[HistoryEntry]) -> None:
        await self._store.put_list(HISTORY_KEY, entries)

    async def record_view(self, file_id: str, filename: str, source: FileSource | str) -> HistoryEntry:
        """Move ``file_id`` to the front of the history and reset its retention clock.

        This is the only path that refreshes ``lastAccessedAt`` and reverses
        archival. The metadata refresh is best-effort; the history write
        happens regardless.
        """
        now = self._clock()
        await self._touch(file_id, now)

        entries = [e for e in await self.read() if e.id != file_id]
        entry = HistoryEntry(id=file_id, filename=filename, source=source, viewed_at=now)
        entries.insert(0, entry)
        await self._write(entries[: self._limit])
        return entry

    async def _touch(self, file_id: str, now: datetime) -> None:
        try:
            meta = await load_meta(self._store, file_id)
            if meta is None:
                return
            meta.last_accessed_at = now
            if meta.archived_at is not None:
                logger.info("Un-archiving %s on view", file_id)
                meta.archived_at = None
            await save_meta(self._store, meta)
        except Exception as e:
            logger.warning("Failed to refresh metadata for %s: %s", file_id, e)

    async def list_view(self) -> list[HistoryEntry]:
        """History for display: recency-first, hiding archived or missing files."""
        visible: list[HistoryEntry] = []
        for entry in await self.read():
            meta = await load_meta(self._store, entry.id)
            if meta is None or meta.is_archived:
                continue
            visible.append(entry)
        return visible

    async def remove_entry(self, file_id: str) -> None:
        await self.remove_entries([file_id])

    async def remove_entries(self, file_ids: Iterable[str]) -> int:
        """Drop several ids in one rewrite. Returns how many entries went away."""
        doomed = set(file_ids)
        if not doomed:
            return 0
        entries = await self.read()
        kept = [e for e in entries if e.id not in doomed]
        removed = len(entries) - len(kept)
        if removed:
            await self._write(kept)
        return removed

    async def rename_entry(self, file_id: str, filename: str) -> None:
        """Refresh the filename snapshot after a rename."""
        entries = await self.read()
        changed = False
        for entry in entries:
            if entry.id == file_id and entry.filename != filename:
                entry.filename = filename
                changed = True
        if changed:
            await self._write(entries)

    async def clear_all(self) -> None:
        await self._write([])
        logger.info("History cleared")
