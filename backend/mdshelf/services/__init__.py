"""Business logic services — singleton registry."""

from __future__ import annotations

import logging
from datetime import timedelta
from pathlib import Path
from typing import TYPE_CHECKING

from mdshelf.config import settings

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from mdshelf.services.file_service import FileService
    from mdshelf.services.folder_service import FolderManager
    from mdshelf.services.history_service import HistoryManager
    from mdshelf.services.retention import RetentionEngine
    from mdshelf.services.scheduler import RetentionScheduler
    from mdshelf.utils.clock import Clock

logger = logging.getLogger(__name__)

_history: HistoryManager | None = None
_files: FileService | None = None
_folders: FolderManager | None = None
_retention: RetentionEngine | None = None
_scheduler: RetentionScheduler | None = None


def init_services(
    session_factory: async_sessionmaker[AsyncSession],
    blob_dir: str | Path | None = None,
    clock: Clock | None = None,
    start_scheduler: bool | None = None,
) -> None:
    """Create and wire up all service singletons."""
    global _history, _files, _folders, _retention, _scheduler

    from mdshelf.services.file_service import FileService
    from mdshelf.services.folder_service import FolderManager
    from mdshelf.services.history_service import HistoryManager
    from mdshelf.services.retention import RetentionEngine
    from mdshelf.services.scheduler import RetentionScheduler
    from mdshelf.storage import BlobStore, KvStore
    from mdshelf.utils.clock import utcnow

    clock = clock or utcnow
    store = KvStore(session_factory, page_size=settings.kv_page_size)
    blobs = BlobStore(blob_dir or settings.blob_dir)

    _history = HistoryManager(store, limit=settings.history_limit, clock=clock)
    _files = FileService(store, blobs, _history, clock=clock)
    _folders = FolderManager(store, blobs, _history, clock=clock)
    _retention = RetentionEngine(
        store,
        blobs,
        _history,
        _folders,
        archive_after=timedelta(days=settings.archive_after_days),
        delete_after=timedelta(days=settings.delete_after_days),
        clock=clock,
    )

    if start_scheduler is None:
        start_scheduler = settings.retention_enabled
    if start_scheduler:
        _scheduler = RetentionScheduler(_retention)
        _scheduler.start()
    else:
        logger.warning("Retention scheduler disabled (MDSHELF_RETENTION_ENABLED=false)")

    logger.info("Services initialized — blobs in %s", blobs.root)


async def shutdown_services() -> None:
    """Stop the scheduler and drop the singletons."""
    global _history, _files, _folders, _retention, _scheduler
    if _scheduler:
        await _scheduler.stop()
        _scheduler = None
    _history = _files = _folders = _retention = None


def get_history_manager() -> HistoryManager:
    if _history is None:
        raise RuntimeError("Services not initialized — call init_services() first")
    return _history


def get_file_service() -> FileService:
    if _files is None:
        raise RuntimeError("Services not initialized — call init_services() first")
    return _files


def get_folder_manager() -> FolderManager:
    if _folders is None:
        raise RuntimeError("Services not initialized — call init_services() first")
    return _folders


def get_retention_engine() -> RetentionEngine:
    if _retention is None:
        raise RuntimeError("Services not initialized — call init_services() first")
    return _retention


def get_scheduler() -> RetentionScheduler | None:
    return _scheduler
