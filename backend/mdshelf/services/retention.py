"""Retention — ages unfiled files from Active to Archived to Deleted.

Classification is a pure function of ``(now, metadata, folder membership)``
so it can be evaluated in tests without a real clock. The sweep applies the
decisions; every mutation it makes is idempotent, so overlapping or repeated
runs converge to the same state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum

from mdshelf.schemas.records import FileMeta
from mdshelf.services.folder_service import FolderManager
from mdshelf.services.history_service import HistoryManager
from mdshelf.services.metadata import delete_meta, iter_meta, save_meta
from mdshelf.storage import BlobStore, KvStore, blob_key
from mdshelf.utils.clock import Clock, utcnow

logger = logging.getLogger(__name__)


class RetentionState(str, Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"
    DELETED = "deleted"
    EXEMPT = "exempt"


class RetentionAction(str, Enum):
    NONE = "none"
    SKIP = "skip"  # no reference timestamp
    EXEMPT = "exempt"
    ARCHIVE = "archive"
    DELETE = "delete"


@dataclass(frozen=True)
class RetentionDecision:
    action: RetentionAction
    state: RetentionState | None
    clear_folder: bool = False
    age: timedelta | None = None


def classify(
    meta: FileMeta,
    now: datetime,
    membership: dict[str, set[str]],
    archive_after: timedelta,
    delete_after: timedelta,
) -> RetentionDecision:
    """Decide what a sweep at ``now`` does with one file.

    A file is exempt while its ``folderId`` names an existing folder that
    lists it. Exemption does not clear an older ``archivedAt``. A
    ``folderId`` without such a folder is flagged for clearing and the file
    is aged normally in the same pass.
    """
    reference = meta.reference_time
    if reference is None:
        return RetentionDecision(RetentionAction.SKIP, None)

    clear_folder = False
    if meta.folder_id is not None:
        members = membership.get(meta.folder_id)
        if members is not None and meta.id in members:
            state = RetentionState.EXEMPT
            return RetentionDecision(RetentionAction.EXEMPT, state, age=now - reference)
        clear_folder = True

    age = now - reference
    if age >= delete_after:
        return RetentionDecision(RetentionAction.DELETE, RetentionState.DELETED, clear_folder, age)
    if age >= archive_after:
        if meta.archived_at is None:
            return RetentionDecision(RetentionAction.ARCHIVE, RetentionState.ARCHIVED, clear_folder, age)
        return RetentionDecision(RetentionAction.NONE, RetentionState.ARCHIVED, clear_folder, age)

    state = RetentionState.ARCHIVED if meta.archived_at is not None else RetentionState.ACTIVE
    return RetentionDecision(RetentionAction.NONE, state, clear_folder, age)


@dataclass
class RetentionReport:
    started_at: datetime
    scanned: int = 0
    archived: int = 0
    deleted: int = 0
    exempt: int = 0
    cleared_folder_refs: int = 0
    skipped: int = 0
    deleted_ids: list[str] = field(default_factory=list)
    history_removed: int = 0


class RetentionEngine:
    """Runs a sweep over every ``meta:*`` record."""

    def __init__(
        self,
        store: KvStore,
        blobs: BlobStore,
        history: HistoryManager,
        folders: FolderManager,
        archive_after: timedelta = timedelta(days=30),
        delete_after: timedelta = timedelta(days=60),
        clock: Clock = utcnow,
    ):
        if delete_after < archive_after:
            raise ValueError("delete_after must not be shorter than archive_after")
        self._store = store
        self._blobs = blobs
        self._history = history
        self._folders = folders
        self.archive_after = archive_after
        self.delete_after = delete_after
        self._clock = clock

    async def sweep(self, now: datetime | None = None) -> RetentionReport:
        now = now or self._clock()
        report = RetentionReport(started_at=now)
        membership = await self._folders.membership()

        async for file_id, meta in iter_meta(self._store):
            report.scanned += 1
            if meta is None:
                report.skipped += 1
                continue

            decision = classify(meta, now, membership, self.archive_after, self.delete_after)
            logger.debug("Retention %s: %s", file_id, decision.action.value)

            if decision.action == RetentionAction.SKIP:
                report.skipped += 1
                continue
            if decision.action == RetentionAction.EXEMPT:
                report.exempt += 1
                continue

            if decision.clear_folder:
                logger.info("Clearing stale folderId %s on %s", meta.folder_id, file_id)
                meta.folder_id = None
                report.cleared_folder_refs += 1

            if decision.action == RetentionAction.DELETE:
                await self._blobs.delete(blob_key(file_id))
                await delete_meta(self._store, file_id)
                report.deleted += 1
                report.deleted_ids.append(file_id)
            elif decision.action == RetentionAction.ARCHIVE:
                meta.archived_at = now
                await save_meta(self._store, meta)
                report.archived += 1
            elif decision.clear_folder:
                await save_meta(self._store, meta)

        if report.deleted_ids:
            report.history_removed = await self._history.remove_entries(report.deleted_ids)

        logger.info(
            "Retention sweep: scanned=%d archived=%d deleted=%d exempt=%d cleared=%d skipped=%d",
            report.scanned, report.archived, report.deleted, report.exempt,
            report.cleared_folder_refs, report.skipped,
        )
        return report
