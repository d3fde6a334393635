"""Health and retention schemas."""

from datetime import datetime

from pydantic import BaseModel

from mdshelf.schemas.files import ApiModel


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "ok"
    version: str
    service: str = "mdshelf"
    retention_enabled: bool = True


class RetentionReportOut(ApiModel):
    started_at: datetime
    scanned: int
    archived: int
    deleted: int
    exempt: int
    cleared_folder_refs: int
    skipped: int
    deleted_ids: list[str]
    history_removed: int


class RetentionPolicy(ApiModel):
    archive_after_days: float
    delete_after_days: float
    scheduler_running: bool
    last_run: RetentionReportOut | None = None
