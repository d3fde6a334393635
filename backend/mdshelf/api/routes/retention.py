"""Retention routes — policy inspection and a manual sweep trigger."""

from dataclasses import asdict

from fastapi import APIRouter

from mdshelf.schemas.system import RetentionPolicy, RetentionReportOut
from mdshelf.services import get_retention_engine, get_scheduler

router = APIRouter()


@router.get("/policy", response_model=RetentionPolicy)
async def retention_policy():
    engine = get_retention_engine()
    scheduler = get_scheduler()
    last = scheduler.last_report if scheduler else None
    return RetentionPolicy(
        archive_after_days=engine.archive_after.total_seconds() / 86400,
        delete_after_days=engine.delete_after.total_seconds() / 86400,
        scheduler_running=scheduler is not None and scheduler.running,
        last_run=RetentionReportOut(**asdict(last)) if last else None,
    )


@router.post("/run", response_model=RetentionReportOut)
async def run_retention():
    """Run one sweep now, outside the daily schedule."""
    report = await get_retention_engine().sweep()
    return RetentionReportOut(**asdict(report))
