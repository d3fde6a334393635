"""View history routes."""

from fastapi import APIRouter

from mdshelf.schemas.auth import SuccessResponse
from mdshelf.schemas.records import HistoryEntry
from mdshelf.services import get_history_manager

router = APIRouter()


@router.get("", response_model=list[HistoryEntry])
async def list_history():
    """Recently viewed files, newest first; archived files are hidden."""
    return await get_history_manager().list_view()


@router.delete("", response_model=SuccessResponse)
async def clear_history():
    await get_history_manager().clear_all()
    return SuccessResponse()


@router.delete("/{file_id}", response_model=SuccessResponse)
async def remove_history_entry(file_id: str):
    await get_history_manager().remove_entry(file_id)
    return SuccessResponse()
