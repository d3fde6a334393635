"""Folder routes — grouping, membership and cascade delete."""

from fastapi import APIRouter, status

from mdshelf.schemas.files import (
    AddFileRequest,
    FolderDeleted,
    FolderNameRequest,
    FolderOut,
    MoveFileRequest,
)
from mdshelf.services import get_folder_manager

router = APIRouter()


async def _resolved(folder_id: str) -> FolderOut:
    """Folder as returned by GET, with member files resolved."""
    view = await get_folder_manager().get(folder_id)
    return FolderOut.from_folder(view.folder, view.files)


@router.get("", response_model=list[FolderOut])
async def list_folders():
    views = await get_folder_manager().list()
    return [FolderOut.from_folder(v.folder, v.files) for v in views]


@router.post("", response_model=FolderOut, status_code=status.HTTP_201_CREATED)
async def create_folder(body: FolderNameRequest):
    folder = await get_folder_manager().create(body.name)
    return FolderOut.from_folder(folder)


@router.get("/{folder_id}", response_model=FolderOut)
async def get_folder(folder_id: str):
    return await _resolved(folder_id)


@router.patch("/{folder_id}", response_model=FolderOut)
async def rename_folder(folder_id: str, body: FolderNameRequest):
    folder = await get_folder_manager().rename(folder_id, body.name)
    return await _resolved(folder.id)


@router.delete("/{folder_id}", response_model=FolderDeleted)
async def delete_folder(folder_id: str):
    """Delete the folder and every file in it."""
    deleted = await get_folder_manager().delete(folder_id)
    return FolderDeleted(deleted_file_ids=deleted)


@router.post("/{folder_id}/files", response_model=FolderOut)
async def add_file(folder_id: str, body: AddFileRequest):
    folder = await get_folder_manager().add_file(folder_id, body.file_id)
    return await _resolved(folder.id)


@router.delete("/{folder_id}/files/{file_id}", response_model=FolderOut)
async def remove_file(folder_id: str, file_id: str):
    """Unfile a file; the file itself is kept."""
    folder = await get_folder_manager().remove_file(folder_id, file_id)
    return await _resolved(folder.id)


@router.post("/{folder_id}/files/{file_id}/move", response_model=FolderOut)
async def move_file(folder_id: str, file_id: str, body: MoveFileRequest):
    folder = await get_folder_manager().move(folder_id, file_id, body.target_folder_id)
    return await _resolved(folder.id)
