"""File API routes — upload, paste, listing, content, rename, delete."""

from fastapi import APIRouter, File, UploadFile

from mdshelf.errors import ValidationFailedError
from mdshelf.schemas.auth import SuccessResponse
from mdshelf.schemas.files import (
    CreatedFile,
    FileContentResponse,
    FileItem,
    PasteRequest,
    RenameRequest,
)
from mdshelf.services import get_file_service

router = APIRouter()


@router.post("/upload", response_model=CreatedFile)
async def upload_file(file: UploadFile | None = File(None)):
    """Upload a single ``.md`` file (multipart field ``file``)."""
    if file is None:
        raise ValidationFailedError("No file provided")
    raw = await file.read()
    meta = await get_file_service().upload(file.filename, raw.decode("utf-8", errors="replace"))
    return CreatedFile(id=meta.id, filename=meta.filename)


@router.post("/paste", response_model=CreatedFile)
async def paste(body: PasteRequest):
    meta = await get_file_service().paste(body.content, body.title)
    return CreatedFile(id=meta.id, filename=meta.filename)


@router.get("/files", response_model=list[FileItem])
async def list_files():
    """Live files; archived ones are hidden."""
    files = await get_file_service().list_files()
    return [FileItem.from_meta(m) for m in files]


@router.get("/files/{file_id}", response_model=FileContentResponse)
async def get_file(file_id: str):
    """File content. Counts as a view: moves it up the history and un-archives it."""
    result = await get_file_service().get_file(file_id)
    return FileContentResponse(
        id=result.meta.id,
        filename=result.meta.filename,
        content=result.content,
        folder_id=result.meta.folder_id,
    )


@router.patch("/files/{file_id}", response_model=CreatedFile)
async def rename_file(file_id: str, body: RenameRequest):
    meta = await get_file_service().rename(file_id, body.filename)
    return CreatedFile(id=meta.id, filename=meta.filename)


@router.delete("/files/{file_id}", response_model=SuccessResponse)
async def delete_file(file_id: str):
    await get_file_service().delete(file_id)
    return SuccessResponse()
