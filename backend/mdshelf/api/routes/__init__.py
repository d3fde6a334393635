"""API route registration."""

from fastapi import APIRouter, Depends

from mdshelf.api.deps import require_auth
from mdshelf.api.routes import auth, files, folders, health, history, retention

api_router = APIRouter()

protected = [Depends(require_auth)]

api_router.include_router(health.router, tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(files.router, tags=["files"], dependencies=protected)
api_router.include_router(history.router, prefix="/history", tags=["history"], dependencies=protected)
api_router.include_router(folders.router, prefix="/folders", tags=["folders"], dependencies=protected)
api_router.include_router(retention.router, prefix="/retention", tags=["retention"], dependencies=protected)
