"""MdShelf FastAPI application factory."""

from __future__ import annotations

import logging
import re
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from mdshelf import __version__
from mdshelf.config import settings
from mdshelf.database import async_session, init_db
from mdshelf.errors import MdShelfError
from mdshelf.services import init_services, shutdown_services

logger = logging.getLogger(__name__)

_FILE_LINK_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)


@asynccontextmanager
async def _lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    # === STARTUP ===
    _setup_logging()

    for d in (settings.data_dir, settings.blob_dir):
        Path(d).mkdir(parents=True, exist_ok=True)

    await init_db()
    init_services(async_session)
    logger.info("MdShelf v%s started — listening on %s:%s", __version__, settings.host, settings.port)

    try:
        yield
    finally:
        # === SHUTDOWN ===
        await shutdown_services()
        logger.info("MdShelf shutting down")


def _setup_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    for noisy in ("aiosqlite", "apscheduler", "multipart"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


async def _mdshelf_error_handler(request: Request, exc: MdShelfError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def _mount_frontend(app: FastAPI, static_dir: Path) -> None:
    """Serve the single-page frontend with deep links to ``/<file-id>``."""
    _index = static_dir / "index.html"

    @app.get("/", include_in_schema=False)
    async def _spa_root():
        return FileResponse(_index)

    @app.get("/{full_path:path}", include_in_schema=False)
    async def _spa_fallback(full_path: str):
        # Try to serve the exact file first (css, js, favicon ...)
        file_path = (static_dir / full_path).resolve()
        if full_path and file_path.is_file() and file_path.is_relative_to(static_dir.resolve()):
            return FileResponse(file_path)
        if _FILE_LINK_RE.match(full_path):
            return FileResponse(_index)
        return JSONResponse({"detail": "Not Found"}, status_code=404)


def create_app() -> FastAPI:
    """Application factory."""
    from mdshelf.api.routes import api_router

    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        debug=settings.debug,
        lifespan=_lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(MdShelfError, _mdshelf_error_handler)

    app.include_router(api_router, prefix=settings.api_prefix)

    static_dir = Path(settings.frontend_dir)
    if static_dir.is_dir() and (static_dir / "index.html").exists():
        _mount_frontend(app, static_dir)
        logger.info("Frontend mounted from %s", static_dir)
    else:
        logger.info("No frontend found at %s — API-only mode", static_dir)

    return app


app = create_app()


def run(**kwargs: Any) -> None:
    import uvicorn

    uvicorn.run(
        "mdshelf.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        **kwargs,
    )


if __name__ == "__main__":
    run()
