"""Test fixtures — temp SQLite store, blob directory, controllable clock, API client."""

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mdshelf.api.deps import require_auth
from mdshelf.database import build_engine, init_db
from mdshelf.main import create_app
from mdshelf.services import init_services, shutdown_services
from mdshelf.services.file_service import FileService
from mdshelf.services.folder_service import FolderManager
from mdshelf.services.history_service import HistoryManager
from mdshelf.services.retention import RetentionEngine
from mdshelf.storage import BlobStore, KvStore

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """Async sessions on a throwaway SQLite file."""
    engine = build_engine(tmp_path / "test.db", pool_size=2)
    await init_db(engine)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def store(session_factory):
    return KvStore(session_factory)


@pytest.fixture
def blobs(tmp_path):
    return BlobStore(tmp_path / "blobs")


@pytest.fixture
def history(store, clock):
    return HistoryManager(store, limit=100, clock=clock)


@pytest.fixture
def files(store, blobs, history, clock):
    return FileService(store, blobs, history, clock=clock)


@pytest.fixture
def folders(store, blobs, history, clock):
    return FolderManager(store, blobs, history, clock=clock)


@pytest.fixture
def retention(store, blobs, history, folders, clock):
    return RetentionEngine(
        store,
        blobs,
        history,
        folders,
        archive_after=timedelta(days=30),
        delete_after=timedelta(days=60),
        clock=clock,
    )


@pytest_asyncio.fixture
async def app(session_factory, tmp_path, clock):
    """App wired to the temp store; lifespan is not run by ASGITransport."""
    init_services(session_factory, blob_dir=tmp_path / "app-blobs", clock=clock, start_scheduler=False)
    application = create_app()
    yield application
    await shutdown_services()


@pytest_asyncio.fixture
async def client(app):
    """Authenticated async test client."""
    app.dependency_overrides[require_auth] = lambda: None

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c


@pytest_asyncio.fixture
async def anon_client(app):
    """Async test client without a session cookie."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c
