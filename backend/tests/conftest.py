"""Test fixtures — temporary SQLite database, sample devices and FastAPI test client."""

from datetime import datetime, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from powerwatch.config import settings
from powerwatch.database import configure_sqlite, get_db
from powerwatch.main import create_app
from powerwatch.models.base import Base
from powerwatch.models.device import Device, DeviceBinding

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
METER_MAC = "AA:BB:CC:DD:EE:01"


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """Session factory on a fresh file database (real connections, FKs on)."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    event.listen(engine.sync_engine, "connect", configure_sqlite)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def meter(session_factory) -> Device:
    """A device with one bound MAC address."""
    async with session_factory() as db:
        device = Device(id="dev-1", name="Main Meter", location="Plant A")
        db.add(device)
        db.add(DeviceBinding(device_id="dev-1", mac_address=METER_MAC))
        await db.commit()
        return device


@pytest_asyncio.fixture
async def client(db_session: AsyncSession):
    """Async test client with overridden DB dependency."""
    app = create_app()

    async def _override_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


def make_token(subject: str = "admin") -> str:
    return jwt.encode({"sub": subject}, settings.secret_key, algorithm=settings.token_algorithm)


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token()}"}
