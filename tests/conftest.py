import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from recordic import RecordStore, Recordic, apply_schema, drop_schema

SQLITE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture
async def engine():
    """In-memory SQLite shared across sessions through a single connection."""
    engine = create_async_engine(SQLITE_URL, poolclass=StaticPool)
    await apply_schema(engine)
    yield engine
    await drop_schema(engine)
    await engine.dispose()


@pytest.fixture
def store(engine):
    return RecordStore(engine)


@pytest.fixture(autouse=True)
def _reset_runtime():
    yield
    Recordic._singleton = None
