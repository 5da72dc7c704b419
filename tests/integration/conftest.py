"""Shared in-memory SQLite engine for integration tests.

Every test module maps its tables on sqlcrud.infrastructure.database.Base, so
the schema is created from Base.metadata once per test.
"""

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from sqlcrud.infrastructure.database import Base, create_session_factory


@pytest.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)
