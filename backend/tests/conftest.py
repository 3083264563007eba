# tests/conftest.py
import os

# antes de importar barberpro: nada de .env real ni IA
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["OPENAI_API_KEY"] = ""
os.environ["ADMIN_PASSPHRASE"] = "test-pass"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from barberpro.db import build_engine, build_sessionmaker, init_db
from barberpro.deps import get_store
from barberpro.main import app
from barberpro.repositories import Barbershop
from barberpro.storage import InMemoryEntityStore, SqlEntityStore


@pytest.fixture
def store():
    return InMemoryEntityStore()


@pytest.fixture
def shop(store):
    return Barbershop(store)


@pytest_asyncio.fixture
async def sql_engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'barberpro-test.db'}")
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def sql_store(sql_engine):
    await init_db(sql_engine)
    return SqlEntityStore(build_sessionmaker(sql_engine))


@pytest_asyncio.fixture
async def api(store):
    """Cliente HTTP contra la app, con el store en memoria."""
    app.dependency_overrides[get_store] = lambda: store
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
