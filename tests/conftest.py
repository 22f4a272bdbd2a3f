"""Test configuration and fixtures."""

import os
import tempfile

import httpx
import pytest
import pytest_asyncio

# Settings are read at import time, so set them BEFORE pokecatch is imported.
TEST_DB_PATH = os.path.join(tempfile.gettempdir(), f"pokecatch_test_{os.getpid()}.db")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
os.environ["JWT_SECRET"] = "test-signing-secret-that-is-long-enough-for-hs256"
os.environ["JWT_SECRETS"] = ""
os.environ["JWT_ACTIVE_KEY_ID"] = ""
os.environ["BCRYPT_ROUNDS"] = "4"

from fastapi.testclient import TestClient

from pokecatch.main import app
from pokecatch.utils.clients import get_catalog_client
from pokecatch.utils.database import AsyncSessionLocal, Base, engine

CATALOG_BASE_URL = "https://catalog.test/api/v2"

CATALOG = {
    "pikachu": {"name": "pikachu", "height": 4, "types": [{"slot": 1, "type": {"name": "electric"}}]},
    "bulbasaur": {
        "name": "bulbasaur",
        "height": 7,
        "types": [
            {"slot": 2, "type": {"name": "poison"}},
            {"slot": 1, "type": {"name": "grass"}},
        ],
    },
}


class FakeCatalog:
    """Stands in for PokeAPI behind an httpx.MockTransport."""

    def __init__(self):
        self.requested = []
        self.down = False

    def handler(self, request: httpx.Request) -> httpx.Response:
        name = request.url.path.rsplit("/", 1)[-1]
        self.requested.append(name)
        if self.down:
            raise httpx.ConnectError("catalog unreachable", request=request)
        if name not in CATALOG:
            return httpx.Response(404, text="Not Found")
        return httpx.Response(200, json=CATALOG[name])

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler), base_url=CATALOG_BASE_URL)


def _remove_test_db():
    if os.path.exists(TEST_DB_PATH):
        os.remove(TEST_DB_PATH)


@pytest.fixture
def catalog():
    return FakeCatalog()


@pytest.fixture
def client(catalog):
    """TestClient on a fresh database; the lifespan recreates the tables."""
    _remove_test_db()

    async def _catalog_client():
        async with catalog.client() as c:
            yield c

    app.dependency_overrides[get_catalog_client] = _catalog_client
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    _remove_test_db()


@pytest_asyncio.fixture
async def db():
    """Async session on a fresh database, for service-level tests."""
    _remove_test_db()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with AsyncSessionLocal() as session:
        yield session
    await engine.dispose()
    _remove_test_db()


@pytest_asyncio.fixture
async def catalog_client(catalog):
    async with catalog.client() as c:
        yield c


@pytest.fixture
def login(client):
    """Sign up (idempotent) and sign in; returns the bearer header for that account."""

    def _login(email: str, password: str) -> dict:
        client.post("/signup", json={"email": email, "password": password})
        response = client.post("/signin", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _login
