"""
Shared fixtures.

Every test gets its own application bound to a fresh in-memory SQLite
database; requests go through httpx without a real server.
"""
import uuid

import pytest
from httpx import ASGITransport, AsyncClient

from fintrack.core.config import Settings
from fintrack.main import create_app, init_database

API = "/api/v1"


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        SECRET_KEY="test-secret-key-that-is-long-enough-for-hs256",
        AUTO_CREATE_TABLES=True,
        ENVIRONMENT="test",
    )


@pytest.fixture
async def app(settings):
    app = create_app(settings)
    # ASGITransport does not run the lifespan
    await init_database(app.state.context)
    yield app
    await app.state.context.engine.dispose()


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def session_factory(app):
    return app.state.context.session_factory


async def register(client, username=None, password="supersecret1", name="Test User"):
    username = username or f"user{uuid.uuid4().hex[:8]}"
    response = await client.post(
        f"{API}/auth/register",
        json={
            "name": name,
            "username": username,
            "email": f"{username}@example.com",
            "password": password,
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
async def auth(client):
    """Registered user: (headers, body of the register response)"""
    body = await register(client)
    return {"Authorization": f"Bearer {body['token']}"}, body


@pytest.fixture
def headers(auth):
    return auth[0]


async def default_wallet(client, headers):
    response = await client.get(f"{API}/wallets", headers=headers)
    assert response.status_code == 200
    wallets = response.json()["data"]
    return next(w for w in wallets if w["is_default"])


async def find_category(client, headers, name, category_type="expense"):
    response = await client.get(f"{API}/categories", headers=headers)
    return next(
        c for c in response.json()["data"]
        if c["name"] == name and c["category_type"] == category_type
    )
