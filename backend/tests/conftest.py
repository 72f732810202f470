"""
Pytest configuration and fixtures for LawConnect tests.
"""
import os
from datetime import datetime, timedelta

# Provide minimal env for Settings validation during import.
os.environ.setdefault("MONGODB_URL", "mongodb://localhost:27017")
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "4")
os.environ.setdefault("AI_API_BASE_URL", "http://ai.test/api/gpt")

import httpx
import pytest
import pytest_asyncio
from mongomock_motor import AsyncMongoMockClient

from lawconnect.db.mongodb import ensure_indexes, get_database
from lawconnect.api.deps import get_password_reset_service
from lawconnect.main import create_app
from lawconnect.services.ai import AIService, get_ai_service
from lawconnect.services.password_reset import PasswordResetService


class FakeClock:
    """Settable stand-in for datetime.utcnow."""

    def __init__(self, now=None):
        self.now = now or datetime.utcnow()

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class FakeUpstream:
    """
    httpx.MockTransport handler playing the external chat API. Tests set
    ``reply``, ``status_code`` or ``error`` before calling the service.
    """

    def __init__(self):
        self.requests = []
        self.reply = {"message": "Here is some general information.", "chatId": "chat_upstream"}
        self.status_code = 200
        self.error = None

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if isinstance(self.reply, (bytes, str)):
            return httpx.Response(self.status_code, content=self.reply)
        return httpx.Response(self.status_code, json=self.reply)


@pytest_asyncio.fixture
async def db():
    """In-memory Motor database with the production indexes."""
    client = AsyncMongoMockClient()
    database = client["lawconnect_test"]
    await ensure_indexes(database)
    return database


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest_asyncio.fixture
async def ai_service(upstream):
    http = httpx.AsyncClient(transport=httpx.MockTransport(upstream))
    service = AIService(client=http)
    yield service
    await http.aclose()


@pytest.fixture
def app(db, ai_service, clock):
    app = create_app()
    app.dependency_overrides[get_database] = lambda: db
    app.dependency_overrides[get_ai_service] = lambda: ai_service
    app.dependency_overrides[get_password_reset_service] = lambda: PasswordResetService(db, clock=clock)
    return app


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def register(client):
    """Register a user through the API and return (user, token)."""

    async def _register(email="alice@example.com", password="Passw0rd", role="client", name="Alice Smith", **extra):
        payload = {"name": name, "email": email, "password": password, "role": role, **extra}
        response = await client.post("/api/auth/register", json=payload)
        assert response.status_code == 201, response.text
        data = response.json()["data"]
        return data["user"], data["token"]

    return _register
