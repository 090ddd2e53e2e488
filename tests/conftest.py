from contextlib import asynccontextmanager

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from auth_service.core.config import Settings
from auth_service.core.security import StateSigner
from auth_service.main import app as auth_app
from auth_service.services.auth import AuthService, build_auth_service
from auth_service.services.github_oauth import GitHubOAuthClient
from auth_service.services.record_store import RecordStoreClient
from record_store import models  # noqa: F401
from record_store.core.dependencies import get_db
from record_store.db.base import Base
from record_store.db.session import build_engine
from record_store.main import app as store_app

STORE_BASE_URL = "http://record-store/api"

GITHUB_PROFILE = {
    "id": 4242,
    "login": "octocat",
    "name": "Mona Lisa Octocat",
    "avatar_url": "https://avatars.githubusercontent.com/u/4242",
}
GITHUB_EMAIL = "mona@x.com"


@pytest_asyncio.fixture
async def session_factory():
    """
    Fresh in-memory SQLite database per test, shared by every connection.
    """
    engine = build_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    await engine.dispose()


@pytest.fixture
def session_scope(session_factory):
    """Stand-in for ``record_store.db.session.get_session`` bound to the test database."""

    @asynccontextmanager
    async def _scope():
        async with session_factory() as session:
            yield session

    return _scope


@pytest_asyncio.fixture
async def store_http(session_factory):
    """
    HTTPX client talking to the record store app in-process.
    """

    async def _get_db():
        async with session_factory() as session:
            yield session

    store_app.dependency_overrides[get_db] = _get_db
    transport = ASGITransport(app=store_app)
    async with AsyncClient(transport=transport, base_url=STORE_BASE_URL) as client:
        yield client
    store_app.dependency_overrides.clear()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        jwt_secret="test-access-secret",
        jwt_refresh_secret="test-refresh-secret",
        expose_reset_links=True,
        frontend_url="http://frontend.test",
        github_client_id="test-client-id",
        github_client_secret="test-client-secret",
    )


@pytest.fixture
def store(store_http) -> RecordStoreClient:
    return RecordStoreClient(store_http)


@pytest.fixture
def auth_service(store, settings) -> AuthService:
    return build_auth_service(store, settings)


def _github_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/login/oauth/access_token":
        if b"bad-code" in request.content:
            return httpx.Response(200, json={"error": "bad_verification_code"})
        return httpx.Response(200, json={"access_token": "gho_test"})
    if request.url.path == "/user":
        return httpx.Response(200, json=GITHUB_PROFILE)
    if request.url.path == "/user/emails":
        return httpx.Response(200, json=[{"email": GITHUB_EMAIL, "primary": True, "verified": True}])
    return httpx.Response(404)


@pytest_asyncio.fixture
async def github_client(settings):
    http = httpx.AsyncClient(transport=httpx.MockTransport(_github_handler))
    yield GitHubOAuthClient(http, settings)
    await http.aclose()


@pytest_asyncio.fixture
async def client(auth_service, github_client, settings):
    """
    Provide an HTTPX AsyncClient bound to the authentication app.
    """
    auth_app.state.auth_service = auth_service
    auth_app.state.github_client = github_client
    auth_app.state.state_signer = StateSigner(settings.jwt_secret)
    auth_app.state.settings = settings
    transport = ASGITransport(app=auth_app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client


@pytest_asyncio.fixture
async def register_user(client):
    """
    Factory fixture registering a user through the API and returning the JSON body.
    """

    async def _register(email: str = "a@x.com", password: str = "Abc12345!", **extra) -> dict:
        resp = await client.post("/api/auth/register", json={"email": email, "password": password, **extra})
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _register


@pytest.fixture
def bearer():
    def _headers(access_token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {access_token}"}

    return _headers
