"""Shared pytest fixtures for unit and integration tests."""

import os
import uuid
import pytest
from dotenv import load_dotenv

# Load .env so DATABASE_URL, SECRET_KEY available for requires_db check
load_dotenv()
# Rate limits would trip on the many logins a test run makes
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from httpx import ASGITransport, AsyncClient

from app.main import app
from app.config import settings
from app.core.access import Principal
from app.models.enums import UserRole, UserStatus

# Skip DB-backed integration tests if DATABASE_URL or SECRET_KEY not set
requires_db = pytest.mark.skipif(
    not os.getenv("DATABASE_URL") or not os.getenv("SECRET_KEY"),
    reason="DATABASE_URL and SECRET_KEY must be set",
)


def make_principal(
    role: UserRole = UserRole.DEVELOPER,
    status: UserStatus = UserStatus.ACTIVE,
    is_trainee: bool = False,
) -> Principal:
    """Principal with a fresh id, for policy tests that never touch the DB."""
    return Principal(
        id=uuid.uuid4(),
        email=f"{role.value.lower()}_{uuid.uuid4().hex[:6]}@test-univ.edu",
        role=role,
        status=status,
        is_trainee=is_trainee,
    )


@pytest.fixture
def api_base() -> str:
    """Base URL for API requests."""
    return f"http://test{settings.API_V1_PREFIX}"


@pytest.fixture
async def async_client(api_base: str):
    """Async HTTP client bound to the ASGI app."""
    transport = ASGITransport(app=app)
    client = AsyncClient(transport=transport, base_url=api_base, timeout=30.0)
    yield client
    await client.aclose()


@pytest.fixture
def unique_suffix() -> str:
    """Unique suffix for test data to avoid collisions."""
    return str(uuid.uuid4())[:8]


@pytest.fixture
async def db_ready():
    """
    Create the tables and hand back the session factory.

    The engine pool is disposed afterwards so no connection outlives the
    test's event loop.
    """
    from app.database import AsyncSessionLocal, engine, init_db

    await init_db()
    yield AsyncSessionLocal
    await engine.dispose()


async def login(async_client: AsyncClient, api_base: str, email: str) -> dict:
    """Log in by email and return auth headers."""
    resp = await async_client.post(f"{api_base}/auth/login", json={"email": email})
    assert resp.status_code == 200, resp.text
    token = resp.json()["data"]["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def admin_headers(db_ready, async_client: AsyncClient, api_base: str, unique_suffix: str) -> dict:
    """Seed a board admin directly and return their auth headers."""
    from app.services.user_service import UserService

    email = f"admin_{unique_suffix}@test-univ.edu"
    async with db_ready() as db:
        await UserService.upsert_admin(db, email, "Test Admin")
    return await login(async_client, api_base, email)
