"""
Shared fixtures.

Service tests get a fresh in-memory store per test. API tests get a fresh
app (and store) per test, with an admin account seeded from settings.
"""

import pytest
from fastapi.testclient import TestClient

from inkwell.api.app import create_app
from inkwell.config import Settings
from inkwell.core.models import User
from inkwell.services.content import ContentService
from inkwell.services.users import UserService
from inkwell.storage import create_local_storage

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin-secret"
PASSWORD = "secret123"


# =============================================================================
# Services
# =============================================================================


@pytest.fixture
def settings():
    """Settings isolated from any local .env file."""
    return Settings(
        _env_file=None,
        jwt_secret_key="test-secret",
        database_url="",
        admin_email=ADMIN_EMAIL,
        admin_password=ADMIN_PASSWORD,
    )


@pytest.fixture
def storage():
    return create_local_storage()


@pytest.fixture
async def user_service(storage, settings):
    service = UserService(storage, settings)
    await service.initialize()
    return service


@pytest.fixture
async def content_service(storage, user_service):
    service = ContentService(storage, user_service)
    await service.initialize()
    return service


@pytest.fixture
async def author(user_service) -> User:
    """A user allowed to write content."""
    _, user = await user_service.register(
        "Ada Author", "ada@example.com", PASSWORD, roles={"access_content": True}
    )
    return user


@pytest.fixture
async def other_writer(user_service) -> User:
    """Another user allowed to write content, but not the author of anything yet."""
    _, user = await user_service.register(
        "Otto Other", "otto@example.com", PASSWORD, roles={"access_content": True}
    )
    return user


@pytest.fixture
async def admin(user_service) -> User:
    return await user_service.ensure_admin("Admin", ADMIN_EMAIL, ADMIN_PASSWORD)


# =============================================================================
# HTTP
# =============================================================================


@pytest.fixture
def client(settings):
    """A running app (lifespan included) on a fresh in-memory store."""
    app = create_app(settings, storage=create_local_storage())
    with TestClient(app) as c:
        yield c


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def register(client, name, email, password=PASSWORD, roles=None) -> tuple[str, dict]:
    """Register through the API and return (token, user view)."""
    payload = {"name": name, "email": email, "password": password}
    if roles is not None:
        payload["roles"] = roles
    resp = client.post("/api/user/register", json=payload)
    assert resp.status_code == 201, resp.json()
    body = resp.json()
    return body["token"], body["user"]


def login(client, email, password=PASSWORD) -> str:
    resp = client.post("/api/user/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.json()
    return resp.json()["token"]


@pytest.fixture
def admin_token(client) -> str:
    return login(client, ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture
def writer(client) -> tuple[str, dict]:
    return register(client, "Wanda Writer", "wanda@example.com", roles={"access_content": True})


@pytest.fixture
def reader(client) -> tuple[str, dict]:
    return register(client, "Rex Reader", "rex@example.com")
