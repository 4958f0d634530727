from typing import Optional

import pytest
from fastapi.testclient import TestClient

from domainstore.app.core.config import Settings
from domainstore.app.db.session import Database
from domainstore.app.main import create_app
from domainstore.app.security.hashing import configure_hashing

ADMIN_USERNAME = "root"
ADMIN_PASSWORD = "root-password"
DEFAULT_DOMAIN = "main"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        SECRET_KEY="test-secret-key",
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        PASSWORD_HASH_ROUNDS=4,
        DEFAULT_DOMAIN=DEFAULT_DOMAIN,
        DEFAULT_ADMIN_USERNAME=ADMIN_USERNAME,
        DEFAULT_ADMIN_PASSWORD=ADMIN_PASSWORD,
    )


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
async def database(settings):
    configure_hashing(settings.PASSWORD_HASH_ROUNDS)
    db = Database(settings)
    await db.connect()
    await db.create_all()
    yield db
    await db.disconnect()


@pytest.fixture
async def session(database):
    async with database.session() as db_session:
        yield db_session


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def login(client: TestClient, username: str, password: str) -> str:
    response = client.post("/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["token"]


@pytest.fixture
def admin_token(client) -> str:
    return login(client, ADMIN_USERNAME, ADMIN_PASSWORD)


@pytest.fixture
def create_domain(client, admin_token):
    def _create(name: str) -> str:
        response = client.post("/admin/domains", json={"name": name}, headers=auth_header(admin_token))
        assert response.status_code == 201, response.text
        return response.json()["domain"]["name"]

    return _create


@pytest.fixture
def create_user(client, admin_token):
    """Create an active user through the admin API and return ``(id, token)``."""

    def _create(
        username: str,
        password: str = "secret",
        domain: Optional[str] = None,
        is_admin: bool = False,
    ):
        body = {"username": username, "password": password, "isActive": True, "isAdmin": is_admin}
        if domain is not None:
            body["domain"] = domain
        response = client.post("/admin/users", json=body, headers=auth_header(admin_token))
        assert response.status_code == 201, response.text
        return response.json()["id"], login(client, username, password)

    return _create
