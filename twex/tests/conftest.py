import pytest
from typing import AsyncGenerator, Callable, Generator
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession

from twex.config import Settings
from twex.db.session import build_engine, build_session_factory, init_db
from twex.main import create_app

# In-memory SQLite; StaticPool keeps a single connection alive per app
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
SESSION_COOKIE = "twex_session"


class AuthedUser:
    """A signed-up account and the header that authenticates as it"""

    def __init__(self, id: int, username: str, token: str):
        self.id = id
        self.username = username
        self.token = token
        self.headers = {"Authorization": f"Bearer {token}"}


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        ENVIRONMENT="testing",
        DATABASE_URL=TEST_DATABASE_URL,
        SECRET_KEY="test-secret-key",
        SESSION_COOKIE_NAME=SESSION_COOKIE,
        RATE_LIMIT_ENABLED=False,
        UPLOAD_DIR=str(tmp_path / "uploads"),
        GOOGLE_CLIENT_ID="test-client-id",
        GOOGLE_CLIENT_SECRET="test-client-secret",
        FRONTEND_URL="http://frontend.test",
    )


@pytest.fixture
def app(test_settings: Settings):
    return create_app(test_settings)


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    """Test client; entering it runs the lifespan and creates the tables"""
    with TestClient(app) as client:
        yield client


@pytest.fixture
def register(client: TestClient) -> Callable[..., AuthedUser]:
    """Sign up a user and return its id and bearer header"""
    def _register(username: str, password: str = "Password123!") -> AuthedUser:
        response = client.post(
            "/api/auth/signup",
            json={
                "username": username,
                "email": f"{username}@example.com",
                "password": password,
            },
        )
        assert response.status_code == 201, response.text
        return AuthedUser(
            id=response.json()["user"]["id"],
            username=username,
            token=response.cookies[SESSION_COOKIE],
        )
    return _register


@pytest.fixture
def make_post(client: TestClient) -> Callable[..., int]:
    """Create a post as a user and return its id"""
    def _make_post(user: AuthedUser, content: str = "hello") -> int:
        response = client.post("/api/create/post", data={"content": content}, headers=user.headers)
        assert response.status_code == 201, response.text
        return response.json()["post"]["id"]
    return _make_post


@pytest.fixture
def make_posts(make_post) -> Callable[..., list]:
    def _make_posts(user: AuthedUser, count: int) -> list:
        return [make_post(user, f"post {i}") for i in range(count)]
    return _make_posts


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Session on a private in-memory database for service-level tests"""
    engine = build_engine(Settings(ENVIRONMENT="testing", DATABASE_URL=TEST_DATABASE_URL))
    await init_db(engine)
    session_factory = build_session_factory(engine)

    async with session_factory() as session:
        yield session

    await engine.dispose()

