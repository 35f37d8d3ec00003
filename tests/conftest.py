# tests/conftest.py
import httpx
import pytest

from egghunt.core.config import Settings
from egghunt.core.security import create_admin_token
from egghunt.db import build_engine, build_session_maker, init_db
from egghunt.main import create_app
from egghunt.services import auth as auth_service

TEST_SECRET = "test-secret-for-admin-tokens"


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a throwaway SQLite file, with the sweep disabled."""
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'egghunt.db'}",
        ADMIN_TOKEN_SECRET=TEST_SECRET,
        SESSION_CLEANUP_ENABLED=False,
        SLOW_REQUEST_THRESHOLD_MS=1000,
        PUBLIC_BASE_URL="http://hunt.test",
        LOG_LEVEL="DEBUG",
    )


@pytest.fixture
async def engine(settings):
    engine = build_engine(settings.database_url)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return build_session_maker(engine)


@pytest.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
async def app(settings):
    app = create_app(settings)
    # ASGITransport does not run the lifespan
    await init_db(app.state.engine)
    yield app
    await app.state.engine.dispose()


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def admin_headers(app, settings):
    async with app.state.session_maker() as s:
        admin = await auth_service.create_admin(s, username="root", email="root@example.com", password="hunter2hunter2")
    token, _ = create_admin_token(
        admin_id=admin.id,
        username=admin.username,
        secret=TEST_SECRET,
        issuer=settings.token_issuer,
        expires_minutes=5,
    )
    return {"Authorization": f"Bearer {token}"}
