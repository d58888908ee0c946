"""Pytest configuration and fixtures for taskhub.

Environment is set before any taskhub import so cached settings pick it up.
Every test gets a fresh in-memory SQLite database shared by the app (through
a get_db override) and by the test itself.
"""

import os

os.environ["JWT_SECRET"] = "test-secret"
os.environ["ALGORITHM"] = "HS256"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RABBITMQ_ENABLED"] = "false"

from datetime import datetime, timedelta, timezone  # noqa: E402
from typing import Callable  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from jose import jwt  # noqa: E402
from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from taskhub.core.auth import CurrentUser  # noqa: E402
from taskhub.core.config import get_settings  # noqa: E402
from taskhub.core.database import Base, enable_sqlite_foreign_keys, get_db  # noqa: E402
from taskhub.main import app  # noqa: E402
from taskhub.models import User, UserTypeEnum  # noqa: E402

get_settings.cache_clear()

ADMIN_ID = 1
ALICE_ID = 2
BOB_ID = 3
CAROL_ID = 4
# Valid token, but no users row (accounts live in the auth service)
GHOST_ID = 99


@pytest.fixture
def db_session() -> Session:
    """Session on a fresh in-memory database with the schema created and foreign keys enforced."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", enable_sqlite_foreign_keys)
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def users(db_session: Session) -> dict:
    """One admin and three normal users."""
    rows = [
        User(id=ADMIN_ID, email="admin@example.com", hashed_password="x", user_type=UserTypeEnum.admin),
        User(id=ALICE_ID, email="alice@example.com", hashed_password="x", user_type=UserTypeEnum.normal),
        User(id=BOB_ID, email="bob@example.com", hashed_password="x", user_type=UserTypeEnum.normal),
        User(id=CAROL_ID, email="carol@example.com", hashed_password="x", user_type=UserTypeEnum.normal),
    ]
    db_session.add_all(rows)
    db_session.commit()
    return {user.email.split("@")[0]: user for user in rows}


@pytest.fixture
def admin() -> CurrentUser:
    return CurrentUser(user_id=ADMIN_ID, role="admin")


@pytest.fixture
def alice() -> CurrentUser:
    return CurrentUser(user_id=ALICE_ID, role="normal")


@pytest.fixture
def bob() -> CurrentUser:
    return CurrentUser(user_id=BOB_ID, role="normal")


def _encode_token(user_id, role: str = "normal", expires_in: timedelta = timedelta(minutes=30), **claims) -> str:
    payload = {"userId": user_id, "role": role, "exp": datetime.now(timezone.utc) + expires_in}
    payload.update(claims)
    return jwt.encode(payload, "test-secret", algorithm="HS256")


@pytest.fixture
def make_token() -> Callable[..., str]:
    """Encode a token signed with the test secret: make_token(user_id, role, expires_in=..., **claims)."""
    return _encode_token


@pytest.fixture
def auth_headers() -> Callable[..., dict]:
    """Build Authorization headers for a user id and role."""

    def _headers(user_id: int, role: str = "normal") -> dict:
        return {"Authorization": f"Bearer {_encode_token(user_id, role)}"}

    return _headers


@pytest.fixture
async def client(db_session: Session, users: dict) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI) using the test database."""

    def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
