"""Test configuration."""
import os
from collections.abc import AsyncIterator, Callable, Iterator
from datetime import UTC, datetime, timedelta
from pathlib import Path
from uuid import uuid4

from alembic import command
from alembic.config import Config
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

# --- Default environment for the test run
os.environ.setdefault("DATABASE_URL", "sqlite:///./eventlog_test.db")
os.environ.setdefault("EVENTLOG_ENV", "test")

from eventlog.main import app  # noqa: E402
from eventlog.db import get_db, make_sessionmaker  # noqa: E402
from eventlog.core.actor import Actor, system_actor  # noqa: E402
from eventlog.models import Base, User  # noqa: E402
from eventlog.services.change_log import acting_as  # noqa: E402

ROOT = Path(__file__).resolve().parents[1]
DB_PATH = Path("./eventlog_test.db")


def _run_migrations() -> None:
    cfg = Config(str(ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(ROOT / "alembic"))
    cfg.set_main_option("sqlalchemy.url", os.environ["DATABASE_URL"])
    command.upgrade(cfg, "head")


# --- (1) Fresh database file for the session
if DB_PATH.exists():
    DB_PATH.unlink()

engine = create_engine(
    os.environ["DATABASE_URL"],
    connect_args={"check_same_thread": False},
)
TestingSessionLocal = make_sessionmaker(engine)

# --- (2) Schema comes from Alembic only
_run_migrations()


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> datetime:
        self.now = self.now + timedelta(**delta)
        return self.now


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2026, 3, 1, 12, 0, 0, tzinfo=UTC))


@pytest.fixture
def db_session() -> Iterator[Session]:
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        with engine.begin() as conn:
            for table in reversed(Base.metadata.sorted_tables):
                conn.execute(table.delete())


@pytest.fixture(autouse=True)
def override_db_dependency(db_session: Session) -> Iterator[None]:
    def _get_db() -> Iterator[Session]:
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    yield
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
async def client() -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as async_client:
        yield async_client


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def make_user(db_session: Session) -> Callable[..., User]:
    """Factory persisting a user on behalf of the system actor."""

    def _factory(*, is_admin: bool = False, email: str | None = None, **fields) -> User:
        user = User(
            email=email or f"user-{uuid4().hex[:8]}@example.com",
            is_admin=is_admin,
            **fields,
        )
        with acting_as(db_session, system_actor()):
            db_session.add(user)
            db_session.commit()
        return user

    return _factory


@pytest.fixture
def admin(make_user: Callable[..., User]) -> User:
    return make_user(is_admin=True, first_name="Ada")


@pytest.fixture
def member(make_user: Callable[..., User]) -> User:
    return make_user(first_name="Max")


@pytest.fixture
def admin_actor(admin: User) -> Actor:
    return Actor.from_user(admin)


@pytest.fixture
def member_actor(member: User) -> Actor:
    return Actor.from_user(member)


@pytest.fixture
def admin_headers(admin: User) -> dict[str, str]:
    return {"X-Actor-Uuid": admin.uuid}


@pytest.fixture
def member_headers(member: User) -> dict[str, str]:
    return {"X-Actor-Uuid": member.uuid}
