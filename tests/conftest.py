"""
Test infrastructure for the project service.

Strategy
--------
- SQLite in-memory via aiosqlite removes the need for a running Postgres
  instance in CI, keeping the suite fast and self-contained.
- StaticPool forces all async tasks to share the same in-memory database
  connection, which is required because SQLite in-memory databases are
  connection-scoped; a new connection would see an empty database.
- The app's get_db dependency is overridden so every test-time request uses
  the test session factory rather than the production one.
- All tables are created fresh before each test and dropped after.
- Outgoing mail never reaches Resend: ``sent_emails`` replaces
  ``mailer.send_email`` with a recorder, and ``failing_mailer`` with one
  that raises.
"""
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from app import mailer
from app.database import Base, get_db
from app.exceptions import MailDeliveryError
from app.main import app
from app.middleware import install_query_counter
from app.models import Section, User

# ---------------------------------------------------------------------------
# Test database engine - SQLite in-memory with aiosqlite
# ---------------------------------------------------------------------------

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine_test = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

install_query_counter(engine_test)

async_session_test = async_sessionmaker(
    engine_test,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ---------------------------------------------------------------------------
# Dependency override - replace production get_db with the test session factory
# ---------------------------------------------------------------------------

async def override_get_db():
    async with async_session_test() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


app.dependency_overrides[get_db] = override_get_db


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after to guarantee isolation."""
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    """
    Yield a live AsyncSession for tests that call services directly or
    need to seed rows before an HTTP call.
    """
    async with async_session_test() as session:
        yield session


@pytest_asyncio.fixture
async def async_client() -> AsyncClient:
    """Yield an httpx.AsyncClient wired to the FastAPI app via ASGITransport."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def sent_emails(monkeypatch) -> list[dict]:
    """Record every message the service tries to send."""
    outbox: list[dict] = []

    async def fake_send_email(to, subject, html_body, text=None):
        outbox.append({"to": to, "subject": subject, "html": html_body, "text": text})
        return {"id": f"test-{len(outbox)}"}

    monkeypatch.setattr(mailer, "send_email", fake_send_email)
    return outbox


@pytest.fixture
def failing_mailer(monkeypatch) -> None:
    async def fake_send_email(to, subject, html_body, text=None):
        raise MailDeliveryError("smtp unavailable")

    monkeypatch.setattr(mailer, "send_email", fake_send_email)


# ---------------------------------------------------------------------------
# Seed data
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def seeded(db_session: AsyncSession) -> dict:
    """
    Commit two users and two sections so both direct service calls and
    HTTP requests (which use their own session) can see them.
    """
    owner = User(id="owner", email="owner@example.com", display_name="Owner")
    member = User(id="u1", email="member@example.com", display_name="Member")
    s1 = Section(title="Backlog", content="Things to do")
    s2 = Section(title="Done", content="Things done")
    db_session.add_all([owner, member, s1, s2])
    await db_session.commit()
    return {"owner": owner, "member": member, "sections": [s1, s2]}
