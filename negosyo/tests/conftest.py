"""Shared test fixtures for the Negosyo Digital test suite.

Uses an in-memory SQLite database with StaticPool so all sessions share the
same connection (committed data is visible across sessions).
"""

import uuid
from decimal import Decimal

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from negosyo.core.auth import ActingAs
from negosyo.database import Base, get_db
from negosyo.main import app
from negosyo.models import *  # noqa: ensure all models are loaded for create_all


# ---------------------------------------------------------------------------
# In-memory SQLite test engine (shared via StaticPool)
# ---------------------------------------------------------------------------

test_engine = create_async_engine(
    "sqlite+aiosqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
    echo=False,
)
TestSession = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@event.listens_for(test_engine.sync_engine, "connect")
def _set_sqlite_pragma(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()


# ---------------------------------------------------------------------------
# Auto-use: create/drop tables for every test
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
async def _setup_db():
    """Create all tables before each test, drop after. Also clear global state."""
    from negosyo.core import async_tasks
    async_tasks.recent_outcomes.clear()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await async_tasks.drain_background_tasks()
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


# ---------------------------------------------------------------------------
# Core fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
async def db():
    """Yield a fresh AsyncSession for direct service-layer tests."""
    async with TestSession() as session:
        yield session


@pytest.fixture
def session_factory():
    """Open extra sessions that act as separate workers."""
    return TestSession


@pytest.fixture
async def client():
    """httpx AsyncClient wired to the FastAPI app with test DB override."""
    import httpx

    async def _override_get_db():
        async with TestSession() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db

    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Seeding helpers
# ---------------------------------------------------------------------------

def _new_id() -> str:
    return str(uuid.uuid4())


PHOTOS = [
    {"url": "https://cdn.test/photos/front.jpg", "dominant_color": "#8B4513"},
    {"url": "https://cdn.test/photos/counter.jpg", "dominant_color": None},
    {"url": "https://cdn.test/photos/team.jpg", "dominant_color": "#336699"},
]


@pytest.fixture
def auth_header():
    """Return a callable that builds an Authorization header from a JWT."""
    def _build(token: str) -> dict:
        return {"Authorization": f"Bearer {token}"}
    return _build


@pytest.fixture
def make_creator(db: AsyncSession):
    """Factory fixture: create a Creator and return (creator, jwt_token)."""
    from negosyo.core.auth import create_access_token
    from negosyo.models.creator import Creator

    async def _make(
        first_name: str = "Maria",
        last_name: str = "Santos",
        role: str = "creator",
        status: str = "active",
        balance: float = 0,
        total_earnings: float = 0,
    ):
        creator = Creator(
            id=_new_id(),
            first_name=first_name,
            last_name=last_name,
            email=f"{_new_id()[:8]}@creators.test",
            referral_code=("T" + uuid.uuid4().hex[:8]).upper(),
            balance=Decimal(str(balance)),
            total_earnings=Decimal(str(total_earnings)),
            status=status,
            role=role,
        )
        db.add(creator)
        await db.commit()
        await db.refresh(creator)
        return creator, create_access_token(creator.id)

    return _make


@pytest.fixture
async def admin(make_creator):
    """An admin creator as (creator, token)."""
    return await make_creator(first_name="Ana", last_name="Reyes", role="admin")


@pytest.fixture
def admin_as(admin) -> ActingAs:
    return ActingAs(creator_id=admin[0].id, role="admin")


@pytest.fixture
def make_submission(db: AsyncSession):
    """Factory fixture: create a Submission directly in the given status."""
    from negosyo.models._base import dump_json
    from negosyo.models.submission import Submission

    async def _make(creator_id: str, status: str = "draft", **overrides):
        fields = {
            "business_name": "Aling Nena's Carinderia",
            "business_type": "restaurant",
            "owner_name": "Nena Cruz",
            "owner_phone": "09171234567",
            "owner_email": "nena@example.test",
            "address": "12 Rizal St.",
            "city": "Quezon City",
            "photos": dump_json(PHOTOS),
            "audio_url": "https://cdn.test/audio/interview.mp3",
            "terms_agreed": True,
            "amount": Decimal("1000"),
            "creator_payout": Decimal("500"),
        }
        fields.update(overrides)
        submission = Submission(id=_new_id(), creator_id=creator_id, status=status, **fields)
        db.add(submission)
        await db.commit()
        await db.refresh(submission)
        return submission

    return _make
