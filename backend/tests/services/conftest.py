"""Service test fixtures — async DB + FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db overridden to use the test DB session
    - get_ai_client overridden with a scripted FakeCompletionClient
    - get_caller overridden with a student identity (admin_client / anon_client vary it)
    - Curriculum cache cleared around every test

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from mathtutor.api.deps import get_ai_client, get_caller
from mathtutor.db.base import Base
from mathtutor.infrastructure.database import get_db
from mathtutor.main import app
from mathtutor.models.curriculum_document import CURRICULUM_ROW_ID, CurriculumDocument
from mathtutor.services.curriculum_store import invalidate_curriculum_cache
from tests.services.doubles import ADMIN, STUDENT, FakeCompletionClient

CURRICULUM = [
    {
        "id": "lvl-1",
        "levelName": "2 Bac",
        "chapters": [
            {
                "id": "ch-deriv",
                "title": "Dérivation",
                "series": [
                    {
                        "id": "s-1",
                        "exercises": [
                            {
                                "id": "ex-1",
                                "statement": r"Calculer la dérivée de \(f(x) = x^2\).",
                                "correctionSnippet": "f'(x) = 2x",
                                "fullCorrection": "On a $f'(x) = 2x$.",
                            },
                        ],
                    },
                ],
            },
        ],
    },
]


@pytest.fixture(autouse=True)
def _clear_curriculum_cache():
    invalidate_curriculum_cache()
    yield
    invalidate_curriculum_cache()


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def seed_curriculum(test_db):
    test_db.add(CurriculumDocument(id=CURRICULUM_ROW_ID, data=CURRICULUM))
    await test_db.commit()
    return CURRICULUM


@pytest.fixture
def fake_ai():
    return FakeCompletionClient()


def _make_client(test_session_factory, fake_ai, caller):
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_ai_client] = lambda: fake_ai
    if caller is not None:
        app.dependency_overrides[get_caller] = lambda: caller
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.fixture
async def client(test_session_factory, fake_ai):
    """Authenticated student client."""
    async with _make_client(test_session_factory, fake_ai, STUDENT) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
async def admin_client(test_session_factory, fake_ai):
    async with _make_client(test_session_factory, fake_ai, ADMIN) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
async def anon_client(test_session_factory, fake_ai):
    """Real bearer-token verification (get_caller not overridden)."""
    async with _make_client(test_session_factory, fake_ai, None) as c:
        yield c
    app.dependency_overrides.clear()
