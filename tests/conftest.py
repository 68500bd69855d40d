"""Shared test fixtures."""

import os
import tempfile
from collections.abc import AsyncIterator, Callable, Iterator
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine


# Settings are cached on first use; point them at throwaway locations first
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="invested-logs-"))
os.environ.setdefault("LOG_REQUESTS", "false")

from invested.auth.permissions import UserRole  # noqa: E402
from invested.auth.schemas import UserIdentity  # noqa: E402
from invested.auth.security import create_access_token  # noqa: E402
from invested.core.database import create_sessionmaker, create_tables  # noqa: E402
from invested.courses.schemas import (  # noqa: E402
    CreateCourseRequest,
    CreateLessonRequest,
)
from invested.courses.service import CatalogService  # noqa: E402
from invested.forums.service import ForumService  # noqa: E402
from invested.progress.service import ProgressService  # noqa: E402


# ==============================================================================
# Database
# ==============================================================================


@pytest_asyncio.fixture
async def session_factory(tmp_path) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    """Fresh SQLite database file per test."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'invested.db'}",
        connect_args={"timeout": 30},
    )
    await create_tables(engine)
    try:
        yield create_sessionmaker(engine)
    finally:
        await engine.dispose()


@pytest.fixture
def catalog(session_factory) -> CatalogService:
    return CatalogService(session_factory)


@pytest.fixture
def progress(session_factory) -> ProgressService:
    return ProgressService(session_factory)


@pytest.fixture
def forums(session_factory) -> ForumService:
    return ForumService(session_factory)


@pytest.fixture
def make_course(catalog: CatalogService) -> Callable[..., Any]:
    """Factory creating a course with N lessons; returns (course, lessons)."""

    async def _make(lesson_count: int, title: str = "Investing 101"):
        course = await catalog.create_course(
            CreateCourseRequest(title=title), creator_id=uuid4()
        )
        lessons = [
            await catalog.create_lesson(
                course.course_id,
                CreateLessonRequest(title=f"Lesson {order}", lesson_order=order),
            )
            for order in range(1, lesson_count + 1)
        ]
        return course, lessons

    return _make


# ==============================================================================
# Identities
# ==============================================================================


@pytest.fixture
def member() -> UserIdentity:
    return UserIdentity(
        id=uuid4(),
        email="member@test.com",
        role=UserRole.MEMBER,
        membership_granted=True,
        membership_expires_at=None,
    )


@pytest.fixture
def admin() -> UserIdentity:
    return UserIdentity(id=uuid4(), email="admin@test.com", role=UserRole.ADMIN)


def make_token(
    user_id: UUID | None = None,
    role: UserRole = UserRole.MEMBER,
    membership: str = "lifetime",
) -> str:
    """Access token; membership is "lifetime", "active", "expired" or "none"."""
    claims: dict[str, Any] = {
        "sub": str(user_id or uuid4()),
        "email": f"{role.value}@test.com",
        "role": role.value,
    }
    now = datetime.now(UTC)
    if membership == "lifetime":
        claims["membership_expires_at"] = None
    elif membership == "active":
        claims["membership_expires_at"] = int((now + timedelta(days=30)).timestamp())
    elif membership == "expired":
        claims["membership_expires_at"] = int((now - timedelta(days=1)).timestamp())
    return create_access_token(claims)


@pytest.fixture
def token_factory() -> Callable[..., str]:
    return make_token


@pytest.fixture
def member_id() -> UUID:
    return uuid4()


@pytest.fixture
def member_headers(member_id: UUID) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(member_id)}"}


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(role=UserRole.ADMIN, membership='none')}"}


# ==============================================================================
# HTTP
# ==============================================================================


@pytest.fixture
def client() -> Iterator[TestClient]:
    """Test client without lifespan; tests install services on app.state."""
    from invested.main import app

    yield TestClient(app)

    for name in ("session_factory", "catalog_service", "progress_service", "forum_service"):
        if hasattr(app.state, name):
            delattr(app.state, name)
