"""
Pytest configuration and shared fixtures.

Every test gets a fresh SQLite database file. Transactions are opened with
BEGIN IMMEDIATE, so concurrent writers from separate sessions queue up on
the database lock the way they would on row locks in MariaDB, which keeps
the race tests deterministic.
"""

import os

# Must be set before trust_engine.config is imported
os.environ.setdefault("ENVIRONMENT", "test")
os.environ["SUSPENSION_SWEEP_MODE"] = "off"
os.environ.pop("SMTP_HOST", None)

from collections.abc import AsyncGenerator, Callable  # noqa: E402
from datetime import datetime  # noqa: E402
from typing import Any  # noqa: E402
from unittest.mock import AsyncMock, MagicMock, Mock, patch  # noqa: E402

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402

import trust_engine.models  # noqa: E402, F401
from trust_engine.config import (  # noqa: E402
    ReportPriority,
    ReportReason,
    ReportStatus,
    SuspensionType,
    TargetKind,
)
from trust_engine.core.database import get_db, utcnow  # noqa: E402
from trust_engine.core.redis import get_redis  # noqa: E402
from trust_engine.core.security import create_access_token  # noqa: E402
from trust_engine.main import app as main_app  # noqa: E402
from trust_engine.models import (  # noqa: E402
    Candidates,
    Comments,
    Messages,
    Posts,
    Reports,
    Users,
    UserSuspensions,
)


@pytest.fixture(scope="function")
async def engine(tmp_path):
    """
    Async engine on a throwaway SQLite file with the full schema.

    NullPool gives every session its own connection, so separate sessions
    really are separate transactions.
    """
    test_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'trust_engine_test.db'}",
        poolclass=NullPool,
        connect_args={"timeout": 30},
    )

    @event.listens_for(test_engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        # Let SQLAlchemy emit BEGIN itself (needed for SAVEPOINT support)
        dbapi_connection.isolation_level = None

    @event.listens_for(test_engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    """Factory for independent sessions (concurrency tests, background jobs)."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """
    Database session for the test body and, through the get_db override,
    for every request the test client makes.
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def mock_redis() -> MagicMock:
    """
    Redis stand-in for rate limiting and metrics.

    Both only use GET and pipelines of INCR/EXPIRE.
    """
    client = MagicMock()
    client.get = AsyncMock(return_value=None)
    pipe = MagicMock()
    pipe.execute = AsyncMock(return_value=[1, True])
    client.pipeline.return_value = pipe
    return client


@pytest.fixture(autouse=True)
def mock_queue():
    """Replace the arq pool so enqueueing never touches Redis."""
    pool = MagicMock()
    pool.enqueue_job = AsyncMock(side_effect=lambda name, *a, **kw: Mock(job_id=kw.get("_job_id", name)))
    with patch("trust_engine.tasks.queue.get_queue", AsyncMock(return_value=pool)):
        yield pool


@pytest.fixture(scope="function")
def app(db_session: AsyncSession, mock_redis: MagicMock) -> FastAPI:
    """
    FastAPI app wired to the test session and the Redis stand-in.
    """

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    async def override_get_redis() -> AsyncGenerator[MagicMock, None]:
        yield mock_redis

    main_app.dependency_overrides[get_db] = override_get_db
    main_app.dependency_overrides[get_redis] = override_get_redis

    yield main_app

    main_app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """
    Async HTTP client for API tests.

    Usage:
        async def test_endpoint(client, reporter, auth_headers):
            response = await client.get(
                "/api/v1/moderation/reports/mine", headers=auth_headers(reporter)
            )
    """
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


def auth(user: Users) -> dict[str, str]:
    """Authorization header for `user`."""
    return {"Authorization": f"Bearer {create_access_token(user.user_id)}"}


@pytest.fixture
def auth_headers() -> Callable[[Users], dict[str, str]]:
    return auth


# =============================================================================
# Test Data Fixtures
# =============================================================================


@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable[..., Any]:
    """
    Factory for committed users.

    Usage:
        user = await make_user("someone", is_moderator=True)
    """

    async def _make(username: str, **fields: Any) -> Users:
        user = Users(username=username, email=f"{username}@example.com", **fields)
        db_session.add(user)
        await db_session.commit()
        return user

    return _make


@pytest.fixture
async def reporter(make_user) -> Users:
    return await make_user("reporter")


@pytest.fixture
async def author(make_user) -> Users:
    return await make_user("author")


@pytest.fixture
async def moderator(make_user) -> Users:
    return await make_user("moderator", is_moderator=True)


@pytest.fixture
async def admin(make_user) -> Users:
    return await make_user("admin", is_admin=True)


@pytest.fixture
async def post(db_session: AsyncSession, author: Users) -> Posts:
    post = Posts(author_id=author.user_id, content="Reported post body")
    db_session.add(post)
    await db_session.commit()
    return post


@pytest.fixture
async def comment(db_session: AsyncSession, author: Users, post: Posts) -> Comments:
    comment = Comments(post_id=post.post_id, user_id=author.user_id, content="Reported comment")
    db_session.add(comment)
    await db_session.commit()
    return comment


@pytest.fixture
async def message(db_session: AsyncSession, author: Users, reporter: Users) -> Messages:
    message = Messages(
        sender_id=author.user_id, recipient_id=reporter.user_id, content="Unwanted message"
    )
    db_session.add(message)
    await db_session.commit()
    return message


@pytest.fixture
async def candidate(db_session: AsyncSession, author: Users) -> Candidates:
    candidate = Candidates(
        name="Jordan Example",
        user_id=author.user_id,
        office_title="City Council",
        district="Ward 3",
    )
    db_session.add(candidate)
    await db_session.commit()
    return candidate


@pytest.fixture
def make_report(db_session: AsyncSession) -> Callable[..., Any]:
    """
    Factory inserting reports directly (bypassing intake), for queue and
    stats tests that need exact priorities and timestamps.
    """

    async def _make(
        reporter_id: int,
        target_id: int,
        *,
        target_kind: TargetKind = TargetKind.POST,
        reason: ReportReason = ReportReason.SPAM,
        priority: ReportPriority = ReportPriority.MEDIUM,
        status: ReportStatus = ReportStatus.PENDING,
        created_at: datetime | None = None,
        moderated_at: datetime | None = None,
        geographic_weight: float | None = None,
    ) -> Reports:
        report = Reports(
            reporter_id=reporter_id,
            target_kind=target_kind,
            target_id=target_id,
            reason=reason,
            priority=priority,
            status=status,
            open_slot=None if status == ReportStatus.RESOLVED else 1,
            created_at=created_at or utcnow(),
            moderated_at=moderated_at,
            geographic_weight=geographic_weight,
        )
        db_session.add(report)
        await db_session.commit()
        return report

    return _make


@pytest.fixture
def make_suspension(db_session: AsyncSession) -> Callable[..., Any]:
    """Factory inserting suspension rows directly, e.g. already-expired ones."""

    async def _make(
        user_id: int,
        *,
        suspension_type: SuspensionType = SuspensionType.TEMPORARY,
        ends_at: datetime | None = None,
        is_active: bool = True,
        reason: str = "Test suspension",
    ) -> UserSuspensions:
        suspension = UserSuspensions(
            user_id=user_id,
            type=suspension_type,
            reason=reason,
            ends_at=ends_at,
            is_active=is_active,
        )
        db_session.add(suspension)
        await db_session.commit()
        return suspension

    return _make
