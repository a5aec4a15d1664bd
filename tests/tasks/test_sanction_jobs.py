"""Tests for the suspension expiry job."""

from datetime import timedelta
from unittest.mock import patch

import pytest

from trust_engine.config import SuspensionType
from trust_engine.core.database import utcnow
from trust_engine.tasks.sanction_jobs import expire_suspensions_job


@pytest.mark.unit
class TestExpireSuspensionsJob:
    async def test_expires_due_rows(self, db_session, session_factory, author, make_suspension):
        expired = await make_suspension(author.user_id, ends_at=utcnow() - timedelta(hours=2))
        banned = await make_suspension(author.user_id, suspension_type=SuspensionType.PERMANENT)

        with patch(
            "trust_engine.tasks.sanction_jobs.get_async_session",
            side_effect=lambda: session_factory(),
        ):
            result = await expire_suspensions_job({"job_try": 1})

        assert result == {"processed": 1, "expired": 1, "errors": 0}
        await db_session.refresh(expired)
        await db_session.refresh(banned)
        assert expired.is_active is False
        assert banned.is_active is True

    async def test_nothing_due(self, session_factory):
        with patch(
            "trust_engine.tasks.sanction_jobs.get_async_session",
            side_effect=lambda: session_factory(),
        ):
            result = await expire_suspensions_job({})

        assert result == {"processed": 0, "expired": 0, "errors": 0}
