"""
Tests for the open-report guard.

The pre-check is bypassed here so the unique index alone has to reject the
second open report.
"""

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import func, select

from trust_engine.config import ReportReason, ReportStatus, TargetKind
from trust_engine.core.exceptions import DuplicateReportError
from trust_engine.models import Reports
from trust_engine.services import duplicate_guard


def new_report(reporter_id: int, post_id: int) -> Reports:
    return Reports(
        reporter_id=reporter_id,
        target_kind=TargetKind.POST,
        target_id=post_id,
        reason=ReportReason.SPAM,
    )


async def count_reports(db) -> int:
    return (await db.execute(select(func.count()).select_from(Reports))).scalar_one()


@pytest.mark.unit
class TestCheckAndReserve:
    async def test_index_rejects_second_open_report(self, db_session, reporter, make_report, post):
        await make_report(reporter.user_id, post.post_id)

        with patch.object(duplicate_guard, "find_open_report", AsyncMock(return_value=None)):
            with pytest.raises(DuplicateReportError):
                await duplicate_guard.check_and_reserve(
                    db_session, new_report(reporter.user_id, post.post_id)
                )

        await db_session.commit()
        assert await count_reports(db_session) == 1

    async def test_resolved_report_frees_the_slot(self, db_session, reporter, make_report, post):
        await make_report(reporter.user_id, post.post_id, status=ReportStatus.RESOLVED)

        with patch.object(duplicate_guard, "find_open_report", AsyncMock(return_value=None)):
            report = await duplicate_guard.check_and_reserve(
                db_session, new_report(reporter.user_id, post.post_id)
            )

        await db_session.commit()
        assert report.report_id is not None
        assert await count_reports(db_session) == 2
