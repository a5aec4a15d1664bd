"""Notification jobs for the arq worker: reporters, appellants and sanctioned users."""

from typing import Any

from arq import Retry

from trust_engine.config import AppealStatus, ReportStatus
from trust_engine.core.database import get_async_session
from trust_engine.core.logging import bind_context, get_logger
from trust_engine.models.appeal import Appeals
from trust_engine.models.report import Reports
from trust_engine.models.user import Users
from trust_engine.models.user_suspension import UserSuspensions
from trust_engine.models.user_warning import UserWarnings
from trust_engine.services.notifications import (
    send_appeal_reviewed_email,
    send_report_resolved_email,
    send_user_suspended_email,
    send_user_warned_email,
)

logger = get_logger(__name__)


async def notify_report_resolved(ctx: dict[str, Any], report_id: int) -> None:
    """
    Email the reporter the outcome of a resolved report.

    Raises:
        Retry: if the email could not be sent (up to max_tries)
    """
    bind_context(task="notify_report_resolved", report_id=report_id)

    try:
        async with get_async_session() as db:
            report = await db.get(Reports, report_id)
            if report is None or report.status != ReportStatus.RESOLVED:
                logger.warning("report_notification_skipped", reason="not_resolved")
                return

            reporter = await db.get(Users, report.reporter_id)
            if reporter is None or not reporter.email:
                logger.warning("report_notification_skipped", reason="no_reporter_email")
                return

            if not await send_report_resolved_email(reporter, report):
                logger.error("report_notification_failed", reporter_id=reporter.user_id)
                raise Retry(defer=ctx["job_try"] * 5)

            logger.info("report_notification_sent", reporter_id=reporter.user_id)

    except Retry:
        raise
    except Exception as e:
        logger.error(
            "report_notification_task_error", error=str(e), error_type=type(e).__name__
        )
        raise Retry(defer=ctx["job_try"] * 5) from e


async def notify_appeal_reviewed(ctx: dict[str, Any], appeal_id: int) -> None:
    """
    Email the appellant the decision on their appeal.

    Raises:
        Retry: if the email could not be sent (up to max_tries)
    """
    bind_context(task="notify_appeal_reviewed", appeal_id=appeal_id)

    try:
        async with get_async_session() as db:
            appeal = await db.get(Appeals, appeal_id)
            if appeal is None or appeal.status == AppealStatus.PENDING:
                logger.warning("appeal_notification_skipped", reason="not_reviewed")
                return

            user = await db.get(Users, appeal.user_id)
            if user is None or not user.email:
                logger.warning("appeal_notification_skipped", reason="no_user_email")
                return

            if not await send_appeal_reviewed_email(user, appeal):
                logger.error("appeal_notification_failed", user_id=user.user_id)
                raise Retry(defer=ctx["job_try"] * 5)

            logger.info("appeal_notification_sent", user_id=user.user_id)

    except Retry:
        raise
    except Exception as e:
        logger.error(
            "appeal_notification_task_error", error=str(e), error_type=type(e).__name__
        )
        raise Retry(defer=ctx["job_try"] * 5) from e


async def notify_user_warned(ctx: dict[str, Any], warning_id: int) -> None:
    """
    Email a user the warning they received.

    Raises:
        Retry: if the email could not be sent (up to max_tries)
    """
    bind_context(task="notify_user_warned", warning_id=warning_id)

    try:
        async with get_async_session() as db:
            warning = await db.get(UserWarnings, warning_id)
            if warning is None:
                logger.warning("warning_notification_skipped", reason="not_found")
                return

            user = await db.get(Users, warning.user_id)
            if user is None or not user.email:
                logger.warning("warning_notification_skipped", reason="no_user_email")
                return

            if not await send_user_warned_email(user, warning):
                logger.error("warning_notification_failed", user_id=user.user_id)
                raise Retry(defer=ctx["job_try"] * 5)

            logger.info("warning_notification_sent", user_id=user.user_id)

    except Retry:
        raise
    except Exception as e:
        logger.error(
            "warning_notification_task_error", error=str(e), error_type=type(e).__name__
        )
        raise Retry(defer=ctx["job_try"] * 5) from e


async def notify_user_suspended(ctx: dict[str, Any], suspension_id: int) -> None:
    """
    Email a user about a new suspension. Skipped if it was lifted or expired
    before the job ran.

    Raises:
        Retry: if the email could not be sent (up to max_tries)
    """
    bind_context(task="notify_user_suspended", suspension_id=suspension_id)

    try:
        async with get_async_session() as db:
            suspension = await db.get(UserSuspensions, suspension_id)
            if suspension is None or not suspension.is_active:
                logger.warning("suspension_notification_skipped", reason="not_active")
                return

            user = await db.get(Users, suspension.user_id)
            if user is None or not user.email:
                logger.warning("suspension_notification_skipped", reason="no_user_email")
                return

            if not await send_user_suspended_email(user, suspension):
                logger.error("suspension_notification_failed", user_id=user.user_id)
                raise Retry(defer=ctx["job_try"] * 5)

            logger.info("suspension_notification_sent", user_id=user.user_id)

    except Retry:
        raise
    except Exception as e:
        logger.error(
            "suspension_notification_task_error", error=str(e), error_type=type(e).__name__
        )
        raise Retry(defer=ctx["job_try"] * 5) from e
