"""
Email notifications for reporters, appellants and sanctioned users.

Delivery happens from arq jobs, never inline with a moderation request.
`send_email` reports failure through its return value; it does not raise.
"""

import asyncio
import html as html_escape
from email.message import EmailMessage

import aiosmtplib
from aiosmtplib.errors import (
    SMTPAuthenticationError,
    SMTPConnectError,
    SMTPConnectTimeoutError,
    SMTPException,
    SMTPReadTimeoutError,
)

from trust_engine.config import (
    AppealStatus,
    ModerationAction,
    SuspensionType,
    WarningSeverity,
    settings,
)
from trust_engine.core.logging import get_logger
from trust_engine.models.appeal import Appeals
from trust_engine.models.report import Reports
from trust_engine.models.user import Users
from trust_engine.models.user_suspension import UserSuspensions
from trust_engine.models.user_warning import UserWarnings

logger = get_logger(__name__)

MAX_CONNECT_ATTEMPTS = 3

# Reporter-facing wording per action
OUTCOME_TEXT = {
    ModerationAction.NO_ACTION: "we reviewed the content and found no violation",
    ModerationAction.CONTENT_HIDDEN: "the content has been hidden",
    ModerationAction.CONTENT_DELETED: "the content has been removed",
    ModerationAction.USER_WARNED: "the responsible account has been warned",
    ModerationAction.USER_SUSPENDED: "the responsible account has been suspended",
    ModerationAction.USER_BANNED: "the responsible account has been banned",
}

SUSPENSION_TEXT = {
    SuspensionType.TEMPORARY: "temporarily suspended",
    SuspensionType.PERMANENT: "permanently suspended",
    SuspensionType.POSTING_RESTRICTED: "restricted from posting",
    SuspensionType.COMMENTING_RESTRICTED: "restricted from commenting",
}


async def send_email(to: str, subject: str, body: str, html: str | None = None) -> bool:
    """
    Send one email over SMTP.

    Only connection failures are retried (with 1s, 2s backoff): nothing was
    handed to the server yet. A timeout after DATA, bad credentials or any
    other SMTP error gives up at once, since a retry could deliver twice or
    can never succeed.

    Returns:
        True if the server accepted the message
    """
    if not settings.SMTP_HOST:
        logger.warning("email_not_configured", to=to, subject=subject)
        return False

    message = EmailMessage()
    message["From"] = f"{settings.SMTP_FROM_NAME} <{settings.SMTP_FROM_EMAIL}>"
    message["To"] = to
    message["Subject"] = subject
    message.set_content(body)
    if html:
        message.add_alternative(html, subtype="html")

    for attempt in range(1, MAX_CONNECT_ATTEMPTS + 1):
        try:
            await aiosmtplib.send(
                message,
                hostname=settings.SMTP_HOST,
                port=settings.SMTP_PORT,
                username=settings.SMTP_USER or None,
                password=settings.SMTP_PASSWORD or None,
                use_tls=settings.SMTP_TLS,
                start_tls=settings.SMTP_STARTTLS,
                timeout=30,
            )
            logger.info("email_sent", to=to, subject=subject, attempt=attempt)
            return True
        except (SMTPConnectError, SMTPConnectTimeoutError) as e:
            logger.warning(
                "email_connection_failed",
                to=to,
                attempt=attempt,
                error=str(e),
                error_type=type(e).__name__,
            )
            if attempt < MAX_CONNECT_ATTEMPTS:
                await asyncio.sleep(2 ** (attempt - 1))
        except (SMTPReadTimeoutError, SMTPAuthenticationError, SMTPException) as e:
            logger.error(
                "email_send_failed",
                to=to,
                subject=subject,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

    logger.error("email_connection_failed_all_retries", to=to, subject=subject)
    return False


def render_report_resolved(reporter: Users, report: Reports) -> tuple[str, str, str]:
    """Subject, plain text and HTML for a resolved-report notice."""
    outcome = OUTCOME_TEXT.get(report.action_taken, "the report has been reviewed")  # type: ignore[arg-type]
    subject = f"Your report #{report.report_id} has been reviewed"
    body = f"""Hello {reporter.username},

Thank you for your report #{report.report_id} ({report.reason.value.replace("_", " ").lower()}).

Our moderators have reviewed it: {outcome}.

Reports like yours help keep the community safe.
"""
    html = f"""<p>Hello {html_escape.escape(reporter.username)},</p>
<p>Thank you for your report #{report.report_id}.</p>
<p>Our moderators have reviewed it: <strong>{html_escape.escape(outcome)}</strong>.</p>
<p><small>Reports like yours help keep the community safe.</small></p>
"""
    return subject, body, html


def render_appeal_reviewed(user: Users, appeal: Appeals) -> tuple[str, str, str]:
    """Subject, plain text and HTML for an appeal decision."""
    approved = appeal.status == AppealStatus.APPROVED
    decision = "approved and your suspension has been lifted" if approved else "denied"
    subject = f"Your appeal #{appeal.appeal_id} has been {'approved' if approved else 'denied'}"
    notes = f"\nModerator notes: {appeal.review_notes}\n" if appeal.review_notes else ""
    body = f"""Hello {user.username},

Your appeal #{appeal.appeal_id} was {decision}.
{notes}"""
    html_notes = (
        f"<p>Moderator notes: {html_escape.escape(appeal.review_notes)}</p>"
        if appeal.review_notes
        else ""
    )
    html = f"""<p>Hello {html_escape.escape(user.username)},</p>
<p>Your appeal #{appeal.appeal_id} was <strong>{decision}</strong>.</p>
{html_notes}
"""
    return subject, body, html


def render_user_warned(user: Users, warning: UserWarnings) -> tuple[str, str, str]:
    """Subject, plain text and HTML for a warning notice."""
    severity = WarningSeverity(warning.severity).value.lower()
    subject = "Account warning"
    body = f"""Hello {user.username},

You have received a {severity} warning for the following reason:

{warning.reason}

Please review the community guidelines. Further violations may lead to
restrictions or suspension of your account.
"""
    html = f"""<p>Hello {html_escape.escape(user.username)},</p>
<p>You have received a <strong>{severity}</strong> warning for the following reason:</p>
<blockquote>{html_escape.escape(warning.reason)}</blockquote>
<p>Please review the community guidelines. Further violations may lead to
restrictions or suspension of your account.</p>
"""
    return subject, body, html


def render_user_suspended(user: Users, suspension: UserSuspensions) -> tuple[str, str, str]:
    """Subject, plain text and HTML for a suspension notice."""
    kind = SUSPENSION_TEXT.get(suspension.type, "restricted")  # type: ignore[arg-type]
    if suspension.ends_at is None:
        until = "This restriction does not expire."
    else:
        until = f"It ends on {suspension.ends_at:%Y-%m-%d %H:%M} UTC."
    subject = f"Your account has been {kind}"
    body = f"""Hello {user.username},

Your account has been {kind} for the following reason:

{suspension.reason}

{until}

If you believe this was a mistake you can appeal suspension #{suspension.suspension_id}.
"""
    html = f"""<p>Hello {html_escape.escape(user.username)},</p>
<p>Your account has been <strong>{kind}</strong> for the following reason:</p>
<blockquote>{html_escape.escape(suspension.reason)}</blockquote>
<p>{until}</p>
<p>If you believe this was a mistake you can appeal suspension #{suspension.suspension_id}.</p>
"""
    return subject, body, html


async def send_report_resolved_email(reporter: Users, report: Reports) -> bool:
    subject, body, html = render_report_resolved(reporter, report)
    return await send_email(reporter.email, subject, body, html)


async def send_appeal_reviewed_email(user: Users, appeal: Appeals) -> bool:
    subject, body, html = render_appeal_reviewed(user, appeal)
    return await send_email(user.email, subject, body, html)


async def send_user_warned_email(user: Users, warning: UserWarnings) -> bool:
    subject, body, html = render_user_warned(user, warning)
    return await send_email(user.email, subject, body, html)


async def send_user_suspended_email(user: Users, suspension: UserSuspensions) -> bool:
    subject, body, html = render_user_suspended(user, suspension)
    return await send_email(user.email, subject, body, html)
