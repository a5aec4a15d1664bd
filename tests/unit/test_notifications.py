"""Tests for notification email delivery and rendering."""

from datetime import datetime
from unittest.mock import AsyncMock, patch

import pytest
from aiosmtplib.errors import (
    SMTPAuthenticationError,
    SMTPConnectError,
    SMTPReadTimeoutError,
)

from trust_engine.config import (
    AppealStatus,
    ModerationAction,
    ReportReason,
    SuspensionType,
    TargetKind,
    WarningSeverity,
    settings,
)
from trust_engine.models import Appeals, Reports, Users, UserSuspensions, UserWarnings
from trust_engine.services.notifications import (
    render_appeal_reviewed,
    render_report_resolved,
    render_user_suspended,
    render_user_warned,
    send_email,
)


@pytest.fixture
def smtp_configured():
    with patch.object(settings, "SMTP_HOST", "smtp.test"):
        yield


@pytest.mark.unit
class TestSendEmail:
    async def test_unconfigured_smtp_returns_false(self):
        with patch("trust_engine.services.notifications.aiosmtplib.send", new_callable=AsyncMock) as mock_send:
            result = await send_email(to="a@example.com", subject="S", body="B")

        assert result is False
        mock_send.assert_not_called()

    async def test_success(self, smtp_configured):
        with patch("trust_engine.services.notifications.aiosmtplib.send", new_callable=AsyncMock) as mock_send:
            result = await send_email(to="a@example.com", subject="S", body="B", html="<p>B</p>")

        assert result is True
        assert mock_send.call_count == 1
        message = mock_send.call_args.args[0]
        assert message["To"] == "a@example.com"
        assert message["Subject"] == "S"

    async def test_connection_error_retries(self, smtp_configured):
        with patch("trust_engine.services.notifications.aiosmtplib.send", new_callable=AsyncMock) as mock_send:
            with patch("trust_engine.services.notifications.asyncio.sleep", new_callable=AsyncMock):
                mock_send.side_effect = SMTPConnectError("Cannot connect")

                result = await send_email(to="a@example.com", subject="S", body="B")

        assert result is False
        assert mock_send.call_count == 3

    async def test_connection_error_then_success(self, smtp_configured):
        with patch("trust_engine.services.notifications.aiosmtplib.send", new_callable=AsyncMock) as mock_send:
            with patch("trust_engine.services.notifications.asyncio.sleep", new_callable=AsyncMock):
                mock_send.side_effect = [SMTPConnectError("Cannot connect"), None]

                result = await send_email(to="a@example.com", subject="S", body="B")

        assert result is True
        assert mock_send.call_count == 2

    async def test_read_timeout_does_not_retry(self, smtp_configured):
        with patch("trust_engine.services.notifications.aiosmtplib.send", new_callable=AsyncMock) as mock_send:
            mock_send.side_effect = SMTPReadTimeoutError("Timeout reading response")

            result = await send_email(to="a@example.com", subject="S", body="B")

        assert result is False
        assert mock_send.call_count == 1

    async def test_auth_error_does_not_retry(self, smtp_configured):
        with patch("trust_engine.services.notifications.aiosmtplib.send", new_callable=AsyncMock) as mock_send:
            mock_send.side_effect = SMTPAuthenticationError(535, "Authentication failed")

            result = await send_email(to="a@example.com", subject="S", body="B")

        assert result is False
        assert mock_send.call_count == 1


@pytest.mark.unit
class TestRendering:
    def test_report_resolved(self):
        reporter = Users(user_id=1, username="casey", email="casey@example.com")
        report = Reports(
            report_id=9,
            reporter_id=1,
            target_kind=TargetKind.POST,
            target_id=3,
            reason=ReportReason.HATE_SPEECH,
            action_taken=ModerationAction.CONTENT_HIDDEN,
        )

        subject, body, html = render_report_resolved(reporter, report)

        assert subject == "Your report #9 has been reviewed"
        assert "the content has been hidden" in body
        assert "hate speech" in body
        assert "casey" in html

    def test_report_resolved_escapes_html(self):
        reporter = Users(user_id=1, username="<b>x</b>", email="x@example.com")
        report = Reports(
            report_id=1,
            reporter_id=1,
            target_kind=TargetKind.POST,
            target_id=3,
            reason=ReportReason.SPAM,
            action_taken=ModerationAction.NO_ACTION,
        )

        _, _, html = render_report_resolved(reporter, report)

        assert "<b>x</b>" not in html
        assert "&lt;b&gt;" in html

    def test_appeal_approved(self):
        user = Users(user_id=2, username="sam", email="sam@example.com")
        appeal = Appeals(
            appeal_id=4,
            user_id=2,
            suspension_id=1,
            reason="I did not do this",
            status=AppealStatus.APPROVED,
            review_notes="Mistaken identity",
        )

        subject, body, _ = render_appeal_reviewed(user, appeal)

        assert subject == "Your appeal #4 has been approved"
        assert "suspension has been lifted" in body
        assert "Mistaken identity" in body

    def test_appeal_denied(self):
        user = Users(user_id=2, username="sam", email="sam@example.com")
        appeal = Appeals(
            appeal_id=5,
            user_id=2,
            suspension_id=1,
            reason="Please reconsider",
            status=AppealStatus.DENIED,
        )

        subject, body, _ = render_appeal_reviewed(user, appeal)

        assert subject == "Your appeal #5 has been denied"
        assert "denied" in body

    def test_user_warned(self):
        user = Users(user_id=2, username="sam", email="sam@example.com")
        warning = UserWarnings(
            warning_id=3, user_id=2, severity=WarningSeverity.MAJOR, reason="Repeated <spam>"
        )

        subject, body, html = render_user_warned(user, warning)

        assert subject == "Account warning"
        assert "major warning" in body
        assert "Repeated <spam>" in body
        assert "Repeated &lt;spam&gt;" in html

    def test_temporary_suspension(self):
        user = Users(user_id=2, username="sam", email="sam@example.com")
        suspension = UserSuspensions(
            suspension_id=8,
            user_id=2,
            type=SuspensionType.TEMPORARY,
            reason="Harassment",
            ends_at=datetime(2026, 5, 1, 12, 0),
        )

        subject, body, _ = render_user_suspended(user, suspension)

        assert subject == "Your account has been temporarily suspended"
        assert "It ends on 2026-05-01 12:00 UTC." in body
        assert "appeal suspension #8" in body

    def test_permanent_suspension(self):
        user = Users(user_id=2, username="sam", email="sam@example.com")
        suspension = UserSuspensions(
            suspension_id=9, user_id=2, type=SuspensionType.PERMANENT, reason="Ban evasion"
        )

        subject, body, _ = render_user_suspended(user, suspension)

        assert subject == "Your account has been permanently suspended"
        assert "does not expire" in body
