"""
Tests for report API endpoints.

These tests cover the /api/v1/moderation/reports endpoints including:
- Submitting reports (validation, duplicates, rate limiting, scoring signals)
- Reporter history
- Moderator detail, claim and resolve
"""

from unittest.mock import ANY

import pytest

from trust_engine.config import AiUrgency, settings
from trust_engine.services.signals import ReportSignals, StaticSignalProvider, get_signal_provider

REPORTS_URL = "/api/v1/moderation/reports"


def report_body(target_id: int, **overrides) -> dict:
    body = {"target_kind": "POST", "target_id": target_id, "reason": "SPAM"}
    body.update(overrides)
    return body


@pytest.mark.api
class TestSubmitReport:
    async def test_submit(self, client, reporter, post, auth_headers, mock_redis):
        response = await client.post(
            REPORTS_URL,
            json=report_body(post.post_id, description="  Selling knockoffs  "),
            headers=auth_headers(reporter),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "PENDING"
        assert data["priority"] == "MEDIUM"
        assert data["estimated_review_time"] == "24-48 hours"
        assert data["created_at"].endswith("Z")
        mock_redis.pipeline.return_value.incr.assert_any_call(f"report_rate:{reporter.user_id}")

    async def test_requires_authentication(self, client, post):
        response = await client.post(REPORTS_URL, json=report_body(post.post_id))
        assert response.status_code == 401

    async def test_invalid_token(self, client, post):
        response = await client.post(
            REPORTS_URL,
            json=report_body(post.post_id),
            headers={"Authorization": "Bearer not-a-token"},
        )
        assert response.status_code == 401

    async def test_missing_target(self, client, reporter, auth_headers):
        response = await client.post(
            REPORTS_URL, json=report_body(999), headers=auth_headers(reporter)
        )

        assert response.status_code == 404
        assert "not found" in response.json()["detail"]

    async def test_duplicate(self, client, reporter, post, auth_headers):
        headers = auth_headers(reporter)
        first = await client.post(REPORTS_URL, json=report_body(post.post_id), headers=headers)
        second = await client.post(
            REPORTS_URL, json=report_body(post.post_id, reason="HARASSMENT"), headers=headers
        )

        assert first.status_code == 201
        assert second.status_code == 409

    async def test_rate_limited(self, client, reporter, post, auth_headers, mock_redis):
        mock_redis.get.return_value = str(settings.REPORT_RATE_LIMIT)

        response = await client.post(
            REPORTS_URL, json=report_body(post.post_id), headers=auth_headers(reporter)
        )

        assert response.status_code == 429

    async def test_unknown_reason(self, client, reporter, post, auth_headers):
        response = await client.post(
            REPORTS_URL,
            json=report_body(post.post_id, reason="BORING"),
            headers=auth_headers(reporter),
        )
        assert response.status_code == 422

    async def test_scoring_signals_escalate(self, app, client, reporter, post, auth_headers):
        provider = StaticSignalProvider(
            ReportSignals(geographic_weight=0.95, ai_urgency=AiUrgency.CRITICAL)
        )
        app.dependency_overrides[get_signal_provider] = lambda: provider

        response = await client.post(
            REPORTS_URL, json=report_body(post.post_id), headers=auth_headers(reporter)
        )

        assert response.status_code == 201
        assert response.json()["priority"] == "URGENT"

    async def test_inactive_user_rejected(self, client, make_user, post, auth_headers):
        gone = await make_user("gone", active=False)

        response = await client.post(
            REPORTS_URL, json=report_body(post.post_id), headers=auth_headers(gone)
        )

        assert response.status_code == 401


@pytest.mark.api
class TestMyReports:
    async def test_lists_only_own_reports(
        self, client, reporter, make_user, make_report, post, auth_headers
    ):
        other = await make_user("other")
        mine = await make_report(reporter.user_id, post.post_id)
        await make_report(other.user_id, post.post_id)

        response = await client.get(f"{REPORTS_URL}/mine", headers=auth_headers(reporter))

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        item = data["items"][0]
        assert item["report_id"] == mine.report_id
        assert "moderator_id" not in item
        assert "moderator_notes" not in item
        assert "geographic_weight" not in item


@pytest.mark.api
class TestReportDetail:
    async def test_moderator_sees_people(
        self, client, reporter, author, moderator, make_report, post, auth_headers
    ):
        report = await make_report(reporter.user_id, post.post_id)

        response = await client.get(
            f"{REPORTS_URL}/{report.report_id}", headers=auth_headers(moderator)
        )

        assert response.status_code == 200
        data = response.json()
        assert data["reporter"]["username"] == "reporter"
        assert data["responsible_user"]["user_id"] == author.user_id
        assert data["target_exists"] is True
        assert "email" not in data["reporter"]

    async def test_reporter_forbidden(self, client, reporter, make_report, post, auth_headers):
        report = await make_report(reporter.user_id, post.post_id)

        response = await client.get(
            f"{REPORTS_URL}/{report.report_id}", headers=auth_headers(reporter)
        )

        assert response.status_code == 403

    async def test_missing(self, client, moderator, auth_headers):
        response = await client.get(f"{REPORTS_URL}/999", headers=auth_headers(moderator))
        assert response.status_code == 404


@pytest.mark.api
class TestClaimReport:
    async def test_claim(self, client, reporter, moderator, make_report, post, auth_headers):
        report = await make_report(reporter.user_id, post.post_id)

        response = await client.post(
            f"{REPORTS_URL}/{report.report_id}/claim", headers=auth_headers(moderator)
        )

        assert response.status_code == 200
        assert response.json()["status"] == "IN_REVIEW"
        assert response.json()["claimed_by"] == moderator.user_id

    async def test_claimed_by_someone_else(
        self, client, reporter, moderator, make_user, make_report, post, auth_headers
    ):
        other = await make_user("other_mod", is_moderator=True)
        report = await make_report(reporter.user_id, post.post_id)
        await client.post(f"{REPORTS_URL}/{report.report_id}/claim", headers=auth_headers(moderator))

        response = await client.post(
            f"{REPORTS_URL}/{report.report_id}/claim", headers=auth_headers(other)
        )

        assert response.status_code == 409


@pytest.mark.api
class TestResolveReport:
    async def test_resolve(
        self, client, reporter, moderator, make_report, post, auth_headers, mock_queue
    ):
        report = await make_report(reporter.user_id, post.post_id)

        response = await client.post(
            f"{REPORTS_URL}/{report.report_id}/resolve",
            json={"action": "CONTENT_HIDDEN", "notes": "Spam link"},
            headers=auth_headers(moderator),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["outcome"] == "resolved"
        assert data["degraded"] is False
        assert data["action_taken"] == "CONTENT_HIDDEN"
        assert data["effects"]["content"] == "succeeded"
        assert data["log_id"] is not None
        assert data["report"]["status"] == "RESOLVED"
        mock_queue.enqueue_job.assert_awaited_once_with(
            "notify_report_resolved",
            report_id=report.report_id,
            _job_id=f"report-resolved:{report.report_id}",
        )

    async def test_resolve_twice(
        self, client, reporter, moderator, make_report, post, auth_headers, mock_queue
    ):
        report = await make_report(reporter.user_id, post.post_id)
        url = f"{REPORTS_URL}/{report.report_id}/resolve"
        headers = auth_headers(moderator)
        await client.post(url, json={"action": "CONTENT_HIDDEN"}, headers=headers)

        response = await client.post(url, json={"action": "USER_BANNED"}, headers=headers)

        assert response.status_code == 200
        data = response.json()
        assert data["outcome"] == "already_resolved"
        assert data["action_taken"] == "CONTENT_HIDDEN"
        assert data["effects"] is None
        assert mock_queue.enqueue_job.await_count == 1

    async def test_suspend_with_duration(
        self, client, reporter, author, moderator, make_report, post, auth_headers, mock_queue
    ):
        report = await make_report(reporter.user_id, post.post_id)

        response = await client.post(
            f"{REPORTS_URL}/{report.report_id}/resolve",
            json={"action": "USER_SUSPENDED", "duration_days": 3},
            headers=auth_headers(moderator),
        )

        assert response.status_code == 200
        effects = response.json()["effects"]
        assert effects["user_sanction"] == "succeeded"
        assert effects["responsible_user_id"] == author.user_id
        assert effects["suspension_id"] is not None
        mock_queue.enqueue_job.assert_any_await(
            "notify_user_suspended",
            suspension_id=effects["suspension_id"],
            _job_id=f"user-suspended:{effects['suspension_id']}",
        )

    async def test_degraded_when_target_gone(
        self, client, db_session, reporter, moderator, make_report, post, auth_headers
    ):
        report = await make_report(reporter.user_id, post.post_id)
        await db_session.delete(post)
        await db_session.commit()

        response = await client.post(
            f"{REPORTS_URL}/{report.report_id}/resolve",
            json={"action": "CONTENT_DELETED"},
            headers=auth_headers(moderator),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["outcome"] == "resolved"
        assert data["degraded"] is True
        assert data["effects"]["content"] == "unresolved"

    async def test_queue_outage_does_not_fail_resolution(
        self, client, reporter, moderator, make_report, post, auth_headers, mock_queue
    ):
        mock_queue.enqueue_job.side_effect = ConnectionError("redis down")
        report = await make_report(reporter.user_id, post.post_id)

        response = await client.post(
            f"{REPORTS_URL}/{report.report_id}/resolve",
            json={"action": "NO_ACTION"},
            headers=auth_headers(moderator),
        )

        assert response.status_code == 200
        assert response.json()["outcome"] == "resolved"

    async def test_lifecycle_action_rejected(
        self, client, reporter, moderator, make_report, post, auth_headers
    ):
        report = await make_report(reporter.user_id, post.post_id)

        response = await client.post(
            f"{REPORTS_URL}/{report.report_id}/resolve",
            json={"action": "SUSPENSION_LIFTED"},
            headers=auth_headers(moderator),
        )

        assert response.status_code == 422

    async def test_missing_report(self, client, moderator, auth_headers):
        response = await client.post(
            f"{REPORTS_URL}/999/resolve",
            json={"action": "NO_ACTION"},
            headers=auth_headers(moderator),
        )

        assert response.status_code == 404
        assert response.json() == {"detail": "Report 999 not found", "request_id": ANY}

    async def test_reporter_cannot_resolve(self, client, reporter, make_report, post, auth_headers):
        report = await make_report(reporter.user_id, post.post_id)

        response = await client.post(
            f"{REPORTS_URL}/{report.report_id}/resolve",
            json={"action": "NO_ACTION"},
            headers=auth_headers(reporter),
        )

        assert response.status_code == 403
