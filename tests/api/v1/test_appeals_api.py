"""
Tests for suspension appeal endpoints.
"""

from datetime import timedelta

import pytest

from trust_engine.config import SuspensionType
from trust_engine.core.database import utcnow
from trust_engine.services import appeals

APPEALS_URL = "/api/v1/moderation/appeals"


@pytest.fixture
async def suspension(make_suspension, author):
    return await make_suspension(author.user_id, ends_at=utcnow() + timedelta(days=3))


def appeal_body(suspension_id: int, reason: str = "I was quoting the spam to warn others") -> dict:
    return {"suspension_id": suspension_id, "reason": reason}


@pytest.mark.api
class TestSubmitAppeal:
    async def test_submit(self, client, author, suspension, auth_headers):
        response = await client.post(
            APPEALS_URL, json=appeal_body(suspension.suspension_id), headers=auth_headers(author)
        )

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "PENDING"
        assert data["suspension_id"] == suspension.suspension_id
        assert data["user_id"] == author.user_id

    async def test_not_your_suspension(self, client, reporter, suspension, auth_headers):
        response = await client.post(
            APPEALS_URL, json=appeal_body(suspension.suspension_id), headers=auth_headers(reporter)
        )
        assert response.status_code == 404

    async def test_duplicate(self, client, author, suspension, auth_headers):
        headers = auth_headers(author)
        await client.post(APPEALS_URL, json=appeal_body(suspension.suspension_id), headers=headers)

        response = await client.post(
            APPEALS_URL, json=appeal_body(suspension.suspension_id), headers=headers
        )

        assert response.status_code == 409

    async def test_inactive_suspension(self, client, author, make_suspension, auth_headers):
        lifted = await make_suspension(author.user_id, is_active=False)

        response = await client.post(
            APPEALS_URL, json=appeal_body(lifted.suspension_id), headers=auth_headers(author)
        )

        assert response.status_code == 400

    async def test_reason_too_short(self, client, author, suspension, auth_headers):
        response = await client.post(
            APPEALS_URL,
            json=appeal_body(suspension.suspension_id, reason="   sorry   "),
            headers=auth_headers(author),
        )
        assert response.status_code == 422

    async def test_too_many_appeals(self, client, author, make_suspension, auth_headers, monkeypatch):
        monkeypatch.setattr(appeals.settings, "APPEAL_LIMIT_PER_WINDOW", 1)
        headers = auth_headers(author)
        first = await make_suspension(author.user_id, suspension_type=SuspensionType.PERMANENT)
        second = await make_suspension(author.user_id, suspension_type=SuspensionType.PERMANENT)
        await client.post(APPEALS_URL, json=appeal_body(first.suspension_id), headers=headers)

        response = await client.post(
            APPEALS_URL, json=appeal_body(second.suspension_id), headers=headers
        )

        assert response.status_code == 429


@pytest.mark.api
class TestListAppeals:
    async def test_mine(self, client, author, suspension, auth_headers):
        headers = auth_headers(author)
        await client.post(APPEALS_URL, json=appeal_body(suspension.suspension_id), headers=headers)

        response = await client.get(f"{APPEALS_URL}/mine", headers=headers)

        assert response.status_code == 200
        assert response.json()["total"] == 1

    async def test_queue_is_moderator_only(self, client, author, auth_headers):
        response = await client.get(APPEALS_URL, headers=auth_headers(author))
        assert response.status_code == 403

    async def test_queue_by_status(self, client, author, moderator, suspension, auth_headers):
        await client.post(
            APPEALS_URL, json=appeal_body(suspension.suspension_id), headers=auth_headers(author)
        )
        headers = auth_headers(moderator)

        pending = await client.get(APPEALS_URL, headers=headers)
        denied = await client.get(APPEALS_URL, params={"status": "DENIED"}, headers=headers)

        assert pending.json()["total"] == 1
        assert denied.json()["total"] == 0


@pytest.mark.api
class TestGetAppeal:
    async def _appeal(self, client, author, suspension, auth_headers) -> int:
        response = await client.post(
            APPEALS_URL, json=appeal_body(suspension.suspension_id), headers=auth_headers(author)
        )
        return response.json()["appeal_id"]

    async def test_owner_can_read(self, client, author, suspension, auth_headers):
        appeal_id = await self._appeal(client, author, suspension, auth_headers)

        response = await client.get(f"{APPEALS_URL}/{appeal_id}", headers=auth_headers(author))

        assert response.status_code == 200
        assert response.json()["appeal_id"] == appeal_id
        assert response.json()["status"] == "PENDING"

    async def test_moderator_can_read(self, client, author, moderator, suspension, auth_headers):
        appeal_id = await self._appeal(client, author, suspension, auth_headers)

        response = await client.get(f"{APPEALS_URL}/{appeal_id}", headers=auth_headers(moderator))

        assert response.status_code == 200
        assert response.json()["user_id"] == author.user_id

    async def test_other_user_forbidden(self, client, author, reporter, suspension, auth_headers):
        appeal_id = await self._appeal(client, author, suspension, auth_headers)

        response = await client.get(f"{APPEALS_URL}/{appeal_id}", headers=auth_headers(reporter))

        assert response.status_code == 403

    async def test_unknown_appeal(self, client, author, auth_headers):
        response = await client.get(f"{APPEALS_URL}/999", headers=auth_headers(author))
        assert response.status_code == 404


@pytest.mark.api
class TestReviewAppeal:
    async def _appeal(self, client, author, suspension, auth_headers) -> int:
        response = await client.post(
            APPEALS_URL, json=appeal_body(suspension.suspension_id), headers=auth_headers(author)
        )
        return response.json()["appeal_id"]

    async def test_approve(self, client, author, moderator, suspension, auth_headers, mock_queue):
        appeal_id = await self._appeal(client, author, suspension, auth_headers)

        response = await client.post(
            f"{APPEALS_URL}/{appeal_id}/review",
            json={"status": "APPROVED", "review_notes": "Context checks out"},
            headers=auth_headers(moderator),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "APPROVED"
        assert data["reviewed_by"] == moderator.user_id
        mock_queue.enqueue_job.assert_awaited_once_with(
            "notify_appeal_reviewed", appeal_id=appeal_id, _job_id=f"appeal-reviewed:{appeal_id}"
        )

        status_response = await client.get(
            f"/api/v1/moderation/users/{author.user_id}/status", headers=auth_headers(author)
        )
        assert status_response.json()["is_suspended"] is False

    async def test_second_review_conflicts(self, client, author, moderator, suspension, auth_headers):
        appeal_id = await self._appeal(client, author, suspension, auth_headers)
        headers = auth_headers(moderator)
        await client.post(f"{APPEALS_URL}/{appeal_id}/review", json={"status": "DENIED"}, headers=headers)

        response = await client.post(
            f"{APPEALS_URL}/{appeal_id}/review", json={"status": "APPROVED"}, headers=headers
        )

        assert response.status_code == 409

    async def test_pending_is_not_a_decision(self, client, author, moderator, suspension, auth_headers):
        appeal_id = await self._appeal(client, author, suspension, auth_headers)

        response = await client.post(
            f"{APPEALS_URL}/{appeal_id}/review",
            json={"status": "PENDING"},
            headers=auth_headers(moderator),
        )

        assert response.status_code == 422

    async def test_user_cannot_review(self, client, author, suspension, auth_headers):
        appeal_id = await self._appeal(client, author, suspension, auth_headers)

        response = await client.post(
            f"{APPEALS_URL}/{appeal_id}/review",
            json={"status": "APPROVED"},
            headers=auth_headers(author),
        )

        assert response.status_code == 403
