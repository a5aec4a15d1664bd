"""Tests for the structlog processors and request context."""

from unittest.mock import patch

import pytest

from trust_engine.config import settings
from trust_engine.core.auth import get_current_user
from trust_engine.core.logging import (
    FREE_TEXT_LOG_LIMIT,
    actor_role_ctx,
    add_actor_context,
    clear_request_context,
    set_actor_context,
    set_request_context,
    truncate_free_text,
    use_console_renderer,
)


@pytest.fixture(autouse=True)
def clean_context():
    clear_request_context()
    yield
    clear_request_context()


@pytest.mark.unit
class TestActorContext:
    def test_outside_a_request_is_system(self):
        event = add_actor_context(None, "info", {"event": "suspensions_expired"})
        assert event["actor_role"] == "system"
        assert "user_id" not in event

    def test_request_with_actor(self):
        set_request_context("req-1")
        set_actor_context(42, "moderator")

        event = add_actor_context(None, "info", {"event": "report_resolved"})

        assert event["request_id"] == "req-1"
        assert event["user_id"] == 42
        assert event["actor_role"] == "moderator"

    def test_anonymous_request_has_no_role(self):
        set_request_context("req-2")
        event = add_actor_context(None, "info", {"event": "http_request"})
        assert "actor_role" not in event

    def test_explicit_role_is_kept(self):
        event = add_actor_context(None, "info", {"event": "x", "actor_role": "worker"})
        assert event["actor_role"] == "worker"

    def test_clear(self):
        set_request_context("req-3")
        set_actor_context(42, "admin")
        clear_request_context()

        event = add_actor_context(None, "info", {"event": "x"})
        assert "request_id" not in event
        assert event["actor_role"] == "system"


@pytest.mark.unit
class TestAuthSetsRole:
    async def test_moderator(self, db_session, moderator):
        await get_current_user(moderator.user_id, db_session)
        assert actor_role_ctx.get() == "moderator"

    async def test_admin(self, db_session, admin):
        await get_current_user(admin.user_id, db_session)
        assert actor_role_ctx.get() == "admin"

    async def test_regular_user(self, db_session, reporter):
        await get_current_user(reporter.user_id, db_session)
        assert actor_role_ctx.get() == "user"


@pytest.mark.unit
class TestTruncateFreeText:
    def test_long_description_is_cut(self):
        text = "x" * 500
        event = truncate_free_text(None, "info", {"event": "report_submitted", "description": text})
        assert event["description"] == f"{'x' * FREE_TEXT_LOG_LIMIT}... (500 chars)"

    def test_short_text_untouched(self):
        event = truncate_free_text(None, "info", {"event": "user_warned", "reason": "spam"})
        assert event["reason"] == "spam"

    def test_other_keys_untouched(self):
        text = "y" * 500
        event = truncate_free_text(None, "info", {"event": "x", "error": text, "notes": None})
        assert event["error"] == text
        assert event["notes"] is None


@pytest.mark.unit
class TestRendererChoice:
    def test_explicit_format_wins(self):
        with (
            patch.object(settings, "LOG_FORMAT", "json"),
            patch.object(settings, "ENVIRONMENT", "development"),
        ):
            assert use_console_renderer() is False

    def test_console_requested(self):
        with (
            patch.object(settings, "LOG_FORMAT", "console"),
            patch.object(settings, "ENVIRONMENT", "production"),
        ):
            assert use_console_renderer() is True

    def test_unset_follows_environment(self):
        with patch.object(settings, "LOG_FORMAT", None):
            with patch.object(settings, "ENVIRONMENT", "development"):
                assert use_console_renderer() is True
            with patch.object(settings, "ENVIRONMENT", "production"):
                assert use_console_renderer() is False
