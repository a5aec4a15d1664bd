"""Tests for report priority scoring."""

import pytest

from trust_engine.config import AiUrgency, ReportPriority, ReportReason, TargetKind
from trust_engine.services.priority import baseline_priority, escalate, score


@pytest.mark.unit
class TestBaselinePriority:
    @pytest.mark.parametrize(
        "reason",
        [
            ReportReason.HATE_SPEECH,
            ReportReason.HARASSMENT,
            ReportReason.VIOLENCE_THREATS,
            ReportReason.SELF_HARM,
            ReportReason.ILLEGAL_CONTENT,
        ],
    )
    def test_severe_reasons_start_high(self, reason):
        assert baseline_priority(reason) == ReportPriority.HIGH

    @pytest.mark.parametrize(
        "reason",
        [ReportReason.SPAM, ReportReason.MISINFORMATION, ReportReason.OTHER],
    )
    def test_other_reasons_start_medium(self, reason):
        assert baseline_priority(reason) == ReportPriority.MEDIUM


@pytest.mark.unit
class TestEscalate:
    def test_one_step(self):
        assert escalate(ReportPriority.LOW) == ReportPriority.MEDIUM

    def test_caps_at_urgent(self):
        assert escalate(ReportPriority.HIGH, 5) == ReportPriority.URGENT

    def test_zero_steps_keeps_tier(self):
        assert escalate(ReportPriority.MEDIUM, 0) == ReportPriority.MEDIUM


@pytest.mark.unit
class TestScore:
    def test_no_signals_uses_baseline(self):
        assert score(ReportReason.SPAM, TargetKind.POST) == ReportPriority.MEDIUM

    def test_critical_ai_urgency_escalates_one_tier(self):
        result = score(ReportReason.SPAM, TargetKind.POST, ai_urgency=AiUrgency.CRITICAL)
        assert result == ReportPriority.HIGH

    def test_high_ai_urgency_counts_as_critical(self):
        result = score(ReportReason.SPAM, TargetKind.POST, ai_urgency=AiUrgency.HIGH)
        assert result == ReportPriority.HIGH

    def test_low_ai_urgency_does_not_escalate(self):
        result = score(ReportReason.SPAM, TargetKind.POST, ai_urgency=AiUrgency.MEDIUM)
        assert result == ReportPriority.MEDIUM

    def test_geo_weight_above_threshold_escalates(self):
        assert score(ReportReason.SPAM, TargetKind.POST, geo_weight=0.71) == ReportPriority.HIGH

    def test_geo_weight_at_threshold_does_not_escalate(self):
        assert score(ReportReason.SPAM, TargetKind.POST, geo_weight=0.7) == ReportPriority.MEDIUM

    def test_both_signals_escalate_two_tiers(self):
        result = score(
            ReportReason.SPAM,
            TargetKind.CANDIDATE,
            geo_weight=0.9,
            ai_urgency=AiUrgency.CRITICAL,
        )
        assert result == ReportPriority.URGENT

    def test_severe_reason_with_both_signals_caps_at_urgent(self):
        result = score(
            ReportReason.HATE_SPEECH,
            TargetKind.POST,
            geo_weight=0.95,
            ai_urgency=AiUrgency.CRITICAL,
        )
        assert result == ReportPriority.URGENT

    def test_severe_reason_with_one_signal_is_urgent(self):
        result = score(ReportReason.HARASSMENT, TargetKind.COMMENT, ai_urgency=AiUrgency.HIGH)
        assert result == ReportPriority.URGENT

    def test_threshold_override(self):
        result = score(ReportReason.SPAM, TargetKind.POST, geo_weight=0.5, geo_threshold=0.4)
        assert result == ReportPriority.HIGH

    def test_accepts_raw_string_values(self):
        result = score("SPAM", "POST", ai_urgency="CRITICAL")  # type: ignore[arg-type]
        assert result == ReportPriority.HIGH
