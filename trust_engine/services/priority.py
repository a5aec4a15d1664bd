"""
Priority scoring for new reports.

Pure function of the report's reason, target kind and the optional signals
from the external scorer. Severe reasons start at HIGH, everything else at
MEDIUM; a critical AI urgency and a geographic weight above the threshold
each add one tier, capped at URGENT. Escalation never lowers a tier.
"""

from trust_engine.config import (
    CRITICAL_AI_URGENCY,
    PRIORITY_ORDER,
    SEVERE_REASONS,
    AiUrgency,
    ReportPriority,
    ReportReason,
    TargetKind,
    settings,
)


def baseline_priority(reason: ReportReason) -> ReportPriority:
    """Tier a report starts at before any signal is applied."""
    return ReportPriority.HIGH if reason in SEVERE_REASONS else ReportPriority.MEDIUM


def escalate(priority: ReportPriority, steps: int = 1) -> ReportPriority:
    """Move up `steps` tiers, stopping at URGENT."""
    return PRIORITY_ORDER[min(priority.rank + steps, len(PRIORITY_ORDER) - 1)]


def score(
    reason: ReportReason,
    target_kind: TargetKind,
    geo_weight: float | None = None,
    ai_urgency: AiUrgency | None = None,
    geo_threshold: float | None = None,
) -> ReportPriority:
    """
    Compute the priority tier for a new report.

    Args:
        reason: Report reason code
        target_kind: Kind of the reported entity (the current rules do not
            weight by kind, it is accepted so callers never need to change)
        geo_weight: Geographic spread weight from the external scorer
        ai_urgency: Urgency label from the external scorer
        geo_threshold: Override for GEO_WEIGHT_ESCALATION_THRESHOLD

    Returns:
        The priority tier
    """
    threshold = settings.GEO_WEIGHT_ESCALATION_THRESHOLD if geo_threshold is None else geo_threshold

    steps = 0
    if ai_urgency is not None and AiUrgency(ai_urgency) in CRITICAL_AI_URGENCY:
        steps += 1
    if geo_weight is not None and geo_weight > threshold:
        steps += 1

    return escalate(baseline_priority(ReportReason(reason)), steps)
