"""
External scoring signals for new reports.

Geographic weight and AI urgency are produced by a separate scoring
service. The engine only consumes them, through a SignalProvider that the
API resolves as a dependency. The default provider supplies nothing, which
scores every report on its reason alone.
"""

from dataclasses import dataclass
from typing import Protocol

from trust_engine.config import AiUrgency, ReportReason, TargetKind


@dataclass(frozen=True)
class ReportSignals:
    geographic_weight: float | None = None
    ai_urgency: AiUrgency | None = None


class SignalProvider(Protocol):
    async def signals_for(
        self, target_kind: TargetKind, target_id: int, reason: ReportReason
    ) -> ReportSignals: ...


class NullSignalProvider:
    """Provider used when no scoring service is wired in."""

    async def signals_for(
        self, target_kind: TargetKind, target_id: int, reason: ReportReason
    ) -> ReportSignals:
        return ReportSignals()


class StaticSignalProvider:
    """Returns the same signals for every report (tooling and tests)."""

    def __init__(self, signals: ReportSignals) -> None:
        self.signals = signals

    async def signals_for(
        self, target_kind: TargetKind, target_id: int, reason: ReportReason
    ) -> ReportSignals:
        return self.signals


_default_provider = NullSignalProvider()


def get_signal_provider() -> SignalProvider:
    """FastAPI dependency; override it to plug in a real scorer."""
    return _default_provider
