"""
Pydantic schemas for API responses and requests
"""

from trust_engine.schemas.appeal import (
    AppealCreate,
    AppealListResponse,
    AppealResponse,
    AppealReviewRequest,
)
from trust_engine.schemas.common import MessageResponse, UserSummary
from trust_engine.schemas.moderation import (
    ContentFlagListResponse,
    ContentFlagResponse,
    ModerationHealthResponse,
    ModerationLogListResponse,
    ModerationLogResponse,
    StatsResponse,
    SuspensionCreate,
    SuspensionLiftRequest,
    SuspensionLiftResponse,
    SuspensionListResponse,
    SuspensionResponse,
    SuspensionStatusResponse,
    SweepResponse,
    WarningCreate,
    WarningIssuedResponse,
    WarningListResponse,
    WarningResponse,
)
from trust_engine.schemas.report import (
    ActionEffects,
    MyReportListResponse,
    MyReportResponse,
    ReportCreate,
    ReportDetailResponse,
    ReportListResponse,
    ReportResolveRequest,
    ReportResolveResponse,
    ReportResponse,
    ReportSubmitResponse,
)

__all__ = [
    "ActionEffects",
    "AppealCreate",
    "AppealListResponse",
    "AppealResponse",
    "AppealReviewRequest",
    "ContentFlagListResponse",
    "ContentFlagResponse",
    "MessageResponse",
    "ModerationHealthResponse",
    "ModerationLogListResponse",
    "ModerationLogResponse",
    "MyReportListResponse",
    "MyReportResponse",
    "ReportCreate",
    "ReportDetailResponse",
    "ReportListResponse",
    "ReportResolveRequest",
    "ReportResolveResponse",
    "ReportResponse",
    "ReportSubmitResponse",
    "StatsResponse",
    "SuspensionCreate",
    "SuspensionLiftRequest",
    "SuspensionLiftResponse",
    "SuspensionListResponse",
    "SuspensionResponse",
    "SuspensionStatusResponse",
    "SweepResponse",
    "UserSummary",
    "WarningCreate",
    "WarningIssuedResponse",
    "WarningListResponse",
    "WarningResponse",
]
