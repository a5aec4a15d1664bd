"""
Domain errors raised by the moderation services and their HTTP rendering.

Services raise these instead of HTTPException so they can be called from
request handlers, the sweeper and arq jobs alike. `install_error_handlers`
maps each one to a JSON response carrying the request ID.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from trust_engine.core.logging import request_id_ctx


class ModerationError(Exception):
    """Base class for moderation workflow failures."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_detail: str = "Moderation request failed"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(ModerationError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid moderation request"


class NotFoundError(ModerationError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class TargetNotFoundError(NotFoundError):
    default_detail = "Reported content not found"


class ReportNotFoundError(NotFoundError):
    default_detail = "Report not found"


class UserNotFoundError(NotFoundError):
    default_detail = "User not found"


class SuspensionNotFoundError(NotFoundError):
    default_detail = "Suspension not found"


class AppealNotFoundError(NotFoundError):
    default_detail = "Appeal not found"


class FlagNotFoundError(NotFoundError):
    default_detail = "Content flag not found"


class ConflictError(ModerationError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflicting moderation request"


class DuplicateReportError(ConflictError):
    default_detail = "You have already reported this content"


class AppealAlreadySubmittedError(ConflictError):
    default_detail = "This suspension has already been appealed"


class AppealAlreadyReviewedError(ConflictError):
    default_detail = "Appeal has already been reviewed"


class RateLimitExceededError(ModerationError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_detail = "Too many requests"


class AlreadyResolvedError(ModerationError):
    """
    Raised internally when a resolve loses the race to another moderator.

    The API turns this into a success-shaped response so retries and
    double-clicks stay harmless.
    """

    status_code = status.HTTP_200_OK
    default_detail = "Report already resolved"

    def __init__(self, report_id: int) -> None:
        self.report_id = report_id
        super().__init__(f"Report {report_id} already resolved")


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ModerationError)
    async def moderation_error_handler(request: Request, exc: ModerationError) -> JSONResponse:
        payload = {"detail": exc.detail, "request_id": request_id_ctx.get(None)}
        return JSONResponse(status_code=exc.status_code, content=payload)
