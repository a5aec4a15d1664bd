"""
API v1 Router
"""

from fastapi import APIRouter

from trust_engine.api.v1 import appeals, moderation, reports, sanctions

router = APIRouter()

# Include all endpoint routers
router.include_router(reports.router)
router.include_router(moderation.router)
router.include_router(sanctions.router)
router.include_router(appeals.router)

__all__ = ["router"]
