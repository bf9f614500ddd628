"""
Health check API route
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from case_review import __version__
from case_review.api.dependencies import get_case_store
from case_review.config import settings
from case_review.services.cases_service import CaseStore

router = APIRouter()

@router.get("/")
async def health_check(store: CaseStore = Depends(get_case_store)):
    """Health check - reports store size and notification wiring"""
    return {
        "status": "healthy",
        "version": __version__,
        "environment": settings.ENV,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "cases": len(store.list_cases()),
        "email": "resend_configured" if settings.notifications_enabled() else "disabled"
    }
