"""
Team report API routes
"""

import logging

from fastapi import APIRouter, Depends

from case_review.api.dependencies import get_case_store
from case_review.services.cases_service import CaseStore
from case_review.services.reports_service import build_report
from case_review.utils.auth import AuthContext, get_auth_context

router = APIRouter()
logger = logging.getLogger(__name__)

@router.get("/export")
async def export_report(
    auth: AuthContext = Depends(get_auth_context),
    store: CaseStore = Depends(get_case_store)
):
    """Team performance report over the cases visible to the caller"""
    cases = store.visible_cases(auth.role, auth.client_id)
    report = build_report(cases)
    return report.model_dump(mode="json")
