"""
Shared FastAPI dependencies
"""

from fastapi import Request

from case_review.exceptions import NotFoundError
from case_review.models.case import Case
from case_review.services.cases_service import CaseStore
from case_review.utils.auth import AuthContext

def get_case_store(request: Request) -> CaseStore:
    """The application's CaseStore, created in the app lifespan"""
    return request.app.state.case_store

def get_visible_case(store: CaseStore, case_id: str, auth: AuthContext) -> Case:
    """Fetch a case, treating cases outside the caller's visibility as unknown"""
    case = store.get_case(case_id)
    if not store.policy.is_visible(auth.role, case, auth.client_id):
        raise NotFoundError("Case", case_id)
    return case
