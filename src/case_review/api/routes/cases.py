"""
Case management API routes
All workflow rules live in the CaseStore; failures surface as workflow
errors and are mapped to HTTP responses by utils.error_handling.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from case_review.api.dependencies import get_case_store, get_visible_case
from case_review.config import settings
from case_review.exceptions import PermissionDeniedError
from case_review.models.case import Case, CaseCreateRequest, ClientInfo, StatusUpdateRequest
from case_review.models.comment import CommentCreateRequest
from case_review.models.document import AttachmentCreateRequest, AttachmentUploadRequest
from case_review.models.enums import CaseStatus, CommentTarget, Role
from case_review.services.cases_service import CaseStore
from case_review.utils.auth import AuthContext, get_auth_context
from case_review.utils.error_handling import set_endpoint_context

router = APIRouter()
logger = logging.getLogger(__name__)

def _case_payload(store: CaseStore, case: Case, auth: AuthContext) -> Dict[str, Any]:
    requirements = store.required_document_names(case.case_id)
    payload = case.model_dump(mode="json")
    payload.update({
        "permissions": store.policy.permissions(auth.role, case).model_dump(),
        "required_documents": requirements.sorted_names(),
        "any_documents_required": requirements.any_documents_required,
        "missing_required_documents": [
            document.name for document in store.missing_required_documents(case.case_id)
        ],
    })
    return payload

def _bind_client_account(client_info: ClientInfo, auth: AuthContext) -> ClientInfo:
    """Tie a client submission to the caller's own account id"""
    if auth.role != Role.CLIENT:
        return client_info

    if not auth.client_id:
        raise PermissionDeniedError("Clients must send X-Client-Id to submit a case")
    if client_info.account_id is None:
        return client_info.model_copy(update={"account_id": auth.client_id})
    if client_info.account_id != auth.client_id:
        logger.warning(f"Client {auth.client_id} tried to submit a case for account {client_info.account_id}")
        raise PermissionDeniedError(
            f"Client {auth.client_id} cannot submit a case for account {client_info.account_id}"
        )
    return client_info

@router.post("", status_code=201)
async def create_case(
    request: CaseCreateRequest,
    auth: AuthContext = Depends(get_auth_context),
    store: CaseStore = Depends(get_case_store)
):
    """Submit a new case"""
    set_endpoint_context("case_creation")

    case = store.create_case(
        client_info=_bind_client_account(request.client_info, auth),
        change_requests=request.change_requests,
        documents=request.documents
    )

    if settings.AUTO_INTAKE_ASSIGNMENT:
        case = store.assign_intake(case.case_id)

    logger.info(f"Case {case.case_id} submitted by {auth.team_label}")
    return _case_payload(store, case, auth)

@router.get("")
async def list_cases(
    status: Optional[CaseStatus] = Query(None, description="Only cases in this status"),
    auth: AuthContext = Depends(get_auth_context),
    store: CaseStore = Depends(get_case_store)
):
    """List the cases visible to the caller, in creation order"""
    cases = store.visible_cases(auth.role, auth.client_id)
    if status is not None:
        cases = [case for case in cases if case.status == status]

    return {
        "total_count": len(cases),
        "cases": [case.model_dump(mode="json") for case in cases]
    }

@router.get("/{case_id}")
async def get_case(
    case_id: str,
    auth: AuthContext = Depends(get_auth_context),
    store: CaseStore = Depends(get_case_store)
):
    """Get case details with the caller's permissions"""
    case = get_visible_case(store, case_id, auth)
    return _case_payload(store, case, auth)

@router.get("/{case_id}/permissions")
async def get_permissions(
    case_id: str,
    auth: AuthContext = Depends(get_auth_context),
    store: CaseStore = Depends(get_case_store)
):
    """Actions the caller may take on the case right now"""
    case = get_visible_case(store, case_id, auth)
    return store.policy.permissions(auth.role, case).model_dump()

@router.get("/{case_id}/required-documents")
async def get_required_documents(
    case_id: str,
    auth: AuthContext = Depends(get_auth_context),
    store: CaseStore = Depends(get_case_store)
):
    """Documents the case's change requests require"""
    get_visible_case(store, case_id, auth)
    requirements = store.required_document_names(case_id)
    return {
        "case_id": case_id,
        "required_documents": requirements.sorted_names(),
        "any_documents_required": requirements.any_documents_required,
        "missing_required_documents": [
            document.name for document in store.missing_required_documents(case_id)
        ]
    }

@router.post("/{case_id}/status")
async def update_status(
    case_id: str,
    request: StatusUpdateRequest,
    auth: AuthContext = Depends(get_auth_context),
    store: CaseStore = Depends(get_case_store)
):
    """Move forward, approve or reject a case"""
    set_endpoint_context("case_status_update")
    get_visible_case(store, case_id, auth)

    case = store.update_status(
        case_id,
        request.status,
        request.acting_label,
        auth.role,
        expected_version=request.expected_version
    )
    return _case_payload(store, case, auth)

@router.get("/{case_id}/comments")
async def list_comments(
    case_id: str,
    target: CommentTarget = Query(CommentTarget.CLIENT_INFO),
    target_id: Optional[str] = Query(None),
    auth: AuthContext = Depends(get_auth_context),
    store: CaseStore = Depends(get_case_store)
):
    """Comments on the client info or on one change request"""
    get_visible_case(store, case_id, auth)
    comments = store.comments_for(case_id, target, target_id)
    return {
        "case_id": case_id,
        "target": target.value,
        "target_id": target_id,
        "comments": [comment.model_dump(mode="json") for comment in comments]
    }

@router.post("/{case_id}/comments", status_code=201)
async def add_comment(
    case_id: str,
    request: CommentCreateRequest,
    auth: AuthContext = Depends(get_auth_context),
    store: CaseStore = Depends(get_case_store)
):
    """Add a comment as the assigned team"""
    set_endpoint_context("comment_creation")
    get_visible_case(store, case_id, auth)

    case = store.add_comment(case_id, request, auth.role)
    comment = case.comments.root[-1]
    return {
        "case_id": case_id,
        "version": case.version,
        "comment": comment.model_dump(mode="json")
    }

@router.post("/{case_id}/attachments", status_code=201)
async def add_attachment(
    case_id: str,
    request: AttachmentCreateRequest,
    auth: AuthContext = Depends(get_auth_context),
    store: CaseStore = Depends(get_case_store)
):
    """Add an awaiting attachment slot"""
    set_endpoint_context("attachment_creation")
    get_visible_case(store, case_id, auth)

    case = store.add_attachment(case_id, request.name, auth.role, expected_version=request.expected_version)
    return {
        "case_id": case_id,
        "version": case.version,
        "document": case.documents[-1].model_dump(mode="json")
    }

@router.put("/{case_id}/attachments/{document_id}")
async def upload_attachment(
    case_id: str,
    document_id: str,
    request: AttachmentUploadRequest,
    auth: AuthContext = Depends(get_auth_context),
    store: CaseStore = Depends(get_case_store)
):
    """Bind a stored file to a document"""
    set_endpoint_context("attachment_upload")
    get_visible_case(store, case_id, auth)

    case = store.upload_attachment(
        case_id,
        document_id,
        request.file_handle,
        auth.role,
        expected_version=request.expected_version
    )
    return {
        "case_id": case_id,
        "version": case.version,
        "document": case.find_document(document_id).model_dump(mode="json")
    }

@router.delete("/{case_id}/attachments/{document_id}")
async def remove_attachment(
    case_id: str,
    document_id: str,
    expected_version: Optional[int] = Query(None, ge=1),
    auth: AuthContext = Depends(get_auth_context),
    store: CaseStore = Depends(get_case_store)
):
    """Remove an attachment; required documents are only reset"""
    set_endpoint_context("attachment_removal")
    get_visible_case(store, case_id, auth)

    case = store.remove_attachment(case_id, document_id, auth.role, expected_version=expected_version)
    remaining = case.find_document(document_id)
    return {
        "case_id": case_id,
        "version": case.version,
        "document_id": document_id,
        "removed": remaining is None,
        "document": remaining.model_dump(mode="json") if remaining else None
    }
