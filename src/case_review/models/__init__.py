"""
Case review data models
"""

from case_review.models.enums import CaseAction, CaseStatus, ChangeType, CommentTarget, Role
from case_review.models.case import (
    Case,
    CaseCreateRequest,
    CasePermissions,
    ChangeRequest,
    ChangeRequestInput,
    ClientInfo,
)
from case_review.models.comment import Comment, CommentCreateRequest, CommentThread
from case_review.models.document import Document, DocumentInput

__all__ = [
    "Case",
    "CaseAction",
    "CaseCreateRequest",
    "CasePermissions",
    "CaseStatus",
    "ChangeRequest",
    "ChangeRequestInput",
    "ChangeType",
    "ClientInfo",
    "Comment",
    "CommentCreateRequest",
    "CommentTarget",
    "CommentThread",
    "Document",
    "DocumentInput",
    "Role",
]
