"""
Case-related Pydantic models
"""

import re
from datetime import datetime
from typing import List, Optional, Set, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from case_review.models.comment import CommentThread
from case_review.models.document import Document, DocumentInput
from case_review.models.enums import CaseStatus, ChangeType

EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")

class ClientInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    client_name: str = Field(..., max_length=255)
    address: str = Field(..., max_length=1000)
    date_of_information: str = Field(..., description="Free-text date the information refers to")
    account_id: Optional[str] = Field(None, description="External account identifier of the client")
    email: Optional[str] = None

    @field_validator('client_name', 'address', 'date_of_information')
    @classmethod
    def validate_required_text(cls, v, info):
        if not v or not v.strip():
            raise ValueError(f'{info.field_name} cannot be empty')
        return v.strip()

    @field_validator('account_id')
    @classmethod
    def validate_account_id(cls, v):
        if v is not None and not v.strip():
            raise ValueError('account_id cannot be empty string')
        return v.strip() if v else v

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        if v is None:
            return v
        v = v.strip()
        if not EMAIL_PATTERN.fullmatch(v):
            raise ValueError('email is invalid')
        return v

class ChangeRequestInput(BaseModel):
    change_request_id: Optional[str] = None
    hdi_number: str
    country: str
    type_of_change: ChangeType

    @field_validator('hdi_number', 'country')
    @classmethod
    def validate_required_text(cls, v, info):
        if not v or not v.strip():
            raise ValueError(f'{info.field_name} cannot be empty')
        return v.strip()

class ChangeRequest(BaseModel):
    """One requested account modification; fixed once the case is submitted"""
    model_config = ConfigDict(frozen=True)

    change_request_id: str
    hdi_number: str
    country: str
    type_of_change: ChangeType

class Case(BaseModel):
    """
    The aggregate owned by CaseStore.

    Cases are immutable values; the store replaces the whole record on
    every mutation and bumps `version`.
    """
    model_config = ConfigDict(frozen=True)

    case_id: str
    client_info: ClientInfo
    change_requests: Tuple[ChangeRequest, ...] = ()
    documents: Tuple[Document, ...] = ()
    comments: CommentThread = Field(default_factory=CommentThread)
    status: CaseStatus = CaseStatus.PENDING
    current_assignee: str
    submitted_at: datetime
    updated_at: datetime
    version: int = 1

    @property
    def change_request_ids(self) -> Set[str]:
        return {request.change_request_id for request in self.change_requests}

    def find_document(self, document_id: str) -> Optional[Document]:
        for document in self.documents:
            if document.document_id == document_id:
                return document
        return None

class CasePermissions(BaseModel):
    model_config = ConfigDict(frozen=True)

    can_comment: bool = False
    can_approve: bool = False
    can_reject: bool = False
    can_move_forward: bool = False

class CaseCreateRequest(BaseModel):
    client_info: ClientInfo
    change_requests: List[ChangeRequestInput] = Field(..., min_length=1)
    documents: List[DocumentInput] = Field(default_factory=list)

class StatusUpdateRequest(BaseModel):
    status: CaseStatus
    acting_label: Optional[str] = Field(None, description="Next assignee; defaults to the target status' team")
    expected_version: Optional[int] = Field(None, ge=1, description="Optimistic concurrency check")
