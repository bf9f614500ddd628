"""
Document-related Pydantic models
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

class Document(BaseModel):
    """
    A document slot on a case.

    `required` is derived from the case's change requests and never set by
    callers. Required documents can only be reset to not-uploaded; other
    documents (attachments) are deleted outright when removed. `awaiting`
    marks a slot a reviewer added that has no file bound yet.
    """
    model_config = ConfigDict(frozen=True)

    document_id: str
    name: str
    required: bool = False
    uploaded: bool = False
    awaiting: bool = False
    file_handle: Optional[Any] = None

class DocumentInput(BaseModel):
    """Document supplied by the client at submission time"""
    model_config = ConfigDict(extra="ignore")

    document_id: Optional[str] = None
    name: str = Field(..., max_length=255)
    uploaded: bool = False
    file_handle: Optional[Any] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError('name cannot be empty')
        return v.strip()

class AttachmentCreateRequest(BaseModel):
    """Request model for adding an awaiting attachment slot"""
    name: str = Field(..., max_length=255, description="Display name of the attachment")
    expected_version: Optional[int] = Field(None, ge=1, description="Optimistic concurrency check")

class AttachmentUploadRequest(BaseModel):
    """Request model for binding a file handle to a document"""
    file_handle: Any = Field(..., description="Opaque handle of the stored file")
    expected_version: Optional[int] = Field(None, ge=1, description="Optimistic concurrency check")

    @field_validator('file_handle')
    @classmethod
    def validate_file_handle(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError('file_handle cannot be empty')
        return v
