"""
Enum definitions for the case review workflow
"""

from enum import Enum

class Role(str, Enum):
    """Acting identity supplied by the caller on every request"""
    CLIENT = "client"
    OKW = "okw"
    CDD = "cdd"

# Case lifecycle: pending -> with-okw -> with-cdd -> approved | rejected
class CaseStatus(str, Enum):
    """
    Review status of a case.

    - PENDING: submitted by the client, not yet picked up
    - WITH_OKW: with the operational team
    - WITH_CDD: with the compliance team
    - APPROVED / REJECTED: terminal decisions
    """
    PENDING = "pending"
    WITH_OKW = "with-okw"
    WITH_CDD = "with-cdd"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self in (CaseStatus.APPROVED, CaseStatus.REJECTED)

class ChangeType(str, Enum):
    ADDRESS_UPDATE = "Address Update"
    ENTITY_TYPE_CHANGE = "Entity Type Change"
    NAME_CHANGE = "Name Change"
    CONTACT_INFORMATION = "Contact Information"
    OTHER = "Other"

class CommentTarget(str, Enum):
    CLIENT_INFO = "client-info"
    CHANGE_REQUEST = "change-request"

# Transition classes, each gated by one permission flag
class CaseAction(str, Enum):
    INTAKE = "intake"
    MOVE_FORWARD = "move_forward"
    APPROVE = "approve"
    REJECT = "reject"
