"""
Failure kinds raised by the case workflow core

Every error is local, synchronous and non-retryable: it describes a
caller mistake, not a transient fault. The HTTP layer maps each kind to
a status code in utils.error_handling.
"""

from typing import Any, Dict, Optional


class CaseWorkflowError(Exception):
    """Base class for every failure the workflow core surfaces"""

    error_type = "WORKFLOW_ERROR"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        details = {"type": self.error_type, "message": self.message}
        if self.field:
            details["field"] = self.field
        return details


class ValidationError(CaseWorkflowError):
    """Malformed input: blank comment text, missing target reference, bad client info"""

    error_type = "VALIDATION_ERROR"


class PermissionDeniedError(CaseWorkflowError):
    """The acting role lacks the capability for this action in the current case state"""

    error_type = "PERMISSION_DENIED"


class InvalidTransitionError(CaseWorkflowError):
    """Requested status change is not part of the lifecycle table"""

    error_type = "INVALID_TRANSITION"

    def __init__(self, current: str, target: str):
        super().__init__(f"Cannot move case from '{current}' to '{target}'", field="status")
        self.current = current
        self.target = target


class NotFoundError(CaseWorkflowError):
    """Unknown case, document or change request identifier"""

    error_type = "RESOURCE_NOT_FOUND"

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} not found: {identifier}")
        self.resource = resource
        self.identifier = identifier


class ConflictError(CaseWorkflowError):
    """The case changed since the caller last read it"""

    error_type = "CONFLICT_ERROR"

    def __init__(self, case_id: str, expected_version: int, actual_version: int):
        super().__init__(
            f"Case {case_id} is at version {actual_version}, expected {expected_version}",
            field="expected_version",
        )
        self.case_id = case_id
        self.expected_version = expected_version
        self.actual_version = actual_version
