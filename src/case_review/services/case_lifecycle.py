"""
Case lifecycle state machine

    pending -> with-okw -> with-cdd -> approved | rejected
    pending ------------> with-cdd

Approved and rejected are terminal. There is no rollback and no way to
re-open a decided case.
"""

import logging
from datetime import datetime
from typing import Dict, Optional, Tuple

from case_review.config.role_permissions import SYSTEM_LABEL, ROLE_PERMISSIONS
from case_review.exceptions import InvalidTransitionError, ValidationError
from case_review.models.case import Case
from case_review.models.enums import CaseAction, CaseStatus, Role
from case_review.utils.helpers import is_blank

logger = logging.getLogger(__name__)

TRANSITIONS: Dict[Tuple[CaseStatus, CaseStatus], CaseAction] = {
    (CaseStatus.PENDING, CaseStatus.WITH_OKW): CaseAction.INTAKE,
    (CaseStatus.PENDING, CaseStatus.WITH_CDD): CaseAction.MOVE_FORWARD,
    (CaseStatus.WITH_OKW, CaseStatus.WITH_CDD): CaseAction.MOVE_FORWARD,
    (CaseStatus.WITH_CDD, CaseStatus.APPROVED): CaseAction.APPROVE,
    (CaseStatus.WITH_CDD, CaseStatus.REJECTED): CaseAction.REJECT,
}

# Assignee a transition hands the case to when the caller names nobody
DEFAULT_ASSIGNEES: Dict[CaseStatus, str] = {
    CaseStatus.WITH_OKW: ROLE_PERMISSIONS[Role.OKW]["team_label"],
    CaseStatus.WITH_CDD: ROLE_PERMISSIONS[Role.CDD]["team_label"],
    CaseStatus.APPROVED: SYSTEM_LABEL,
    CaseStatus.REJECTED: SYSTEM_LABEL,
}

class CaseLifecycle:
    """Validates and applies status transitions"""

    def __init__(self, transitions: Optional[Dict[Tuple[CaseStatus, CaseStatus], CaseAction]] = None):
        self.transitions = dict(transitions or TRANSITIONS)

    def action_for(self, current: CaseStatus, target: CaseStatus) -> CaseAction:
        """
        Transition class of a status change

        Raises:
            InvalidTransitionError: the change is not in the lifecycle table
        """
        current = CaseStatus(current)
        target = CaseStatus(target)
        action = self.transitions.get((current, target))
        if action is None:
            raise InvalidTransitionError(current.value, target.value)
        return action

    def can_transition(self, current: CaseStatus, target: CaseStatus) -> bool:
        return (CaseStatus(current), CaseStatus(target)) in self.transitions

    def allowed_targets(self, current: CaseStatus) -> Tuple[CaseStatus, ...]:
        current = CaseStatus(current)
        return tuple(target for (source, target) in self.transitions if source == current)

    def apply(
        self,
        case: Case,
        target: CaseStatus,
        acting_label: Optional[str],
        now: datetime,
    ) -> Case:
        """
        Return the case moved to `target`, assigned to `acting_label`

        The input case is left untouched.
        """
        target = CaseStatus(target)
        self.action_for(case.status, target)

        if acting_label is None:
            acting_label = DEFAULT_ASSIGNEES[target]
        elif is_blank(acting_label):
            raise ValidationError("acting_label cannot be empty", field="acting_label")

        logger.debug(f"Case {case.case_id}: {case.status.value} -> {target.value} ({acting_label})")
        return case.model_copy(update={
            "status": target,
            "current_assignee": acting_label.strip(),
            "updated_at": now,
        })
