"""
Role access policy - who may see and act on which case
"""

import logging
from typing import Iterable, List, Optional

from case_review.config.role_permissions import can_see_all_cases, team_label_for
from case_review.exceptions import PermissionDeniedError
from case_review.models.case import Case, CasePermissions
from case_review.models.enums import CaseAction, CaseStatus, Role

logger = logging.getLogger(__name__)

class RoleAccessPolicy:
    """
    Derives visibility and action permissions from role and case state.

    Everything here is a pure function of its arguments. A client is never
    the assignee of a case under review, so clients cannot comment or
    manage attachments once a case leaves intake.
    """

    def is_assigned(self, role: Role, case: Case) -> bool:
        return team_label_for(Role(role)) == case.current_assignee

    def is_visible(self, role: Role, case: Case, client_key: Optional[str] = None) -> bool:
        """
        Args:
            role: Acting role
            case: Case to check
            client_key: Account id bound to the calling client; ignored for review roles
        """
        role = Role(role)
        if can_see_all_cases(role):
            return True
        return client_key is not None and case.client_info.account_id == client_key

    def visible_cases(
        self,
        role: Role,
        all_cases: Iterable[Case],
        client_key: Optional[str] = None,
    ) -> List[Case]:
        """Subset of `all_cases` the role may see, in input order"""
        return [case for case in all_cases if self.is_visible(role, case, client_key)]

    def permissions(self, role: Role, case: Case) -> CasePermissions:
        role = Role(role)
        assigned = self.is_assigned(role, case)
        decidable = assigned and case.status == CaseStatus.WITH_CDD
        return CasePermissions(
            can_comment=assigned,
            can_approve=decidable,
            can_reject=decidable,
            can_move_forward=(
                (role == Role.OKW and case.status == CaseStatus.PENDING)
                or (assigned and case.status == CaseStatus.WITH_OKW)
            ),
        )

    def require_action(self, role: Role, case: Case, action: CaseAction) -> None:
        """
        Raises:
            PermissionDeniedError: the role may not perform `action` on the case now
        """
        role = Role(role)
        permissions = self.permissions(role, case)
        allowed = {
            CaseAction.MOVE_FORWARD: permissions.can_move_forward,
            CaseAction.APPROVE: permissions.can_approve,
            CaseAction.REJECT: permissions.can_reject,
        }.get(CaseAction(action), False)

        if not allowed:
            logger.warning(
                f"Denied {CaseAction(action).value} on case {case.case_id} "
                f"for role {role.value} (status={case.status.value}, assignee={case.current_assignee})"
            )
            raise PermissionDeniedError(
                f"Role '{role.value}' cannot {CaseAction(action).value.replace('_', ' ')} "
                f"case {case.case_id} while it is {case.status.value}"
            )

    def require_assigned(self, role: Role, case: Case, activity: str) -> None:
        """Gate for comments and attachment changes: only the assigned team may act"""
        role = Role(role)
        if not self.is_assigned(role, case):
            logger.warning(
                f"Denied {activity} on case {case.case_id} for role {role.value} "
                f"(assignee={case.current_assignee})"
            )
            raise PermissionDeniedError(
                f"Role '{role.value}' is not assigned to case {case.case_id} and cannot {activity}"
            )
