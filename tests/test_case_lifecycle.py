"""
Case lifecycle state machine tests
"""

from datetime import datetime, timedelta, timezone

import pytest

from case_review.exceptions import InvalidTransitionError, ValidationError
from case_review.models.case import Case, ClientInfo
from case_review.models.enums import CaseAction, CaseStatus
from case_review.services.case_lifecycle import CaseLifecycle

SUBMITTED = datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc)


def _case(status: CaseStatus, assignee: str = "System") -> Case:
    return Case(
        case_id="case-1",
        client_info=ClientInfo(client_name="Acme", address="1 Main St", date_of_information="2024-01-15"),
        status=status,
        current_assignee=assignee,
        submitted_at=SUBMITTED,
        updated_at=SUBMITTED,
    )


@pytest.fixture
def lifecycle():
    return CaseLifecycle()


class TestTransitionTable:

    @pytest.mark.parametrize("current,target,action", [
        ("pending", "with-okw", CaseAction.INTAKE),
        ("pending", "with-cdd", CaseAction.MOVE_FORWARD),
        ("with-okw", "with-cdd", CaseAction.MOVE_FORWARD),
        ("with-cdd", "approved", CaseAction.APPROVE),
        ("with-cdd", "rejected", CaseAction.REJECT),
    ])
    def test_allowed_transitions(self, lifecycle, current, target, action):
        assert lifecycle.action_for(current, target) == action
        assert lifecycle.can_transition(current, target)

    @pytest.mark.parametrize("current,target", [
        ("with-cdd", "pending"),
        ("with-cdd", "with-okw"),
        ("with-okw", "pending"),
        ("with-okw", "approved"),
        ("pending", "approved"),
        ("pending", "pending"),
        ("approved", "rejected"),
        ("rejected", "with-cdd"),
        ("approved", "pending"),
    ])
    def test_disallowed_transitions(self, lifecycle, current, target):
        assert not lifecycle.can_transition(current, target)
        with pytest.raises(InvalidTransitionError) as exc_info:
            lifecycle.action_for(current, target)
        assert exc_info.value.current == current
        assert exc_info.value.target == target

    @pytest.mark.parametrize("status", [CaseStatus.APPROVED, CaseStatus.REJECTED])
    def test_terminal_states_have_no_exits(self, lifecycle, status):
        assert status.is_terminal
        assert lifecycle.allowed_targets(status) == ()

    def test_allowed_targets_from_pending(self, lifecycle):
        assert set(lifecycle.allowed_targets(CaseStatus.PENDING)) == {CaseStatus.WITH_OKW, CaseStatus.WITH_CDD}


class TestApply:

    @pytest.mark.parametrize("current,target,default_assignee", [
        (CaseStatus.PENDING, CaseStatus.WITH_OKW, "OKW Team"),
        (CaseStatus.WITH_OKW, CaseStatus.WITH_CDD, "CDD Team"),
        (CaseStatus.WITH_CDD, CaseStatus.APPROVED, "System"),
        (CaseStatus.WITH_CDD, CaseStatus.REJECTED, "System"),
    ])
    def test_default_assignee(self, lifecycle, current, target, default_assignee):
        later = SUBMITTED + timedelta(hours=1)
        moved = lifecycle.apply(_case(current), target, None, later)

        assert moved.status == target
        assert moved.current_assignee == default_assignee
        assert moved.updated_at == later

    def test_explicit_label_is_used(self, lifecycle):
        moved = lifecycle.apply(_case(CaseStatus.WITH_OKW, "OKW Team"), CaseStatus.WITH_CDD, " CDD Team ", SUBMITTED)
        assert moved.current_assignee == "CDD Team"

    def test_blank_label_rejected(self, lifecycle):
        with pytest.raises(ValidationError):
            lifecycle.apply(_case(CaseStatus.WITH_OKW, "OKW Team"), CaseStatus.WITH_CDD, "  ", SUBMITTED)

    def test_input_case_untouched(self, lifecycle):
        case = _case(CaseStatus.WITH_CDD, "CDD Team")
        lifecycle.apply(case, CaseStatus.APPROVED, None, SUBMITTED)
        assert case.status == CaseStatus.WITH_CDD
        assert case.current_assignee == "CDD Team"
