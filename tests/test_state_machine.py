"""Tests for the leave request state machine."""

from datetime import date
from decimal import Decimal

import pytest

from nz_payroll.calculators.errors import InvalidTransitionError, LeaveValidationError
from nz_payroll.calculators.types import LeaveRequest, LeaveStatus, LeaveType
from nz_payroll.leave.state_machine import (
    LeaveRequestStateMachine,
    approve,
    cancel,
    reject,
    submit,
)

AS_OF = date(2024, 5, 1)
EMPLOYED_SINCE = date(2022, 1, 1)


@pytest.fixture
def leave_request():
    return LeaveRequest(LeaveType.ANNUAL, date(2024, 6, 10), date(2024, 6, 14), employee_id="emp-001")


class TestLeaveRequestStateMachine:
    """Test state machine transitions."""

    def test_valid_transitions(self):
        assert LeaveRequestStateMachine.can_transition("pending", "approved") is True
        assert LeaveRequestStateMachine.can_transition("pending", "rejected") is True
        assert LeaveRequestStateMachine.can_transition("approved", "cancelled") is True

    def test_invalid_transitions(self):
        # Decisions are final
        assert LeaveRequestStateMachine.can_transition("approved", "rejected") is False
        assert LeaveRequestStateMachine.can_transition("rejected", "approved") is False

        # Terminal states
        assert LeaveRequestStateMachine.can_transition("cancelled", "pending") is False
        assert LeaveRequestStateMachine.can_transition("rejected", "pending") is False

    def test_validate_transition_raises(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            LeaveRequestStateMachine.validate_transition(LeaveStatus.PENDING, LeaveStatus.CANCELLED)

        assert exc_info.value.from_status == "pending"
        assert exc_info.value.to_status == "cancelled"

    def test_get_next_statuses(self):
        assert LeaveRequestStateMachine.get_next_statuses("pending") == ["approved", "rejected"]
        assert LeaveRequestStateMachine.get_next_statuses("cancelled") == []

    def test_reserves_balance(self):
        assert LeaveRequestStateMachine.reserves_balance("pending") is True
        assert LeaveRequestStateMachine.reserves_balance("approved") is True
        assert LeaveRequestStateMachine.reserves_balance("cancelled") is False


class TestTransitions:
    def test_submit_valid_request(self, leave_request, policy_2024):
        submitted = submit(leave_request, EMPLOYED_SINCE, Decimal("80"), AS_OF, policy_2024)
        assert submitted.status == LeaveStatus.PENDING

    def test_submit_invalid_request(self, leave_request, policy_2024):
        with pytest.raises(LeaveValidationError) as exc_info:
            submit(leave_request, EMPLOYED_SINCE, Decimal("8"), AS_OF, policy_2024)
        assert "balance" in exc_info.value.errors

    def test_approve(self, leave_request, policy_2024, caplog):
        caplog.set_level("INFO", logger="nz_payroll.leave.state_machine")

        approved = approve(leave_request, EMPLOYED_SINCE, Decimal("80"), AS_OF, policy_2024)

        assert approved.status == LeaveStatus.APPROVED
        assert approved.request_id == leave_request.request_id
        assert leave_request.status == LeaveStatus.PENDING
        assert "pending -> approved" in caplog.text

    def test_approve_revalidates(self, leave_request, policy_2024):
        with pytest.raises(LeaveValidationError):
            approve(leave_request, EMPLOYED_SINCE, Decimal("0"), AS_OF, policy_2024)

    def test_reject(self, leave_request):
        assert reject(leave_request).status == LeaveStatus.REJECTED

    def test_cannot_approve_rejected(self, leave_request, policy_2024):
        rejected = reject(leave_request)
        with pytest.raises(InvalidTransitionError):
            approve(rejected, EMPLOYED_SINCE, Decimal("80"), AS_OF, policy_2024)

    def test_cancel_with_notice(self, leave_request, policy_2024):
        approved = approve(leave_request, EMPLOYED_SINCE, Decimal("80"), AS_OF, policy_2024)
        cancelled = cancel(approved, as_of=date(2024, 6, 3), policy=policy_2024)
        assert cancelled.status == LeaveStatus.CANCELLED

    def test_cancel_too_late(self, leave_request, policy_2024):
        approved = approve(leave_request, EMPLOYED_SINCE, Decimal("80"), AS_OF, policy_2024)

        with pytest.raises(InvalidTransitionError) as exc_info:
            cancel(approved, as_of=date(2024, 6, 5), policy=policy_2024)
        assert exc_info.value.reason == "cancellation requires 7 days notice"

    def test_cancel_pending(self, leave_request, policy_2024):
        with pytest.raises(InvalidTransitionError):
            cancel(leave_request, as_of=AS_OF, policy=policy_2024)
