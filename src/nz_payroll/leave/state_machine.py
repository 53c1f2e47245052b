"""Leave request state machine with transition validation."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal

from nz_payroll.calculators.errors import InvalidTransitionError, LeaveValidationError
from nz_payroll.calculators.policy import PayrollPolicy, get_policy
from nz_payroll.calculators.types import LeaveRequest, LeaveStatus
from nz_payroll.leave.holidays import HolidayCalendar
from nz_payroll.leave.validation import validate_leave_request

logger = logging.getLogger(__name__)


class LeaveRequestStateMachine:
    """State machine for leave request status transitions.

    Allowed transitions:
    - pending → approved
    - pending → rejected
    - approved → cancelled (with enough notice before the start date)
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        LeaveStatus.PENDING: [LeaveStatus.APPROVED, LeaveStatus.REJECTED],
        LeaveStatus.APPROVED: [LeaveStatus.CANCELLED],
        LeaveStatus.REJECTED: [],  # Terminal state
        LeaveStatus.CANCELLED: [],  # Terminal state
    }

    # Statuses that still consume leave balance
    BALANCE_RESERVED = {LeaveStatus.PENDING, LeaveStatus.APPROVED}

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(from_status, [])
        return to_status in allowed

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if not cls.can_transition(from_status, to_status):
            raise InvalidTransitionError(
                getattr(from_status, "value", from_status),
                getattr(to_status, "value", to_status),
            )

    @classmethod
    def get_next_statuses(cls, current_status: str) -> list[str]:
        """Get list of valid next statuses from current status."""
        return cls.VALID_TRANSITIONS.get(current_status, [])

    @classmethod
    def reserves_balance(cls, status: str) -> bool:
        return status in cls.BALANCE_RESERVED


def _status(request: LeaveRequest) -> LeaveStatus:
    return LeaveStatus(request.status)


def _require_valid(
    request: LeaveRequest,
    employment_start_date: date,
    current_balance: Decimal | int,
    as_of: date | None,
    policy: PayrollPolicy | None,
    calendar: HolidayCalendar | None,
) -> None:
    result = validate_leave_request(
        request,
        employment_start_date,
        current_balance,
        as_of=as_of,
        policy=policy,
        calendar=calendar,
    )
    if not result.valid:
        raise LeaveValidationError(result.errors)


def _transition(request: LeaveRequest, to_status: LeaveStatus) -> LeaveRequest:
    from_status = _status(request)
    updated = replace(request, status=to_status)
    logger.info(
        "Leave request %s: %s -> %s", request.request_id, from_status.value, to_status.value
    )
    return updated


def submit(
    request: LeaveRequest,
    employment_start_date: date,
    current_balance: Decimal | int,
    as_of: date | None = None,
    policy: PayrollPolicy | None = None,
    calendar: HolidayCalendar | None = None,
) -> LeaveRequest:
    """Validate a new request and return it in the pending status."""
    if _status(request) != LeaveStatus.PENDING:
        raise InvalidTransitionError(
            _status(request).value, LeaveStatus.PENDING.value, "only new requests can be submitted"
        )
    _require_valid(request, employment_start_date, current_balance, as_of, policy, calendar)
    logger.info("Leave request %s submitted", request.request_id)
    return request


def approve(
    request: LeaveRequest,
    employment_start_date: date,
    current_balance: Decimal | int,
    as_of: date | None = None,
    policy: PayrollPolicy | None = None,
    calendar: HolidayCalendar | None = None,
) -> LeaveRequest:
    """Approve a pending request; the request is re-validated first."""
    LeaveRequestStateMachine.validate_transition(_status(request), LeaveStatus.APPROVED)
    _require_valid(request, employment_start_date, current_balance, as_of, policy, calendar)
    return _transition(request, LeaveStatus.APPROVED)


def reject(request: LeaveRequest) -> LeaveRequest:
    LeaveRequestStateMachine.validate_transition(_status(request), LeaveStatus.REJECTED)
    return _transition(request, LeaveStatus.REJECTED)


def cancel(
    request: LeaveRequest,
    as_of: date | None = None,
    policy: PayrollPolicy | None = None,
) -> LeaveRequest:
    """Cancel approved leave that starts at least the cancellation notice away."""
    LeaveRequestStateMachine.validate_transition(_status(request), LeaveStatus.CANCELLED)

    notice_days = (policy or get_policy()).leave.cancel_notice_days
    as_of = as_of or date.today()
    if request.start_date is None or (request.start_date - as_of).days < notice_days:
        raise InvalidTransitionError(
            LeaveStatus.APPROVED.value,
            LeaveStatus.CANCELLED.value,
            f"cancellation requires {notice_days} days notice",
        )
    return _transition(request, LeaveStatus.CANCELLED)
