"""Leave validation and payment rate endpoints."""

from fastapi import APIRouter

from nz_payroll.api.dependencies import Schedule, resolve_policy
from nz_payroll.api.schemas import (
    ErrorResponse,
    LeaveCostResponse,
    LeavePaymentRatesRequest,
    LeavePaymentRatesResponse,
    LeaveValidationRequest,
    LeaveValidationResponse,
    LeaveViolationResponse,
)
from nz_payroll.calculators.types import LeaveRequest
from nz_payroll.leave.payment import (
    calculate_average_weekly_earnings,
    calculate_leave_cost,
    calculate_ordinary_weekly_pay,
    calculate_relevant_daily_pay,
)
from nz_payroll.leave.validation import LeaveRequestAccepted, validate_leave_request

router = APIRouter(
    prefix="/leave",
    tags=["leave"],
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)


@router.post("/validate", response_model=LeaveValidationResponse)
async def validate_leave(
    payload: LeaveValidationRequest, schedule: Schedule
) -> LeaveValidationResponse:
    """Validate a leave request; all rule violations are returned together."""
    policy = resolve_policy(schedule, payload.as_of)
    request = LeaveRequest(
        leave_type=payload.leave_type,
        start_date=payload.start_date,
        end_date=payload.end_date,
        immediate_family=payload.immediate_family,
    )
    result = validate_leave_request(
        request,
        payload.employment_start_date,
        payload.current_balance,
        as_of=payload.as_of,
        policy=policy,
    )

    if isinstance(result, LeaveRequestAccepted):
        return LeaveValidationResponse(
            valid=True,
            errors={},
            work_days=result.value.work_days,
            hours=result.value.hours,
        )
    return LeaveValidationResponse(
        valid=False,
        errors=result.errors,
        violations=[
            LeaveViolationResponse(field=v.field, kind=v.kind, message=v.message)
            for v in result.violations
        ],
    )


@router.post("/payment-rates", response_model=LeavePaymentRatesResponse)
async def leave_payment_rates(
    payload: LeavePaymentRatesRequest, schedule: Schedule
) -> LeavePaymentRatesResponse:
    """OWP, AWE and RDP from timesheet history, with an optional leave cost."""
    policy = resolve_policy(schedule, payload.as_of)
    entries = [e.to_entry() for e in payload.entries]
    options = {"include_overtime": payload.include_overtime, "as_of": payload.as_of, "policy": policy}

    owp = calculate_ordinary_weekly_pay(payload.hourly_rate, entries, **options)
    awe = calculate_average_weekly_earnings(
        payload.hourly_rate, entries, employment_start=payload.employment_start, **options
    )
    rdp = calculate_relevant_daily_pay(payload.hourly_rate, entries, **options)

    leave_cost = None
    if payload.leave_start is not None:
        cost = calculate_leave_cost(
            payload.hourly_rate,
            entries,
            payload.leave_start,
            payload.leave_end or payload.leave_start,
            employment_start=payload.employment_start,
            **options,
        )
        leave_cost = LeaveCostResponse(
            work_days=cost.work_days, daily_rate=cost.daily_rate, amount=cost.amount
        )

    return LeavePaymentRatesResponse(
        ordinary_weekly_pay=owp,
        average_weekly_earnings=awe,
        relevant_daily_pay=rdp,
        weekly_rate=max(owp, awe),
        leave_cost=leave_cost,
        policy_version=policy.version,
    )
