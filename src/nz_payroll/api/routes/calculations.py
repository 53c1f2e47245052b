"""Stateless calculation endpoints."""

from fastapi import APIRouter

from nz_payroll.api.dependencies import Schedule, resolve_policy
from nz_payroll.api.schemas import (
    ACCLevyRequest,
    ACCLevyResponse,
    DeductionsRequest,
    DeductionsResponse,
    ErrorResponse,
    KiwiSaverRequest,
    KiwiSaverResponse,
    MinimumWageResponse,
    PAYERequest,
    PAYEResponse,
)
from nz_payroll.calculators.acc_levy import calculate_acc_levy_with_ytd
from nz_payroll.calculators.deductions import calculate_deductions
from nz_payroll.calculators.kiwisaver import calculate_kiwisaver_deductions
from nz_payroll.calculators.tax_calculator import calculate_period_paye_tax, normalise_tax_code

router = APIRouter(
    prefix="/calculations",
    tags=["calculations"],
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)


@router.post("/paye", response_model=PAYEResponse)
async def calculate_paye(payload: PAYERequest, schedule: Schedule) -> PAYEResponse:
    """PAYE for one pay period."""
    policy = resolve_policy(schedule, payload.as_of)
    tax = calculate_period_paye_tax(payload.gross_pay, payload.tax_code, payload.pay_period, policy)
    return PAYEResponse(
        paye_tax=tax,
        tax_code=normalise_tax_code(payload.tax_code),
        pay_period=payload.pay_period,
        policy_version=policy.version,
    )


@router.post("/kiwisaver", response_model=KiwiSaverResponse)
async def calculate_kiwisaver(payload: KiwiSaverRequest, schedule: Schedule) -> KiwiSaverResponse:
    """Employee and employer KiwiSaver contributions."""
    policy = resolve_policy(schedule, payload.as_of)
    result = calculate_kiwisaver_deductions(
        payload.gross_pay, payload.employee_rate, payload.enrolled, policy
    )
    return KiwiSaverResponse(
        employee_deduction=result.employee_deduction,
        employer_contribution=result.employer_contribution,
        applied_rate=result.applied_rate,
        policy_version=policy.version,
    )


@router.post("/acc-levy", response_model=ACCLevyResponse)
async def calculate_acc_levy(payload: ACCLevyRequest, schedule: Schedule) -> ACCLevyResponse:
    """ACC earners' levy against year-to-date earnings."""
    policy = resolve_policy(schedule, payload.as_of)
    result = calculate_acc_levy_with_ytd(
        payload.gross_pay, payload.ytd_earnings, payload.pay_period, policy
    )
    return ACCLevyResponse(
        levy=result.levy,
        ytd_earnings=result.ytd_earnings,
        remaining_cap=result.remaining_cap,
        capped_earnings=result.capped_earnings,
        levy_rate=result.levy_rate,
        policy_version=policy.version,
    )


@router.post("/deductions", response_model=DeductionsResponse)
async def calculate_all_deductions(
    payload: DeductionsRequest, schedule: Schedule
) -> DeductionsResponse:
    """Gross to net for one pay."""
    policy = resolve_policy(schedule, payload.as_of)
    result = calculate_deductions(
        payload.gross_pay,
        payload.employee.to_employee(),
        payload.pay_period,
        payload.ytd_earnings,
        policy,
    )
    check = result.minimum_wage_check
    return DeductionsResponse(
        gross_pay=result.gross_pay,
        paye_tax=result.paye_tax,
        kiwisaver_deduction=result.kiwisaver_deduction,
        employer_kiwisaver=result.employer_kiwisaver,
        acc_levy=result.acc_levy,
        acc_ytd_earnings=result.acc_ytd_earnings,
        total_deductions=result.total_deductions,
        net_pay=result.net_pay,
        minimum_wage=MinimumWageResponse(
            compliant=check.compliant,
            required_rate=check.required_rate,
            actual_rate=check.actual_rate,
        ),
        policy_version=policy.version,
    )
