"""Pay run API endpoints."""

from fastapi import APIRouter, status

from nz_payroll.api.dependencies import Schedule, SessionFactory
from nz_payroll.api.schemas import (
    EmployeeFailureResponse,
    ErrorResponse,
    PayRunRequest,
    PayRunResponse,
    PayslipResponse,
)
from nz_payroll.services.pay_run_service import PayRunService
from nz_payroll.services.repository import SqlPayrollRepository

router = APIRouter(prefix="/pay-runs", tags=["pay-runs"])


@router.post(
    "",
    response_model=PayRunResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def run_pay_run(
    payload: PayRunRequest,
    session_factory: SessionFactory,
    schedule: Schedule,
) -> PayRunResponse:
    """Run payroll for stored employees and persist their payslips.

    Per-employee failures are reported alongside the successful payslips.
    """
    service = PayRunService(SqlPayrollRepository(session_factory), schedule)
    run = await service.run(
        payload.employee_ids,
        payload.pay_period,
        payload.period_start,
        payload.period_end,
        payload.pay_date,
    )
    return PayRunResponse(
        payslips=[PayslipResponse.model_validate(r) for r in run.results.values()],
        failures=[EmployeeFailureResponse.model_validate(f) for f in run.failures.values()],
        total_gross=run.total_gross,
        total_net=run.total_net,
        error_count=run.error_count,
    )
