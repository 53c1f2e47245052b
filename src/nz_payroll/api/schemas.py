"""Pydantic schemas for API request/response models."""

from datetime import date, time
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from nz_payroll.calculators.types import (
    Employee,
    EmploymentType,
    LeaveType,
    PayPeriodType,
    TimesheetEntry,
)


# ============================================================================
# Shared inputs
# ============================================================================


class EmployeeInput(BaseModel):
    """Employee details for a one-off calculation."""

    employee_id: str
    hourly_rate: Decimal = Field(gt=0)
    employment_type: EmploymentType = EmploymentType.HOURLY
    tax_code: str = "M"
    kiwisaver_enrolled: bool = False
    kiwisaver_rate: Decimal = Field(default=Decimal("3"), ge=0)
    ird_number: str | None = None

    def to_employee(self) -> Employee:
        return Employee(**self.model_dump())


class TimesheetEntryInput(BaseModel):
    """One worked shift."""

    work_date: date
    start_time: time
    end_time: time
    break_minutes: int = Field(default=0, ge=0)
    is_overtime: bool = False
    overtime_rate: Decimal | None = Field(default=None, gt=0)
    rate_multiplier: Decimal | None = Field(default=None, gt=0)

    def to_entry(self) -> TimesheetEntry:
        return TimesheetEntry(**self.model_dump())


class ErrorResponse(BaseModel):
    """Schema for error responses."""

    detail: str
    code: str | None = None
    errors: dict[str, Any] | None = None


# ============================================================================
# Calculation schemas
# ============================================================================


class PAYERequest(BaseModel):
    gross_pay: Decimal = Field(ge=0)
    tax_code: str = "M"
    pay_period: PayPeriodType = PayPeriodType.FORTNIGHTLY
    as_of: date | None = None


class PAYEResponse(BaseModel):
    paye_tax: Decimal
    tax_code: str
    pay_period: PayPeriodType
    policy_version: str


class KiwiSaverRequest(BaseModel):
    gross_pay: Decimal = Field(ge=0)
    employee_rate: Decimal = Field(default=Decimal("3"), ge=0)
    enrolled: bool = True
    as_of: date | None = None


class KiwiSaverResponse(BaseModel):
    employee_deduction: Decimal
    employer_contribution: Decimal
    applied_rate: Decimal
    policy_version: str


class ACCLevyRequest(BaseModel):
    gross_pay: Decimal = Field(ge=0)
    ytd_earnings: Decimal = Field(default=Decimal("0"), ge=0)
    pay_period: PayPeriodType = PayPeriodType.FORTNIGHTLY
    as_of: date | None = None


class ACCLevyResponse(BaseModel):
    levy: Decimal
    ytd_earnings: Decimal
    remaining_cap: Decimal
    capped_earnings: Decimal
    levy_rate: Decimal
    policy_version: str


class DeductionsRequest(BaseModel):
    gross_pay: Decimal = Field(ge=0)
    employee: EmployeeInput
    pay_period: PayPeriodType = PayPeriodType.FORTNIGHTLY
    ytd_earnings: Decimal = Field(default=Decimal("0"), ge=0)
    as_of: date | None = None


class MinimumWageResponse(BaseModel):
    compliant: bool
    required_rate: Decimal
    actual_rate: Decimal


class DeductionsResponse(BaseModel):
    gross_pay: Decimal
    paye_tax: Decimal
    kiwisaver_deduction: Decimal
    employer_kiwisaver: Decimal
    acc_levy: Decimal
    acc_ytd_earnings: Decimal
    total_deductions: Decimal
    net_pay: Decimal
    minimum_wage: MinimumWageResponse
    policy_version: str


# ============================================================================
# Leave schemas
# ============================================================================


class LeaveValidationRequest(BaseModel):
    leave_type: LeaveType
    start_date: date | None = None
    end_date: date | None = None
    immediate_family: bool = False
    employment_start_date: date
    current_balance: Decimal = Field(default=Decimal("0"), ge=0)
    as_of: date | None = None


class LeaveViolationResponse(BaseModel):
    field: str
    kind: str
    message: str


class LeaveValidationResponse(BaseModel):
    valid: bool
    errors: dict[str, str]
    violations: list[LeaveViolationResponse] = []
    work_days: int | None = None
    hours: Decimal | None = None


class LeavePaymentRatesRequest(BaseModel):
    hourly_rate: Decimal = Field(ge=0)
    entries: list[TimesheetEntryInput] = []
    include_overtime: bool = True
    as_of: date | None = None
    employment_start: date | None = None
    leave_start: date | None = None
    leave_end: date | None = None


class LeaveCostResponse(BaseModel):
    work_days: int
    daily_rate: Decimal
    amount: Decimal


class LeavePaymentRatesResponse(BaseModel):
    ordinary_weekly_pay: Decimal
    average_weekly_earnings: Decimal
    relevant_daily_pay: Decimal
    weekly_rate: Decimal
    leave_cost: LeaveCostResponse | None = None
    policy_version: str


# ============================================================================
# Pay run schemas
# ============================================================================


class PayRunRequest(BaseModel):
    """Schema for running payroll over stored employees."""

    employee_ids: list[UUID] = Field(min_length=1)
    pay_period: PayPeriodType = PayPeriodType.FORTNIGHTLY
    period_start: date
    period_end: date
    pay_date: date | None = None


class PayslipResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    employee_id: UUID
    calculation_id: UUID
    policy_version: str
    gross_pay: Decimal
    paye_tax: Decimal
    kiwisaver_deduction: Decimal
    employer_kiwisaver: Decimal
    acc_levy: Decimal
    net_pay: Decimal


class EmployeeFailureResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    employee_id: UUID
    code: str
    message: str


class PayRunResponse(BaseModel):
    payslips: list[PayslipResponse]
    failures: list[EmployeeFailureResponse]
    total_gross: Decimal
    total_net: Decimal
    error_count: int
