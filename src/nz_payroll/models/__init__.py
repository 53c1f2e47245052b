"""SQLAlchemy ORM models."""

from nz_payroll.models.base import Base
from nz_payroll.models.employee import Employee, TimesheetEntry
from nz_payroll.models.payroll import AccYtdEarnings, Payslip, PolicyVersion

__all__ = [
    "AccYtdEarnings",
    "Base",
    "Employee",
    "Payslip",
    "PolicyVersion",
    "TimesheetEntry",
]
