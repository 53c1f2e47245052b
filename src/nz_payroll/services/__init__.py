"""Payroll services."""

from nz_payroll.services.collaborators import PayrollDataSource
from nz_payroll.services.pay_run_service import PayRunService
from nz_payroll.services.policy_repository import PolicyRepository
from nz_payroll.services.repository import SqlPayrollRepository

__all__ = [
    "PayRunService",
    "PayrollDataSource",
    "PolicyRepository",
    "SqlPayrollRepository",
]
