"""Payslip, ACC year-to-date and policy version models."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Date, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from nz_payroll.models.base import Base, TimestampMixin


class PolicyVersion(Base, TimestampMixin):
    """Versioned tax and leave policy tables with effective dating."""

    __tablename__ = "policy_version"

    policy_version_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    version: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    effective_start: Mapped[date] = mapped_column(Date, nullable=False)
    effective_end: Mapped[date | None] = mapped_column(Date, nullable=True)
    source_url: Mapped[str | None] = mapped_column(String, nullable=True)
    payload_json: Mapped[dict[str, Any]] = mapped_column(nullable=False, default=dict)

    __table_args__ = (
        CheckConstraint(
            "effective_end IS NULL OR effective_end >= effective_start",
            name="policy_version_dates_check",
        ),
    )

    def is_active_on(self, as_of_date: date) -> bool:
        """Check if version is active on a given date."""
        if self.effective_start > as_of_date:
            return False
        if self.effective_end is not None and self.effective_end < as_of_date:
            return False
        return True


class AccYtdEarnings(Base, TimestampMixin):
    """Earnings counted towards the ACC levy cap, per employee and levy year."""

    __tablename__ = "acc_ytd_earnings"

    acc_ytd_earnings_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
    )
    levy_year_start: Mapped[date] = mapped_column(Date, nullable=False)
    earnings: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    __table_args__ = (
        UniqueConstraint("employee_id", "levy_year_start", name="acc_ytd_one_per_year"),
        CheckConstraint("earnings >= 0", name="acc_ytd_earnings_non_negative"),
    )


class Payslip(Base, TimestampMixin):
    """Immutable payslip figures for one employee and pay period."""

    __tablename__ = "payslip"

    payslip_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
    )
    calculation_id: Mapped[UUID] = mapped_column(nullable=False, unique=True)
    pay_period: Mapped[str] = mapped_column(String, nullable=False)
    period_start: Mapped[date | None] = mapped_column(Date, nullable=True)
    period_end: Mapped[date | None] = mapped_column(Date, nullable=True)
    policy_version: Mapped[str] = mapped_column(String, nullable=False)
    gross_pay: Mapped[Decimal] = mapped_column(nullable=False)
    paye_tax: Mapped[Decimal] = mapped_column(nullable=False)
    kiwisaver_deduction: Mapped[Decimal] = mapped_column(nullable=False)
    employer_kiwisaver: Mapped[Decimal] = mapped_column(nullable=False)
    acc_levy: Mapped[Decimal] = mapped_column(nullable=False)
    net_pay: Mapped[Decimal] = mapped_column(nullable=False)

    __table_args__ = (
        CheckConstraint(
            "pay_period IN ('weekly', 'fortnightly', 'monthly')",
            name="payslip_period_check",
        ),
    )
