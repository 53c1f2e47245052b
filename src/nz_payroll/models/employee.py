"""Employee and timesheet models."""

from __future__ import annotations

from datetime import date, time
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Time,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from nz_payroll.models.base import Base, TimestampMixin


class Employee(Base, TimestampMixin):
    """Employee record with the tax and KiwiSaver settings payroll needs."""

    __tablename__ = "employee"

    employee_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    first_name: Mapped[str] = mapped_column(String, nullable=False)
    last_name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    ird_number: Mapped[str | None] = mapped_column(String, nullable=True)
    tax_code: Mapped[str] = mapped_column(String, nullable=False, default="M")
    employment_type: Mapped[str] = mapped_column(String, nullable=False, default="hourly")
    hourly_rate: Mapped[Decimal] = mapped_column(Numeric(14, 4), nullable=False)
    kiwisaver_enrolled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    kiwisaver_rate: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), nullable=False, default=Decimal("3")
    )
    employment_start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default="active")

    __table_args__ = (
        CheckConstraint(
            "employment_type IN ('salary', 'hourly', 'training')",
            name="employee_type_check",
        ),
        CheckConstraint("status IN ('active', 'inactive')", name="employee_status_check"),
        CheckConstraint("hourly_rate > 0", name="employee_rate_positive"),
    )

    # Relationships
    timesheet_entries: Mapped[list[TimesheetEntry]] = relationship(back_populates="employee")

    @property
    def full_name(self) -> str:
        """Get full name."""
        return f"{self.first_name} {self.last_name}"


class TimesheetEntry(Base, TimestampMixin):
    """One worked shift."""

    __tablename__ = "timesheet_entry"

    timesheet_entry_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
    )
    work_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    break_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_overtime: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    overtime_rate: Mapped[Decimal | None] = mapped_column(Numeric(6, 3), nullable=True)
    rate_multiplier: Mapped[Decimal | None] = mapped_column(Numeric(6, 3), nullable=True)

    __table_args__ = (
        CheckConstraint("break_minutes >= 0", name="timesheet_entry_break_check"),
    )

    # Relationships
    employee: Mapped[Employee] = relationship(back_populates="timesheet_entries")
