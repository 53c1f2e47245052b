"""Versioned, effective-dated policy tables.

Statutory rates change every tax year, so nothing in the calculators is a
literal: each calculation receives a ``PayrollPolicy`` resolved for the
relevant date. Tables are plain JSON payloads with structure:
{
    "version": "NZ-2024-25",
    "effective_start": "2024-04-01",
    "effective_end": "2025-03-31",          // null = open ended
    "paye_brackets": [
        {"threshold": 14000, "rate": "0.105"},
        ...
        {"threshold": null, "rate": "0.39"}  // unbounded top band
    ],
    "secondary_rates": {"SB": "0.105", ...},
    "primary_tax_codes": ["M", "ME"],
    "kiwisaver": {...}, "acc": {...}, "minimum_wage": {...},
    "leave": {...}, "overtime": {...}       // optional, defaults apply
}
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from datetime import date
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable

from nz_payroll.calculators.errors import PolicyNotFoundError
from nz_payroll.calculators.types import LeaveType
from nz_payroll.config import get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaxBracket:
    """Progressive tax band; threshold is the cumulative upper bound."""

    threshold: Decimal | None  # None = no upper limit
    rate: Decimal  # As decimal, e.g. 0.175 for 17.5%


@dataclass(frozen=True)
class KiwiSaverPolicy:
    """KiwiSaver contribution bounds."""

    employer_rate: Decimal = Decimal("0.03")
    min_employee_rate: Decimal = Decimal("0.03")
    max_employee_rate: Decimal = Decimal("0.10")

    def __post_init__(self) -> None:
        if min(self.employer_rate, self.min_employee_rate) < 0:
            raise ValueError("KiwiSaver rates must not be negative")
        if self.min_employee_rate > self.max_employee_rate:
            raise ValueError("KiwiSaver min_employee_rate exceeds max_employee_rate")


@dataclass(frozen=True)
class ACCPolicy:
    """ACC earners' levy."""

    earners_levy_rate: Decimal
    max_earnings: Decimal

    def __post_init__(self) -> None:
        if self.earners_levy_rate < 0 or self.max_earnings < 0:
            raise ValueError("ACC levy rate and maximum earnings must not be negative")


@dataclass(frozen=True)
class MinimumWagePolicy:
    """Statutory minimum hourly rates."""

    adult: Decimal
    training: Decimal


@dataclass(frozen=True)
class LeavePolicy:
    """Holidays Act entitlements and leave request rules."""

    annual_leave_weeks: int = 4
    annual_qualifying_months: int = 12
    sick_qualifying_months: int = 6
    bereavement_qualifying_months: int = 6
    family_violence_qualifying_months: int = 6
    parental_qualifying_months: int = 6
    min_notice_days: int = 14
    max_future_days: int = 365
    cancel_notice_days: int = 7
    family_violence_days_per_year: int = 10
    bereavement_immediate_family_days: int = 3
    bereavement_other_days: int = 1
    parental_primary_carer_weeks: int = 26
    parental_partner_weeks: int = 2
    parental_extended_weeks: int = 52
    parental_min_weekly_hours: Decimal = Decimal("10")
    include_overtime: bool = True
    default_overtime_rate: Decimal = Decimal("1.5")
    hours_per_day: Decimal = Decimal("8")
    days_per_week: int = 5
    public_holiday_rate: Decimal = Decimal("1.5")
    public_holiday_minimum_hours: Decimal = Decimal("3")

    def qualifying_months(self, leave_type: LeaveType) -> int:
        """Months of continuous employment required before taking leave."""
        return {
            LeaveType.ANNUAL: self.annual_qualifying_months,
            LeaveType.SICK: self.sick_qualifying_months,
            LeaveType.BEREAVEMENT: self.bereavement_qualifying_months,
            LeaveType.FAMILY_VIOLENCE: self.family_violence_qualifying_months,
            LeaveType.PARENTAL: self.parental_qualifying_months,
        }[LeaveType.coerce(leave_type)]


@dataclass(frozen=True)
class OvertimePolicy:
    """Daily and weekly overtime thresholds."""

    daily_regular_hours: Decimal = Decimal("8")
    daily_time_and_half_hours: Decimal = Decimal("4")
    weekly_regular_hours: Decimal = Decimal("40")
    weekly_time_and_half_hours: Decimal = Decimal("20")
    time_and_half_rate: Decimal = Decimal("1.5")
    double_time_rate: Decimal = Decimal("2")


@dataclass(frozen=True)
class PayrollPolicy:
    """One effective-dated version of every payroll policy table."""

    version: str
    effective_start: date
    effective_end: date | None
    paye_brackets: tuple[TaxBracket, ...]
    secondary_rates: dict[str, Decimal]
    kiwisaver: KiwiSaverPolicy
    acc: ACCPolicy
    minimum_wage: MinimumWagePolicy
    leave: LeavePolicy = field(default_factory=LeavePolicy)
    overtime: OvertimePolicy = field(default_factory=OvertimePolicy)
    primary_tax_codes: tuple[str, ...] = ("M", "ME")

    def __post_init__(self) -> None:
        """Validate the bracket table."""
        if not self.paye_brackets:
            raise ValueError(f"Policy {self.version} has no PAYE brackets")
        if self.paye_brackets[-1].threshold is not None:
            raise ValueError(f"Policy {self.version}: last PAYE bracket must be unbounded")

        previous = Decimal("0")
        for bracket in self.paye_brackets[:-1]:
            if bracket.threshold is None:
                raise ValueError(f"Policy {self.version}: only the last bracket may be unbounded")
            if bracket.threshold <= previous:
                raise ValueError(
                    f"Policy {self.version}: PAYE thresholds must be strictly increasing"
                )
            previous = bracket.threshold

        if any(b.rate < 0 for b in self.paye_brackets):
            raise ValueError(f"Policy {self.version}: PAYE rates must not be negative")
        if any(r < 0 for r in self.secondary_rates.values()):
            raise ValueError(f"Policy {self.version}: secondary rates must not be negative")
        if self.effective_end is not None and self.effective_end < self.effective_start:
            raise ValueError(f"Policy {self.version}: effective_end before effective_start")

    def is_active_on(self, as_of_date: date) -> bool:
        """Check if version is active on a given date."""
        if self.effective_start > as_of_date:
            return False
        if self.effective_end is not None and self.effective_end < as_of_date:
            return False
        return True

    @property
    def tax_codes(self) -> frozenset[str]:
        return frozenset(self.primary_tax_codes) | frozenset(self.secondary_rates)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> PayrollPolicy:
        """Parse a JSON payload."""
        brackets = tuple(
            TaxBracket(
                threshold=(
                    Decimal(str(b["threshold"])) if b.get("threshold") is not None else None
                ),
                rate=Decimal(str(b["rate"])),
            )
            for b in payload["paye_brackets"]
        )
        end = payload.get("effective_end")
        return cls(
            version=payload["version"],
            effective_start=date.fromisoformat(payload["effective_start"]),
            effective_end=date.fromisoformat(end) if end else None,
            paye_brackets=brackets,
            secondary_rates={
                code.upper(): Decimal(str(rate))
                for code, rate in payload.get("secondary_rates", {}).items()
            },
            kiwisaver=_build(KiwiSaverPolicy, payload.get("kiwisaver", {})),
            acc=_build(ACCPolicy, payload["acc"]),
            minimum_wage=_build(MinimumWagePolicy, payload["minimum_wage"]),
            leave=_build(LeavePolicy, payload.get("leave", {})),
            overtime=_build(OvertimePolicy, payload.get("overtime", {})),
            primary_tax_codes=tuple(
                c.upper() for c in payload.get("primary_tax_codes", ("M", "ME"))
            ),
        )

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON payload form (decimals as strings)."""
        return {
            "version": self.version,
            "effective_start": self.effective_start.isoformat(),
            "effective_end": self.effective_end.isoformat() if self.effective_end else None,
            "paye_brackets": [
                {
                    "threshold": str(b.threshold) if b.threshold is not None else None,
                    "rate": str(b.rate),
                }
                for b in self.paye_brackets
            ],
            "secondary_rates": {k: str(v) for k, v in self.secondary_rates.items()},
            "primary_tax_codes": list(self.primary_tax_codes),
            "kiwisaver": _dump(self.kiwisaver),
            "acc": _dump(self.acc),
            "minimum_wage": _dump(self.minimum_wage),
            "leave": _dump(self.leave),
            "overtime": _dump(self.overtime),
        }


_COERCE = {
    "Decimal": lambda v: Decimal(str(v)),
    "int": int,
    "bool": bool,
}


def _build(cls: type, data: dict[str, Any]) -> Any:
    """Build a sub-policy dataclass, coercing JSON scalars by field type."""
    known = {f.name: f for f in fields(cls)}
    unknown = set(data) - set(known)
    if unknown:
        raise ValueError(f"Unknown {cls.__name__} keys: {sorted(unknown)}")
    kwargs = {name: _COERCE[str(known[name].type)](value) for name, value in data.items()}
    return cls(**kwargs)


def _dump(obj: Any) -> dict[str, Any]:
    return {
        k: str(v) if isinstance(v, Decimal) else v
        for k, v in asdict(obj).items()
    }


class PolicySchedule:
    """Ordered, non-overlapping policy versions looked up by effective date."""

    def __init__(self, versions: Iterable[PayrollPolicy]):
        ordered = sorted(versions, key=lambda p: p.effective_start)
        for current, following in zip(ordered, ordered[1:]):
            if current.effective_end is None or current.effective_end >= following.effective_start:
                raise ValueError(
                    f"Policy versions {current.version} and {following.version} overlap"
                )
        self._versions = tuple(ordered)

    @property
    def versions(self) -> tuple[PayrollPolicy, ...]:
        return self._versions

    def for_date(self, as_of_date: date) -> PayrollPolicy:
        """Get the policy version effective on a date."""
        for policy in self._versions:
            if policy.is_active_on(as_of_date):
                logger.debug("Resolved policy %s for %s", policy.version, as_of_date)
                return policy
        raise PolicyNotFoundError(as_of_date)

    @classmethod
    def from_payloads(cls, payloads: Iterable[dict[str, Any]]) -> PolicySchedule:
        return cls(PayrollPolicy.from_payload(p) for p in payloads)

    @classmethod
    def from_json_file(cls, path: str | Path) -> PolicySchedule:
        """Load a JSON list of payloads (or ``{"versions": [...]}``)."""
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        if isinstance(data, dict):
            data = data["versions"]
        return cls.from_payloads(data)


# 2024/25 PAYE, KiwiSaver, ACC and minimum wage tables
NZ_2024_25_PAYLOAD: dict[str, Any] = {
    "version": "NZ-2024-25",
    "effective_start": "2024-04-01",
    "effective_end": "2025-03-31",
    "paye_brackets": [
        {"threshold": 14000, "rate": "0.105"},
        {"threshold": 48000, "rate": "0.175"},
        {"threshold": 70000, "rate": "0.30"},
        {"threshold": 180000, "rate": "0.33"},
        {"threshold": None, "rate": "0.39"},
    ],
    "secondary_rates": {
        "SB": "0.105",
        "S": "0.175",
        "SH": "0.30",
        "ST": "0.33",
        "SA": "0.39",
    },
    "primary_tax_codes": ["M", "ME"],
    "kiwisaver": {
        "employer_rate": "0.03",
        "min_employee_rate": "0.03",
        "max_employee_rate": "0.10",
    },
    "acc": {"earners_levy_rate": "0.0139", "max_earnings": "139384"},
    "minimum_wage": {"adult": "23.15", "training": "18.52"},
}

NZ_2025_26_PAYLOAD: dict[str, Any] = {
    "version": "NZ-2025-26",
    "effective_start": "2025-04-01",
    "effective_end": None,
    "paye_brackets": [
        {"threshold": 15600, "rate": "0.105"},
        {"threshold": 53500, "rate": "0.175"},
        {"threshold": 78100, "rate": "0.30"},
        {"threshold": 180000, "rate": "0.33"},
        {"threshold": None, "rate": "0.39"},
    ],
    "secondary_rates": {
        "SB": "0.105",
        "S": "0.175",
        "SH": "0.30",
        "ST": "0.33",
        "SA": "0.39",
    },
    "primary_tax_codes": ["M", "ME"],
    "kiwisaver": {
        "employer_rate": "0.03",
        "min_employee_rate": "0.03",
        "max_employee_rate": "0.10",
    },
    "acc": {"earners_levy_rate": "0.0167", "max_earnings": "152790"},
    "minimum_wage": {"adult": "23.50", "training": "18.80"},
}

BUILTIN_POLICIES: tuple[PayrollPolicy, ...] = (
    PayrollPolicy.from_payload(NZ_2024_25_PAYLOAD),
    PayrollPolicy.from_payload(NZ_2025_26_PAYLOAD),
)


@lru_cache(maxsize=1)
def default_schedule() -> PolicySchedule:
    """Built-in schedule, or the configured policy file when set."""
    settings = get_settings()
    if settings.policy_file:
        logger.info("Loading payroll policy tables from %s", settings.policy_file)
        return PolicySchedule.from_json_file(settings.policy_file)
    return PolicySchedule(BUILTIN_POLICIES)


def get_policy(as_of: date | None = None) -> PayrollPolicy:
    """Resolve the active policy for a date (default: configured date or today)."""
    as_of = as_of or get_settings().policy_as_of or date.today()
    return default_schedule().for_date(as_of)
