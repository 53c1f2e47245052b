"""Public holiday calendar, Mondayisation and work-day counting."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable

SATURDAY = 5
SUNDAY = 6

# Holidays moved to a weekday when they fall on a weekend: Christmas Day,
# Boxing Day, New Year's Day, the day after New Year's Day, Waitangi Day
# and ANZAC Day.
MONDAYISED_HOLIDAYS: frozenset[tuple[int, int]] = frozenset(
    {(12, 25), (12, 26), (1, 1), (1, 2), (2, 6), (4, 25)}
)

# Second day of a back-to-back pair: Boxing Day follows Christmas, 2 January
# follows New Year's Day.
_PAIRED_SECOND_DAYS: frozenset[tuple[int, int]] = frozenset({(12, 26), (1, 2)})


def get_mondayised_date(holiday: date) -> date:
    """Return the date a holiday is observed on.

    Saturday moves to the following Monday. Sunday moves to the following
    Monday, or to Tuesday when the first day of the pair already took the
    Monday (Christmas or New Year's Day on a Saturday).
    """
    if (holiday.month, holiday.day) not in MONDAYISED_HOLIDAYS:
        return holiday

    weekday = holiday.weekday()
    if weekday == SATURDAY:
        return holiday + timedelta(days=2)

    if weekday == SUNDAY:
        if (holiday.month, holiday.day) in _PAIRED_SECOND_DAYS:
            if (holiday - timedelta(days=1)).weekday() == SATURDAY:
                return holiday + timedelta(days=2)
        return holiday + timedelta(days=1)

    return holiday


@dataclass(frozen=True)
class PublicHoliday:
    """A named public holiday on its calendar date."""

    on: date
    name: str

    @property
    def observed(self) -> date:
        return get_mondayised_date(self.on)


class HolidayCalendar:
    """Lookup of public holidays by actual or observed date."""

    def __init__(self, holidays: Iterable[PublicHoliday]):
        self._holidays = tuple(sorted(holidays, key=lambda h: h.on))
        self._by_date: dict[date, PublicHoliday] = {}
        for holiday in self._holidays:
            self._by_date.setdefault(holiday.on, holiday)
            self._by_date.setdefault(holiday.observed, holiday)

    @property
    def holidays(self) -> tuple[PublicHoliday, ...]:
        return self._holidays

    def is_public_holiday(self, on: date) -> bool:
        return on in self._by_date

    def get(self, on: date) -> PublicHoliday | None:
        return self._by_date.get(on)

    def observed_dates(self) -> list[date]:
        return sorted({h.observed for h in self._holidays})

    def is_work_day(self, on: date) -> bool:
        return on.weekday() < SATURDAY and not self.is_public_holiday(on)


def _holidays(year_rows: Iterable[tuple[str, str]]) -> list[PublicHoliday]:
    return [PublicHoliday(date.fromisoformat(d), name) for d, name in year_rows]


NZ_PUBLIC_HOLIDAYS: tuple[PublicHoliday, ...] = tuple(
    _holidays(
        [
            ("2024-01-01", "New Year's Day"),
            ("2024-01-02", "Day after New Year's Day"),
            ("2024-02-06", "Waitangi Day"),
            ("2024-03-29", "Good Friday"),
            ("2024-04-01", "Easter Monday"),
            ("2024-04-25", "ANZAC Day"),
            ("2024-06-03", "King's Birthday"),
            ("2024-06-28", "Matariki"),
            ("2024-10-28", "Labour Day"),
            ("2024-12-25", "Christmas Day"),
            ("2024-12-26", "Boxing Day"),
            ("2025-01-01", "New Year's Day"),
            ("2025-01-02", "Day after New Year's Day"),
            ("2025-02-06", "Waitangi Day"),
            ("2025-04-18", "Good Friday"),
            ("2025-04-21", "Easter Monday"),
            ("2025-04-25", "ANZAC Day"),
            ("2025-06-02", "King's Birthday"),
            ("2025-06-20", "Matariki"),
            ("2025-10-27", "Labour Day"),
            ("2025-12-25", "Christmas Day"),
            ("2025-12-26", "Boxing Day"),
            ("2026-01-01", "New Year's Day"),
            ("2026-01-02", "Day after New Year's Day"),
            ("2026-02-06", "Waitangi Day"),
            ("2026-04-03", "Good Friday"),
            ("2026-04-06", "Easter Monday"),
            ("2026-04-25", "ANZAC Day"),
            ("2026-06-01", "King's Birthday"),
            ("2026-07-10", "Matariki"),
            ("2026-10-26", "Labour Day"),
            ("2026-12-25", "Christmas Day"),
            ("2026-12-26", "Boxing Day"),
        ]
    )
)

DEFAULT_CALENDAR = HolidayCalendar(NZ_PUBLIC_HOLIDAYS)


def is_public_holiday(on: date, calendar: HolidayCalendar | None = None) -> bool:
    return (calendar or DEFAULT_CALENDAR).is_public_holiday(on)


def calculate_work_days(
    start: date,
    end: date,
    calendar: HolidayCalendar | None = None,
) -> int:
    """Count weekdays from start to end inclusive, skipping public holidays."""
    calendar = calendar or DEFAULT_CALENDAR
    work_days = 0
    current = start
    while current <= end:
        if calendar.is_work_day(current):
            work_days += 1
        current += timedelta(days=1)
    return work_days
