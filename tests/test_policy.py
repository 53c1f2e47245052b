"""Tests for versioned policy tables."""

import json
from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from nz_payroll.calculators.errors import PolicyNotFoundError
from nz_payroll.calculators.policy import (
    NZ_2024_25_PAYLOAD,
    PayrollPolicy,
    PolicySchedule,
    TaxBracket,
)
from nz_payroll.calculators.types import LeaveType


class TestPolicySchedule:
    def test_resolves_by_effective_date(self, schedule):
        assert schedule.for_date(date(2024, 4, 1)).version == "NZ-2024-25"
        assert schedule.for_date(date(2025, 3, 31)).version == "NZ-2024-25"
        assert schedule.for_date(date(2025, 4, 1)).version == "NZ-2025-26"
        assert schedule.for_date(date(2030, 1, 1)).version == "NZ-2025-26"

    def test_date_before_first_version(self, schedule):
        with pytest.raises(PolicyNotFoundError) as exc_info:
            schedule.for_date(date(2024, 3, 31))
        assert exc_info.value.code == "PolicyNotFound"

    def test_overlapping_versions_rejected(self, policy_2024):
        overlapping = replace(policy_2024, version="NZ-2024-25b", effective_start=date(2025, 1, 1))
        with pytest.raises(ValueError, match="overlap"):
            PolicySchedule([policy_2024, overlapping])

    def test_versions_sorted(self, policy_2024, policy_2025):
        schedule = PolicySchedule([policy_2025, policy_2024])
        assert [p.version for p in schedule.versions] == ["NZ-2024-25", "NZ-2025-26"]

    def test_from_json_file(self, tmp_path):
        path = tmp_path / "policies.json"
        path.write_text(json.dumps({"versions": [NZ_2024_25_PAYLOAD]}), encoding="utf-8")

        schedule = PolicySchedule.from_json_file(path)

        assert schedule.for_date(date(2024, 6, 1)).acc.max_earnings == Decimal("139384")


class TestPayrollPolicy:
    def test_payload_round_trip(self, policy_2025):
        assert PayrollPolicy.from_payload(policy_2025.to_payload()) == policy_2025

    def test_defaults_for_omitted_sections(self, policy_2024):
        assert policy_2024.leave.min_notice_days == 14
        assert policy_2024.leave.qualifying_months(LeaveType.ANNUAL) == 12
        assert policy_2024.leave.qualifying_months("sick") == 6
        assert policy_2024.overtime.daily_regular_hours == Decimal("8")

    def test_leave_overrides_are_coerced(self):
        payload = dict(NZ_2024_25_PAYLOAD, leave={"min_notice_days": "21", "include_overtime": False})
        policy = PayrollPolicy.from_payload(payload)

        assert policy.leave.min_notice_days == 21
        assert policy.leave.include_overtime is False

    def test_unknown_keys_rejected(self):
        payload = dict(NZ_2024_25_PAYLOAD, acc={"earners_levy_rate": "0.0139", "cap": "1"})
        with pytest.raises(ValueError, match="Unknown ACCPolicy keys"):
            PayrollPolicy.from_payload(payload)

    def test_minimum_wage_rates(self, policy_2024, policy_2025):
        assert policy_2024.to_payload()["minimum_wage"] == {"adult": "23.15", "training": "18.52"}
        assert policy_2025.minimum_wage.adult == Decimal("23.50")

    def test_brackets_must_ascend(self, policy_2024):
        with pytest.raises(ValueError):
            replace(
                policy_2024,
                paye_brackets=(
                    TaxBracket(Decimal("48000"), Decimal("0.175")),
                    TaxBracket(Decimal("14000"), Decimal("0.105")),
                    TaxBracket(None, Decimal("0.39")),
                ),
            )

    def test_last_bracket_unbounded(self, policy_2024):
        with pytest.raises(ValueError, match="unbounded"):
            replace(policy_2024, paye_brackets=(TaxBracket(Decimal("14000"), Decimal("0.105")),))

    def test_tax_codes(self, policy_2024):
        assert policy_2024.tax_codes == {"M", "ME", "SB", "S", "SH", "ST", "SA"}

    def test_is_active_on(self, policy_2024):
        assert policy_2024.is_active_on(date(2024, 4, 1)) is True
        assert policy_2024.is_active_on(date(2025, 4, 1)) is False
