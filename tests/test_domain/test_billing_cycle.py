"""Tests for the billing cycle calculator."""
import pytest
from datetime import date, timedelta

from subtracker.domain.billing_cycle import (
    BillingCycle, RECURRING_CYCLES, add_months, derive_end_date, next_renewal,
)


class TestNextRenewal:
    def test_weekly_adds_seven_days(self):
        assert next_renewal(date(2024, 6, 10), BillingCycle.WEEKLY) == date(2024, 6, 17)

    def test_weekly_crosses_year(self):
        assert next_renewal(date(2023, 12, 28), BillingCycle.WEEKLY) == date(2024, 1, 4)

    def test_monthly_keeps_day(self):
        assert next_renewal(date(2024, 3, 15), BillingCycle.MONTHLY) == date(2024, 4, 15)

    def test_monthly_clamps_to_leap_february(self):
        assert next_renewal(date(2024, 1, 31), BillingCycle.MONTHLY) == date(2024, 2, 29)

    def test_monthly_clamps_to_february(self):
        assert next_renewal(date(2023, 1, 31), BillingCycle.MONTHLY) == date(2023, 2, 28)

    def test_monthly_december_rolls_year(self):
        assert next_renewal(date(2024, 12, 5), BillingCycle.MONTHLY) == date(2025, 1, 5)

    def test_quarterly_clamps(self):
        # 30.11 + 3 months -> February has no 30th
        assert next_renewal(date(2023, 11, 30), BillingCycle.QUARTERLY) == date(2024, 2, 29)

    def test_quarterly_plain(self):
        assert next_renewal(date(2024, 1, 10), BillingCycle.QUARTERLY) == date(2024, 4, 10)

    def test_yearly_plain(self):
        assert next_renewal(date(2024, 6, 10), BillingCycle.YEARLY) == date(2025, 6, 10)

    def test_yearly_leap_day_clamps(self):
        assert next_renewal(date(2024, 2, 29), BillingCycle.YEARLY) == date(2025, 2, 28)

    def test_one_time_has_no_renewal(self):
        assert next_renewal(date(2024, 6, 10), BillingCycle.ONE_TIME) is None

    def test_invalid_start_date(self):
        assert next_renewal(None, BillingCycle.MONTHLY) is None

    def test_accepts_string_cycle(self):
        assert next_renewal(date(2024, 1, 1), "Monthly") == date(2024, 2, 1)

    @pytest.mark.parametrize("cycle", sorted(RECURRING_CYCLES, key=lambda c: c.value))
    def test_never_before_start(self, cycle):
        d = date(2023, 1, 1)
        while d < date(2025, 1, 1):
            assert next_renewal(d, cycle) >= d
            d += timedelta(days=13)


class TestDeriveEndDate:
    def test_one_time_equals_start(self):
        assert derive_end_date(date(2024, 6, 10), BillingCycle.ONE_TIME) == date(2024, 6, 10)

    def test_recurring_is_next_renewal(self):
        assert derive_end_date(date(2024, 6, 10), BillingCycle.WEEKLY) == date(2024, 6, 17)


class TestBillingCycleParse:
    @pytest.mark.parametrize("raw", ["One-time", "one_time", "ONETIME", "one time"])
    def test_one_time_spellings(self, raw):
        assert BillingCycle.parse(raw) == BillingCycle.ONE_TIME

    def test_member_passthrough(self):
        assert BillingCycle.parse(BillingCycle.YEARLY) is BillingCycle.YEARLY

    def test_unknown(self):
        with pytest.raises(ValueError):
            BillingCycle.parse("Fortnightly")


def test_add_months_negative():
    assert add_months(date(2024, 3, 31), -1) == date(2024, 2, 29)
