"""
Billing cycle calculator.

Uses date only (no timezone). Given the date of the last actual payment and
the billing cadence, returns the next renewal date:

- Weekly:    +7 days
- Monthly:   +1 calendar month, day clipped to the last day of the target month
- Quarterly: +3 calendar months, same clipping
- Yearly:    +1 year (Feb 29 -> Feb 28 on a non-leap target)
- One-time:  no renewal (None); the renewal date of a one-time payment is its start date
"""
import calendar
from datetime import date, timedelta
from enum import Enum


class BillingCycle(str, Enum):
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"
    QUARTERLY = "Quarterly"
    YEARLY = "Yearly"
    ONE_TIME = "One-time"

    @classmethod
    def parse(cls, value) -> "BillingCycle":
        """Accept an enum member, its value, or a loose spelling ("one_time", "ONETIME")."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().replace("-", "").replace("_", "").replace(" ", "").upper()
            for member in cls:
                if member.value.replace("-", "").upper() == key:
                    return member
        raise ValueError(f"invalid billing cycle: {value!r}")


RECURRING_CYCLES = frozenset({
    BillingCycle.WEEKLY, BillingCycle.MONTHLY, BillingCycle.QUARTERLY, BillingCycle.YEARLY,
})

_MONTHS_PER_CYCLE = {
    BillingCycle.MONTHLY: 1,
    BillingCycle.QUARTERLY: 3,
    BillingCycle.YEARLY: 12,
}


def last_day_of_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def add_months(d: date, n: int) -> date:
    month = d.month - 1 + n
    year = d.year + month // 12
    month = month % 12 + 1
    last = last_day_of_month(year, month)
    day = min(d.day, last)
    return date(year, month, day)


def next_renewal(start_date: date | None, cycle: BillingCycle | str) -> date | None:
    """Next renewal date after start_date, or None for one-time payments and invalid dates."""
    if start_date is None:
        return None
    cycle = BillingCycle.parse(cycle)
    if cycle == BillingCycle.ONE_TIME:
        return None
    if cycle == BillingCycle.WEEKLY:
        return start_date + timedelta(days=7)
    return add_months(start_date, _MONTHS_PER_CYCLE[cycle])


def derive_end_date(start_date: date | None, cycle: BillingCycle | str) -> date | None:
    """Stored end date for a cycle: next renewal, or start_date itself for one-time payments."""
    cycle = BillingCycle.parse(cycle)
    if cycle == BillingCycle.ONE_TIME:
        return start_date
    return next_renewal(start_date, cycle)
