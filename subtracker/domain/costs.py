"""
Monthly-equivalent cost of a subscription, for portfolio totals only.
One-time payments don't count towards the recurring burn rate.
"""
from decimal import Decimal

from subtracker.domain.billing_cycle import BillingCycle

WEEKS_PER_MONTH = Decimal("4.33")
MONTHS_PER_YEAR = 12


def monthly_equivalent(price: Decimal, cycle: BillingCycle | str) -> Decimal:
    if not isinstance(price, Decimal):
        price = Decimal(str(price))
    cycle = BillingCycle.parse(cycle)
    if cycle == BillingCycle.WEEKLY:
        return price * WEEKS_PER_MONTH
    if cycle == BillingCycle.QUARTERLY:
        return price / 3
    if cycle == BillingCycle.YEARLY:
        return price / 12
    if cycle == BillingCycle.ONE_TIME:
        return Decimal("0")
    return price


def yearly_equivalent(price: Decimal, cycle: BillingCycle | str) -> Decimal:
    return monthly_equivalent(price, cycle) * MONTHS_PER_YEAR
