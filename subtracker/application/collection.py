"""
Collection views over the full subscription set.

Pure read-layer: no mutations. Recomputed on every request.
  1. active / ending soon / history lists
  2. portfolio totals (monthly, yearly) and per-category breakdown
  3. search + category filter over a chosen view
"""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Iterable

from subtracker.domain.categories import ALL_CATEGORIES, category_color
from subtracker.domain.costs import MONTHS_PER_YEAR, monthly_equivalent
from subtracker.domain.lifecycle import Lifecycle, classify, is_ending_soon
from subtracker.domain.subscription import Subscription


class ViewName(str, Enum):
    ACTIVE = "active"
    ENDING = "ending"
    HISTORY = "history"


@dataclass(frozen=True)
class CollectionViews:
    active: list[Subscription] = field(default_factory=list)
    ending_soon: list[Subscription] = field(default_factory=list)
    history: list[Subscription] = field(default_factory=list)


@dataclass(frozen=True)
class CategoryShare:
    name: str
    amount: Decimal
    percent: Decimal
    color: str


@dataclass(frozen=True)
class PortfolioTotals:
    monthly: Decimal
    yearly: Decimal
    categories: list[CategoryShare]


def build_views(subs: Iterable[Subscription], today: date) -> CollectionViews:
    """Split the collection by lifecycle, keeping input order within each view."""
    active: list[Subscription] = []
    ending: list[Subscription] = []
    history: list[Subscription] = []
    for sub in subs:
        if classify(sub, today) == Lifecycle.HISTORY:
            history.append(sub)
            continue
        active.append(sub)
        if is_ending_soon(sub, today):
            ending.append(sub)
    return CollectionViews(active=active, ending_soon=ending, history=history)


def select_view(views: CollectionViews, name: ViewName | str) -> list[Subscription]:
    name = ViewName(name)
    if name == ViewName.ENDING:
        return views.ending_soon
    if name == ViewName.HISTORY:
        return views.history
    return views.active


def portfolio_totals(active: Iterable[Subscription]) -> PortfolioTotals:
    """
    Monthly burn rate of the active set, yearly projection and category shares.

    Categories are sorted by amount descending; equal amounts keep the order in
    which the category was first seen. Zero-amount categories are dropped.
    """
    by_category: dict[str, Decimal] = {}
    monthly = Decimal("0")
    for sub in active:
        effect = monthly_equivalent(sub.price, sub.billing_cycle)
        monthly += effect
        by_category[sub.category] = by_category.get(sub.category, Decimal("0")) + effect

    shares = [
        CategoryShare(
            name=name,
            amount=amount,
            percent=(amount / monthly * 100) if monthly > 0 else Decimal("0"),
            color=category_color(name, index),
        )
        for index, (name, amount) in enumerate(by_category.items())
        if amount > 0
    ]
    shares.sort(key=lambda s: s.amount, reverse=True)

    return PortfolioTotals(monthly=monthly, yearly=monthly * MONTHS_PER_YEAR, categories=shares)


def next_due(subs: Iterable[Subscription]) -> Subscription | None:
    """Non-archived subscription with the earliest renewal date."""
    candidates = [s for s in subs if not s.is_archived and s.renewal_date is not None]
    if not candidates:
        return None
    return min(candidates, key=lambda s: s.renewal_date)


def filter_view(
    view: Iterable[Subscription],
    search: str = "",
    category: str = ALL_CATEGORIES,
) -> list[Subscription]:
    """Case-insensitive name substring match plus exact category ("All" matches any)."""
    needle = (search or "").lower()
    category = category or ALL_CATEGORIES
    return [
        sub for sub in view
        if needle in sub.name.lower()
        and (category == ALL_CATEGORIES or sub.category == category)
    ]
