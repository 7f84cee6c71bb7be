"""
Lifecycle classification of a subscription on a given day.

  History    - archived, or end_date strictly before today
  Active     - everything else (including records with an invalid end date)
  EndingSoon - refinement of Active: today <= end_date <= today + 7 days

Nothing here is stored: the lifecycle is recomputed from
(today, end_date, is_archived) on every call.
"""
from datetime import date, timedelta
from enum import Enum

from subtracker.domain.subscription import Subscription

ENDING_SOON_WINDOW_DAYS = 7


class Lifecycle(str, Enum):
    ACTIVE = "Active"
    ENDING_SOON = "EndingSoon"
    HISTORY = "History"


def is_expired(sub: Subscription, today: date) -> bool:
    if sub.end_date is None:
        return False
    return sub.end_date < today


def classify(sub: Subscription, today: date) -> Lifecycle:
    """Active or History. EndingSoon is reported separately by is_ending_soon()."""
    if sub.is_archived:
        return Lifecycle.HISTORY
    if is_expired(sub, today):
        return Lifecycle.HISTORY
    return Lifecycle.ACTIVE


def is_ending_soon(sub: Subscription, today: date) -> bool:
    if classify(sub, today) != Lifecycle.ACTIVE or sub.end_date is None:
        return False
    return today <= sub.end_date <= today + timedelta(days=ENDING_SOON_WINDOW_DAYS)


def lifecycle_tags(sub: Subscription, today: date) -> set[Lifecycle]:
    tags = {classify(sub, today)}
    if is_ending_soon(sub, today):
        tags.add(Lifecycle.ENDING_SOON)
    return tags


def days_left(sub: Subscription, today: date) -> int | None:
    """Days until end_date, clamped at 0. None when the end date is invalid."""
    if sub.end_date is None:
        return None
    return max((sub.end_date - today).days, 0)


def progress(sub: Subscription, today: date) -> float:
    """Share of the current billing period already elapsed, 0..100."""
    if sub.start_date is None or sub.end_date is None:
        return 0.0
    total = (sub.end_date - sub.start_date).days
    if total <= 0:
        return 0.0
    elapsed = (today - sub.start_date).days
    return min(100.0, max(0.0, elapsed / total * 100))
