"""
Subscription domain entity.

The entity is immutable: every edit produces a new Subscription which replaces
the old one as a whole item in the collection.

Dates:
  start_date   - date of the first/last actual payment
  end_date     - next renewal; derived from start_date + billing_cycle, but
                 stored, because the user may override it by hand
  renewal_date - alias of end_date, kept equal at write time

None in any date field is the "invalid date" sentinel: the record came in with
an unparseable date. Such records stay Active and never remind.
"""
import secrets
import string
from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from subtracker.domain.billing_cycle import BillingCycle, derive_end_date

DEFAULT_CURRENCY = "INR"
DEFAULT_CATEGORY = "Entertainment"
DEFAULT_COLOR = "#4F46E5"
DEFAULT_REMINDER_DAYS = 1

COLORS = ["#4F46E5", "#EF4444", "#10B981", "#F59E0B", "#6366F1", "#EC4899", "#8B5CF6", "#1DB954", "#FF0000"]

_ID_ALPHABET = string.ascii_lowercase + string.digits
_ID_LENGTH = 9


class SubscriptionValidationError(ValueError):
    pass


def new_subscription_id() -> str:
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_LENGTH))


def parse_date(value: Any) -> date | None:
    """
    Parse a stored/entered date. Accepts date, datetime, "YYYY-MM-DD" and ISO
    datetimes ("2024-06-10T00:00:00.000Z"). Returns None when the value can't be
    read as a calendar date.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def parse_price(value: Any) -> Decimal:
    if isinstance(value, bool):
        raise SubscriptionValidationError("Invalid price")
    try:
        price = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise SubscriptionValidationError("Invalid price")
    if not price.is_finite():
        raise SubscriptionValidationError("Invalid price")
    if price < 0:
        raise SubscriptionValidationError("Price can't be negative")
    return price


@dataclass(frozen=True)
class Subscription:
    id: str
    name: str
    price: Decimal
    billing_cycle: BillingCycle
    start_date: date | None
    end_date: date | None
    renewal_date: date | None
    reminder_days: int = DEFAULT_REMINDER_DAYS
    category: str = DEFAULT_CATEGORY
    color: str = DEFAULT_COLOR
    logo_url: str | None = None
    sound_tone: str | None = None
    currency: str = DEFAULT_CURRENCY
    is_archived: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Canonical persisted shape."""
        return {
            "id": self.id,
            "name": self.name,
            "price": str(self.price),
            "currency": self.currency,
            "billingCycle": self.billing_cycle.value,
            "startDate": self.start_date.isoformat() if self.start_date else None,
            "endDate": self.end_date.isoformat() if self.end_date else None,
            "renewalDate": self.renewal_date.isoformat() if self.renewal_date else None,
            "reminderDays": self.reminder_days,
            "category": self.category,
            "color": self.color,
            "logoUrl": self.logo_url,
            "soundTone": self.sound_tone,
            "isArchived": self.is_archived,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Subscription":
        """
        Build from the persisted shape. Bad dates become None; a record without
        id/name, with an unknown cycle or with a bad price raises ValueError.
        """
        if not isinstance(data, dict):
            raise ValueError("subscription record must be an object")
        sub_id = data.get("id")
        name = data.get("name")
        if not sub_id or not isinstance(name, str) or not name.strip():
            raise ValueError("subscription record requires id and name")

        end_date = parse_date(data.get("endDate"))
        renewal_date = parse_date(data.get("renewalDate"))
        try:
            reminder_days = max(int(data.get("reminderDays", DEFAULT_REMINDER_DAYS)), 0)
        except (TypeError, ValueError, OverflowError):
            reminder_days = DEFAULT_REMINDER_DAYS

        return cls(
            id=str(sub_id),
            name=name,
            price=parse_price(data.get("price", 0)),
            billing_cycle=BillingCycle.parse(data.get("billingCycle", BillingCycle.MONTHLY)),
            start_date=parse_date(data.get("startDate")),
            end_date=end_date,
            renewal_date=renewal_date or end_date,
            reminder_days=reminder_days,
            category=_text(data.get("category")) or DEFAULT_CATEGORY,
            color=_text(data.get("color")) or DEFAULT_COLOR,
            logo_url=_text(data.get("logoUrl")),
            sound_tone=_text(data.get("soundTone")),
            currency=_text(data.get("currency")) or DEFAULT_CURRENCY,
            is_archived=bool(data.get("isArchived", False)),
        )


def _text(value: Any) -> str | None:
    """Non-blank stored string, else None."""
    if isinstance(value, str) and value.strip():
        return value
    return None


def _validate_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise SubscriptionValidationError("Name can't be empty")
    return name


def _validate_reminder_days(value: Any) -> int:
    try:
        days = int(value)
    except (TypeError, ValueError):
        raise SubscriptionValidationError("reminder_days must be an integer")
    if days < 0:
        raise SubscriptionValidationError("reminder_days must be >= 0")
    return days


def create_subscription(
    name: str,
    price: Any,
    billing_cycle: BillingCycle | str = BillingCycle.MONTHLY,
    start_date: date | str | None = None,
    end_date: date | str | None = None,
    reminder_days: int = DEFAULT_REMINDER_DAYS,
    category: str = DEFAULT_CATEGORY,
    color: str = DEFAULT_COLOR,
    logo_url: str | None = None,
    sound_tone: str | None = None,
    currency: str = DEFAULT_CURRENCY,
    sub_id: str | None = None,
    today: date | None = None,
) -> Subscription:
    """
    New subscription. end_date is derived from start_date + billing_cycle
    unless given explicitly (manual override). start_date defaults to today.
    """
    try:
        cycle = BillingCycle.parse(billing_cycle)
    except ValueError as e:
        raise SubscriptionValidationError(str(e)) from e

    start = parse_date(start_date) if start_date is not None else (today or date.today())
    override = parse_date(end_date)
    end = override if override is not None else derive_end_date(start, cycle)

    return Subscription(
        id=sub_id or new_subscription_id(),
        name=_validate_name(name),
        price=parse_price(price),
        billing_cycle=cycle,
        start_date=start,
        end_date=end,
        renewal_date=end,
        reminder_days=_validate_reminder_days(reminder_days),
        category=(category or DEFAULT_CATEGORY).strip() or DEFAULT_CATEGORY,
        color=color or DEFAULT_COLOR,
        logo_url=logo_url or None,
        sound_tone=sound_tone or None,
        currency=currency or DEFAULT_CURRENCY,
    )


_EDITABLE = (
    "name", "price", "billing_cycle", "start_date", "end_date", "reminder_days",
    "category", "color", "logo_url", "sound_tone", "is_archived",
)


def update_subscription(sub: Subscription, **changes) -> Subscription:
    """
    Return an edited copy. A change of start_date or billing_cycle re-derives
    end_date, unless end_date is passed too, in which case it is the override.
    """
    unknown = set(changes) - set(_EDITABLE)
    if unknown:
        raise SubscriptionValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")

    fields: dict[str, Any] = {}
    if "name" in changes:
        fields["name"] = _validate_name(changes["name"])
    if "price" in changes:
        fields["price"] = parse_price(changes["price"])
    if "reminder_days" in changes:
        fields["reminder_days"] = _validate_reminder_days(changes["reminder_days"])
    if "category" in changes:
        fields["category"] = (changes["category"] or DEFAULT_CATEGORY).strip() or DEFAULT_CATEGORY
    if "color" in changes:
        fields["color"] = changes["color"] or DEFAULT_COLOR
    for key in ("logo_url", "sound_tone"):
        if key in changes:
            fields[key] = changes[key] or None
    if "is_archived" in changes:
        fields["is_archived"] = bool(changes["is_archived"])

    cycle = sub.billing_cycle
    if "billing_cycle" in changes:
        try:
            cycle = BillingCycle.parse(changes["billing_cycle"])
        except ValueError as e:
            raise SubscriptionValidationError(str(e)) from e
        fields["billing_cycle"] = cycle

    start = sub.start_date
    if "start_date" in changes:
        start = parse_date(changes["start_date"])
        if start is None:
            raise SubscriptionValidationError("Invalid start date")
        fields["start_date"] = start

    override = parse_date(changes.get("end_date"))
    if override is not None:
        fields["end_date"] = override
    elif (
        ("start_date" in changes and start != sub.start_date)
        or ("billing_cycle" in changes and cycle != sub.billing_cycle)
    ):
        fields["end_date"] = derive_end_date(start, cycle)

    if "end_date" in fields:
        fields["renewal_date"] = fields["end_date"]

    return replace(sub, **fields)
