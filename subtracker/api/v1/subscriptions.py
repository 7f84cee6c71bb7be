"""
Subscription API endpoints
"""
from datetime import date

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from pydantic import BaseModel, field_validator

from subtracker.api.deps import get_gemini, get_notifier, get_store, get_today
from subtracker.application.collection import (
    ViewName, build_views, filter_view, next_due, portfolio_totals, select_view,
)
from subtracker.application.enrichment import DEFAULT_ADVICE, GeminiClient, fix_logo
from subtracker.application.push_service import WebPushNotifier
from subtracker.application.reminders import due_reminders, reminder_date, send_test_notification
from subtracker.application.subscriptions import (
    AddCategoryUseCase, ArchiveSubscriptionUseCase, CreateSubscriptionUseCase,
    DeleteCategoryUseCase, DeleteSubscriptionUseCase, SubscriptionNotFoundError,
    UnarchiveSubscriptionUseCase, UpdateSubscriptionUseCase, get_subscription,
)
from subtracker.domain.categories import ALL_CATEGORIES, all_categories
from subtracker.domain.costs import monthly_equivalent
from subtracker.domain.lifecycle import classify, days_left, is_ending_soon, progress
from subtracker.domain.subscription import Subscription, SubscriptionValidationError
from subtracker.infrastructure.db.store import StorageError, SubscriptionStore
from subtracker.utils.money import format_money, format_money2
from subtracker.utils.validation import validate_and_normalize_amount


router = APIRouter(prefix="/api/v1/subscriptions", tags=["subscriptions"])


# === Request/Response models ===

def _normalize_price(v):
    if v is None:
        return v
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        v = str(v)
    if not isinstance(v, str):
        raise ValueError("Invalid amount")
    return validate_and_normalize_amount(v, max_decimal_places=2)


class CreateSubscriptionRequest(BaseModel):
    name: str
    price: str
    billing_cycle: str = "Monthly"  # Weekly, Monthly, Quarterly, Yearly, One-time
    start_date: date | None = None
    end_date: date | None = None  # manual override of the derived renewal date
    reminder_days: int = 1
    category: str = "Entertainment"
    color: str = "#4F46E5"
    logo_url: str | None = None
    sound_tone: str | None = None

    @field_validator("price", mode="before")
    @classmethod
    def validate_price(cls, v):
        return _normalize_price(v)


class UpdateSubscriptionRequest(BaseModel):
    name: str | None = None
    price: str | None = None
    billing_cycle: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    reminder_days: int | None = None
    category: str | None = None
    color: str | None = None
    logo_url: str | None = None
    sound_tone: str | None = None

    # omitted means "unchanged"; only the optional fields may be cleared with null
    @field_validator(
        "name", "price", "billing_cycle", "start_date", "reminder_days", "category", "color",
        mode="before",
    )
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("Field can't be null")
        return v

    @field_validator("price", mode="before")
    @classmethod
    def validate_price(cls, v):
        return _normalize_price(v)


class CategoryRequest(BaseModel):
    name: str


class SubscriptionResponse(BaseModel):
    id: str
    name: str
    price: str  # Decimal as string
    currency: str
    billing_cycle: str
    start_date: date | None
    end_date: date | None
    renewal_date: date | None
    reminder_days: int
    reminder_date: date | None
    category: str
    color: str
    logo_url: str | None
    sound_tone: str | None
    is_archived: bool
    lifecycle: str
    ending_soon: bool
    days_left: int | None
    progress: float
    monthly_equivalent: str


# === Helpers ===

def _to_response(sub: Subscription, today: date) -> SubscriptionResponse:
    return SubscriptionResponse(
        id=sub.id,
        name=sub.name,
        price=str(sub.price),
        currency=sub.currency,
        billing_cycle=sub.billing_cycle.value,
        start_date=sub.start_date,
        end_date=sub.end_date,
        renewal_date=sub.renewal_date,
        reminder_days=sub.reminder_days,
        reminder_date=reminder_date(sub),
        category=sub.category,
        color=sub.color,
        logo_url=sub.logo_url,
        sound_tone=sub.sound_tone,
        is_archived=sub.is_archived,
        lifecycle=classify(sub, today).value,
        ending_soon=is_ending_soon(sub, today),
        days_left=days_left(sub, today),
        progress=round(progress(sub, today), 2),
        monthly_equivalent=str(round(monthly_equivalent(sub.price, sub.billing_cycle), 2)),
    )


def _raise_http(e: Exception):
    if isinstance(e, SubscriptionNotFoundError):
        raise HTTPException(status_code=404, detail=str(e))
    if isinstance(e, SubscriptionValidationError):
        raise HTTPException(status_code=400, detail=str(e))
    if isinstance(e, StorageError):
        raise HTTPException(status_code=503, detail=str(e))
    raise e


# === Collection ===

@router.get("/", response_model=list[SubscriptionResponse])
def list_subscriptions(
    view: ViewName = ViewName.ACTIVE,
    q: str = "",
    category: str = ALL_CATEGORIES,
    store: SubscriptionStore = Depends(get_store),
    today: date = Depends(get_today),
):
    """Active / ending soon / history list, filtered by name and category"""
    views = build_views(store.load(), today)
    return [_to_response(s, today) for s in filter_view(select_view(views, view), q, category)]


@router.get("/stats")
def get_stats(
    store: SubscriptionStore = Depends(get_store),
    today: date = Depends(get_today),
):
    """Portfolio totals over active subscriptions"""
    views = build_views(store.load(), today)
    totals = portfolio_totals(views.active)
    upcoming = next_due(views.active)
    return {
        "monthly_total": str(round(totals.monthly, 2)),
        "yearly_total": str(round(totals.yearly, 2)),
        "monthly_display": format_money(totals.monthly),
        "yearly_display": format_money(totals.yearly),
        "categories": [
            {
                "name": c.name,
                "amount": str(round(c.amount, 2)),
                "amount_display": format_money2(c.amount),
                "percent": float(round(c.percent, 2)),
                "color": c.color,
            }
            for c in totals.categories
        ],
        "counts": {
            "active": len(views.active),
            "ending_soon": len(views.ending_soon),
            "history": len(views.history),
        },
        "next_due": _to_response(upcoming, today).model_dump(mode="json") if upcoming else None,
    }


@router.get("/advice")
def get_advice(
    store: SubscriptionStore = Depends(get_store),
    gemini: GeminiClient = Depends(get_gemini),
    today: date = Depends(get_today),
):
    """One-line money-saving tip for the active subscriptions"""
    active = build_views(store.load(), today).active
    if not active:
        return {"advice": None}
    return {"advice": gemini.advise(active) or DEFAULT_ADVICE}


# === Reminders ===

@router.get("/reminders/due", response_model=list[SubscriptionResponse])
def list_due_reminders(
    store: SubscriptionStore = Depends(get_store),
    today: date = Depends(get_today),
):
    return [_to_response(s, today) for s in due_reminders(store.load(), today)]


@router.post("/reminders/test")
def test_reminder(notifier: WebPushNotifier = Depends(get_notifier)):
    """Send a sample reminder to every registered device"""
    if not notifier.is_authorized():
        return {"success": False, "reason": "notifications are not enabled"}
    return {"success": send_test_notification(notifier, audio=notifier)}


# === Categories ===

@router.get("/categories")
def list_categories(store: SubscriptionStore = Depends(get_store)):
    custom = store.load_categories()
    used = [s.category for s in store.load()]
    return {"categories": all_categories(custom, used), "custom": custom}


@router.post("/categories")
def add_category(req: CategoryRequest, store: SubscriptionStore = Depends(get_store)):
    try:
        custom = AddCategoryUseCase(store).execute(req.name)
    except StorageError as e:
        _raise_http(e)
    return {"custom": custom}


@router.delete("/categories/{name}")
def delete_category(name: str, store: SubscriptionStore = Depends(get_store)):
    try:
        custom = DeleteCategoryUseCase(store).execute(name)
    except StorageError as e:
        _raise_http(e)
    return {"custom": custom}


# === Single subscription ===

@router.post("/", response_model=SubscriptionResponse)
def create_subscription(
    req: CreateSubscriptionRequest,
    store: SubscriptionStore = Depends(get_store),
    today: date = Depends(get_today),
):
    """Create a subscription; end date is derived from start date and cycle unless given"""
    try:
        sub = CreateSubscriptionUseCase(store).execute(today=today, **req.model_dump())
    except (SubscriptionValidationError, StorageError) as e:
        _raise_http(e)
    return _to_response(sub, today)


@router.get("/{sub_id}", response_model=SubscriptionResponse)
def read_subscription(
    sub_id: str,
    store: SubscriptionStore = Depends(get_store),
    today: date = Depends(get_today),
):
    try:
        sub = get_subscription(store, sub_id)
    except SubscriptionNotFoundError as e:
        _raise_http(e)
    return _to_response(sub, today)


@router.patch("/{sub_id}", response_model=SubscriptionResponse)
def edit_subscription(
    sub_id: str,
    req: UpdateSubscriptionRequest,
    store: SubscriptionStore = Depends(get_store),
    today: date = Depends(get_today),
):
    try:
        sub = UpdateSubscriptionUseCase(store).execute(sub_id, **req.model_dump(exclude_unset=True))
    except (SubscriptionValidationError, StorageError) as e:
        _raise_http(e)
    return _to_response(sub, today)


@router.delete("/{sub_id}")
def delete_subscription(sub_id: str, store: SubscriptionStore = Depends(get_store)):
    try:
        DeleteSubscriptionUseCase(store).execute(sub_id)
    except (SubscriptionValidationError, StorageError) as e:
        _raise_http(e)
    return {"success": True}


@router.post("/{sub_id}/archive", response_model=SubscriptionResponse)
def archive_subscription(
    sub_id: str,
    store: SubscriptionStore = Depends(get_store),
    today: date = Depends(get_today),
):
    try:
        sub = ArchiveSubscriptionUseCase(store).execute(sub_id)
    except (SubscriptionValidationError, StorageError) as e:
        _raise_http(e)
    return _to_response(sub, today)


@router.post("/{sub_id}/unarchive", response_model=SubscriptionResponse)
def unarchive_subscription(
    sub_id: str,
    store: SubscriptionStore = Depends(get_store),
    today: date = Depends(get_today),
):
    try:
        sub = UnarchiveSubscriptionUseCase(store).execute(sub_id)
    except (SubscriptionValidationError, StorageError) as e:
        _raise_http(e)
    return _to_response(sub, today)


@router.post("/{sub_id}/logo", status_code=202)
def refresh_logo(
    sub_id: str,
    background_tasks: BackgroundTasks,
    store: SubscriptionStore = Depends(get_store),
    gemini: GeminiClient = Depends(get_gemini),
):
    """Look up the logo in the background; the subscription is patched only on success"""
    try:
        get_subscription(store, sub_id)
    except SubscriptionNotFoundError as e:
        _raise_http(e)
    background_tasks.add_task(fix_logo, store, sub_id, gemini)
    return {"queued": True}
