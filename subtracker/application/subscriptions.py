"""
Subscription use cases: CRUD, archive, delete, custom categories.

Each mutation loads the collection, replaces one whole item and saves the
whole list back. Mutations are serialized by a process-wide lock because
FastAPI runs sync routes in a thread pool.
"""
import logging
import threading
from datetime import date

from subtracker.domain.categories import add_category, remove_category
from subtracker.domain.subscription import (
    Subscription, SubscriptionValidationError,
    create_subscription, update_subscription,
)
from subtracker.infrastructure.db.store import SubscriptionStore

logger = logging.getLogger(__name__)

_collection_lock = threading.Lock()


class SubscriptionNotFoundError(SubscriptionValidationError):
    pass


def _find(subs: list[Subscription], sub_id: str) -> Subscription:
    for sub in subs:
        if sub.id == sub_id:
            return sub
    raise SubscriptionNotFoundError("Subscription not found")


def _replace(subs: list[Subscription], updated: Subscription) -> list[Subscription]:
    return [updated if s.id == updated.id else s for s in subs]


# ============================================================================
# Subscriptions CRUD
# ============================================================================


class CreateSubscriptionUseCase:
    def __init__(self, store: SubscriptionStore):
        self.store = store

    def execute(self, today: date | None = None, **fields) -> Subscription:
        sub = create_subscription(today=today, **fields)
        with _collection_lock:
            subs = self.store.load()
            taken = {s.id for s in subs}
            if fields.get("sub_id") in taken:
                raise SubscriptionValidationError("Subscription id already exists")
            while sub.id in taken:
                sub = create_subscription(today=today, **fields)
            self.store.save([sub, *subs])
        logger.info("Created subscription %s (%s)", sub.id, sub.name)
        return sub


class UpdateSubscriptionUseCase:
    def __init__(self, store: SubscriptionStore):
        self.store = store

    def execute(self, sub_id: str, **changes) -> Subscription:
        with _collection_lock:
            subs = self.store.load()
            updated = update_subscription(_find(subs, sub_id), **changes)
            self.store.save(_replace(subs, updated))
        return updated


class ArchiveSubscriptionUseCase:
    def __init__(self, store: SubscriptionStore):
        self.store = store

    def execute(self, sub_id: str) -> Subscription:
        with _collection_lock:
            subs = self.store.load()
            sub = _find(subs, sub_id)
            if sub.is_archived:
                raise SubscriptionValidationError("Subscription is already archived")
            updated = update_subscription(sub, is_archived=True)
            self.store.save(_replace(subs, updated))
        return updated


class UnarchiveSubscriptionUseCase:
    def __init__(self, store: SubscriptionStore):
        self.store = store

    def execute(self, sub_id: str) -> Subscription:
        with _collection_lock:
            subs = self.store.load()
            sub = _find(subs, sub_id)
            if not sub.is_archived:
                raise SubscriptionValidationError("Subscription is not archived")
            updated = update_subscription(sub, is_archived=False)
            self.store.save(_replace(subs, updated))
        return updated


class DeleteSubscriptionUseCase:
    def __init__(self, store: SubscriptionStore):
        self.store = store

    def execute(self, sub_id: str) -> None:
        with _collection_lock:
            subs = self.store.load()
            _find(subs, sub_id)
            self.store.save([s for s in subs if s.id != sub_id])
        logger.info("Deleted subscription %s", sub_id)


class SetLogoUseCase:
    """Patch logo_url in place of the current item; a vanished subscription is a no-op."""

    def __init__(self, store: SubscriptionStore):
        self.store = store

    def execute(self, sub_id: str, logo_url: str) -> Subscription | None:
        with _collection_lock:
            subs = self.store.load()
            try:
                sub = _find(subs, sub_id)
            except SubscriptionNotFoundError:
                return None
            updated = update_subscription(sub, logo_url=logo_url)
            self.store.save(_replace(subs, updated))
        return updated


def get_subscription(store: SubscriptionStore, sub_id: str) -> Subscription:
    return _find(store.load(), sub_id)


# ============================================================================
# Custom categories
# ============================================================================


class AddCategoryUseCase:
    def __init__(self, store: SubscriptionStore):
        self.store = store

    def execute(self, name: str) -> list[str]:
        with _collection_lock:
            custom = self.store.load_categories()
            updated = add_category(custom, name)
            if updated != custom:
                self.store.save_categories(updated)
        return updated


class DeleteCategoryUseCase:
    def __init__(self, store: SubscriptionStore):
        self.store = store

    def execute(self, name: str) -> list[str]:
        with _collection_lock:
            custom = self.store.load_categories()
            updated = remove_category(custom, name)
            if updated != custom:
                self.store.save_categories(updated)
        return updated
