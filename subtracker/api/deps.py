"""
FastAPI dependencies (DB session, store, collaborators, "today")
"""
from datetime import date

from subtracker.application.enrichment import GeminiClient
from subtracker.application.push_service import WebPushNotifier
from subtracker.config import get_settings
from subtracker.infrastructure.db.session import get_db as _get_db, get_session_factory
from subtracker.infrastructure.db.store import SubscriptionStore


# Re-export get_db for convenience
get_db = _get_db


def get_store() -> SubscriptionStore:
    return SubscriptionStore(get_session_factory())


def get_notifier() -> WebPushNotifier:
    return WebPushNotifier(get_session_factory())


def get_gemini() -> GeminiClient:
    return GeminiClient()


def get_today() -> date:
    """
    Evaluation day for lifecycle and reminder computations.

    Overridden in tests; the engine itself never reads the clock.
    """
    return get_settings().today()
