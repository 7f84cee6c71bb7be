"""
Optional enrichments over the Gemini REST API: logo lookup and money-saving advice.

Both are best-effort. Missing API key, HTTP errors, timeouts and unusable
answers all come back as None, and callers leave the subscription unchanged.
fix_logo() is meant to run as a background task after the response is sent.
"""
import logging
from typing import Iterable

import requests

from subtracker.application.subscriptions import SetLogoUseCase, SubscriptionNotFoundError, get_subscription
from subtracker.config import get_settings
from subtracker.domain.subscription import Subscription
from subtracker.infrastructure.db.store import SubscriptionStore
from subtracker.utils.money import format_money

logger = logging.getLogger(__name__)

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
DEFAULT_ADVICE = "Budget wisely and save more!"


class GeminiClient:
    def __init__(self, api_key: str | None = None, model: str | None = None, timeout: int | None = None):
        cfg = get_settings()
        self.api_key = cfg.GEMINI_API_KEY if api_key is None else api_key
        self.model = model or cfg.GEMINI_MODEL
        self.timeout = timeout or cfg.GEMINI_TIMEOUT

    def generate(self, prompt: str, search: bool = False) -> str | None:
        """Raw text answer, or None on any failure."""
        if not self.api_key:
            return None
        body: dict = {"contents": [{"parts": [{"text": prompt}]}]}
        if search:
            body["tools"] = [{"google_search": {}}]
        try:
            resp = requests.post(
                GEMINI_URL.format(model=self.model),
                params={"key": self.api_key},
                json=body,
                timeout=self.timeout,
            )
            if resp.status_code != 200:
                logger.error("Gemini error (HTTP %d): %s", resp.status_code, resp.text[:200])
                return None
            parts = resp.json()["candidates"][0]["content"]["parts"]
            text = "".join(p.get("text", "") for p in parts).strip()
            return text or None
        except Exception:
            logger.exception("Gemini request failed")
            return None

    def lookup_logo(self, name: str) -> str | None:
        """Direct logo URL for a service name, or None."""
        if not name or not name.strip():
            return None
        text = self.generate(
            f'Find the official, high-resolution transparent PNG or SVG logo URL for the '
            f'subscription service "{name.strip()}". Return ONLY the direct URL string starting with https.',
            search=True,
        )
        if text and text.startswith("http"):
            return text.split()[0]
        return None

    def advise(self, subs: Iterable[Subscription]) -> str | None:
        """One-sentence money-saving tip for the given subscriptions, or None."""
        summary = ", ".join(f"{s.name}: {format_money(s.price, s.currency)}" for s in subs)
        if not summary:
            return None
        return self.generate(
            f"My subscriptions: {summary}. Give a short, 1-sentence witty money-saving advice "
            f"for an Indian user. Keep it brief."
        )


def fix_logo(store: SubscriptionStore, sub_id: str, client: GeminiClient) -> str | None:
    """Look up a logo for the subscription and patch it in. No-op on failure."""
    try:
        sub = get_subscription(store, sub_id)
    except SubscriptionNotFoundError:
        return None
    url = client.lookup_logo(sub.name)
    if not url:
        logger.info("No logo found for sub_id=%s", sub_id)
        return None
    try:
        SetLogoUseCase(store).execute(sub_id, url)
    except Exception:
        logger.exception("Failed to save logo for sub_id=%s", sub_id)
        return None
    return url
