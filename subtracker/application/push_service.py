"""
Web Push notification service.

Sends push notifications via pywebpush and manages stale subscriptions.
WebPushNotifier is the delivery collaborator of the reminder sweep: it
implements both deliver() (a visible notification) and play() (a sound cue the
service worker plays on the device).
"""
import json
import logging

from pywebpush import webpush, WebPushException
from sqlalchemy.orm import Session, sessionmaker

from subtracker.config import get_settings
from subtracker.infrastructure.db.models import PushSubscription

logger = logging.getLogger(__name__)

DEFAULT_ICON = "https://img.icons8.com/fluency/128/null/recurring-appointment.png"


def _vapid_private_key(raw_key: str) -> str:
    # .env may store PEM with literal \n or real newlines depending on quoting
    if "\\n" in raw_key:
        raw_key = raw_key.replace("\\n", "\n")
    # pywebpush accepts a raw base64url key; strip PEM armour if present
    if "BEGIN" in raw_key:
        lines = [line.strip() for line in raw_key.strip().splitlines()
                 if line.strip() and not line.strip().startswith("-----")]
        raw_key = "".join(lines)
    return raw_key


def push_enabled() -> bool:
    settings = get_settings()
    return bool(settings.VAPID_PRIVATE_KEY and settings.VAPID_PUBLIC_KEY)


def send_web_push(db: Session, subscription: PushSubscription, payload: dict) -> bool:
    """
    Send a push notification to a single subscription.

    payload format:
        {"title": "...", "body": "...", "icon": "https://...", "url": "/"}

    Returns True on success, False on failure.
    Automatically deletes stale subscriptions (410/404).
    """
    settings = get_settings()
    if not settings.VAPID_PRIVATE_KEY or not settings.VAPID_PUBLIC_KEY:
        logger.warning("VAPID keys not configured, skipping push")
        return False

    subscription_info = {
        "endpoint": subscription.endpoint,
        "keys": {
            "p256dh": subscription.p256dh,
            "auth": subscription.auth,
        },
    }

    try:
        webpush(
            subscription_info=subscription_info,
            data=json.dumps(payload, ensure_ascii=False),
            vapid_private_key=_vapid_private_key(settings.VAPID_PRIVATE_KEY),
            vapid_claims={"sub": settings.VAPID_MAILTO},
        )
        return True
    except WebPushException as e:
        status_code = e.response.status_code if e.response is not None else 0
        if status_code in (404, 410):
            logger.info("Subscription expired (HTTP %d), removing: %s", status_code, subscription.endpoint[:60])
            db.query(PushSubscription).filter(PushSubscription.id == subscription.id).delete()
            db.commit()
        else:
            logger.error("WebPush error (HTTP %d): %s", status_code, e)
        return False


def send_push_to_all(db: Session, payload: dict) -> int:
    """
    Send a push notification to every registered device.

    Returns the number of successful deliveries.
    """
    subs = db.query(PushSubscription).all()
    if not subs:
        return 0

    sent = 0
    for sub in subs:
        try:
            if send_web_push(db, sub, payload):
                sent += 1
        except Exception:
            logger.exception("Push to %s failed", sub.endpoint[:60])
            db.rollback()
    return sent


class WebPushNotifier:
    """Notification delivery + audio cue over Web Push."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def is_authorized(self) -> bool:
        """Delivery permission: VAPID keys configured and at least one device subscribed."""
        if not push_enabled():
            return False
        db = self.session_factory()
        try:
            return db.query(PushSubscription).first() is not None
        finally:
            db.close()

    def _send(self, payload: dict) -> int:
        db = self.session_factory()
        try:
            return send_push_to_all(db, payload)
        finally:
            db.close()

    def deliver(self, title: str, body: str, icon: str | None = None) -> bool:
        icon = icon or DEFAULT_ICON
        sent = self._send({
            "title": title,
            "body": body,
            "icon": icon,
            "badge": icon,
            "vibrate": [200, 100, 200],
            "url": "/",
        })
        return sent > 0

    def play(self, tone_ref: str) -> None:
        self._send({"type": "sound", "sound": tone_ref})
