"""
Subscription renewal reminders: evaluated once per day.

For each non-archived subscription:
  - reminder_date = end_date - reminder_days
  - fires iff today == reminder_date (exact calendar day, not <=)

A reminder whose day passes without a sweep is not sent later. Running the
sweep several times on the same day yields the same due set; suppressing
repeated delivery within a day is left to the caller.

due_reminders() is pure. dispatch_reminders() is the sweep: it calls the
delivery and audio collaborators and isolates failures per subscription.
"""
import logging
from datetime import date, timedelta
from typing import Iterable, Protocol

from subtracker.domain.subscription import Subscription

logger = logging.getLogger(__name__)

REMINDER_TITLE = "SUBZS Reminder"
TEST_TITLE = "SUBZS: Test Alert"
TEST_BODY = "Brilliant! This is how your renewal alerts will appear."
DEFAULT_ICON = "https://img.icons8.com/fluency/128/null/recurring-appointment.png"

SOUNDS = {
    "Digital": "https://assets.mixkit.co/active_storage/sfx/2869/2869-preview.mp3",
    "Bell": "https://assets.mixkit.co/active_storage/sfx/2568/2568-preview.mp3",
    "Playful": "https://assets.mixkit.co/active_storage/sfx/2358/2358-preview.mp3",
    "Gentle": "https://assets.mixkit.co/active_storage/sfx/2190/2190-preview.mp3",
}


class Notifier(Protocol):
    def deliver(self, title: str, body: str, icon: str | None = None) -> bool: ...


class AudioCue(Protocol):
    def play(self, tone_ref: str) -> None: ...


def reminder_date(sub: Subscription) -> date | None:
    if sub.end_date is None:
        return None
    try:
        return sub.end_date - timedelta(days=sub.reminder_days)
    except OverflowError:
        return None


def due_reminders(subs: Iterable[Subscription], today: date) -> list[Subscription]:
    """Subscriptions whose reminder falls exactly on `today`. Never raises."""
    due: list[Subscription] = []
    for sub in subs:
        try:
            if sub.is_archived:
                continue
            if reminder_date(sub) == today:
                due.append(sub)
        except Exception:
            logger.exception("Reminder evaluation failed for sub_id=%s", getattr(sub, "id", "?"))
    return due


def reminder_body(sub: Subscription) -> str:
    return f"Your {sub.name} subscription renews in {sub.reminder_days} day(s)!"


def _play_tone(audio: AudioCue | None, tone: str | None) -> None:
    if audio is None or not tone or tone not in SOUNDS:
        return
    try:
        audio.play(SOUNDS[tone])
    except Exception as e:
        logger.debug("Audio cue %s failed: %s", tone, e)


def dispatch_reminders(
    subs: Iterable[Subscription],
    today: date,
    notifier: Notifier,
    audio: AudioCue | None = None,
    enabled: bool = True,
) -> int:
    """
    Deliver today's reminders.

    `enabled` is the delivery permission; nothing is sent without it.
    Returns the number of reminders successfully delivered.
    """
    if not enabled:
        return 0

    sent = 0
    for sub in due_reminders(subs, today):
        try:
            if notifier.deliver(REMINDER_TITLE, reminder_body(sub), sub.logo_url or DEFAULT_ICON):
                sent += 1
        except Exception:
            logger.exception("Reminder delivery failed for sub_id=%s", sub.id)
            continue
        _play_tone(audio, sub.sound_tone)

    if sent:
        logger.info("Sent %d subscription reminder(s) for %s", sent, today.isoformat())
    return sent


def send_test_notification(notifier: Notifier, audio: AudioCue | None = None) -> bool:
    """Sample alert so the user can see (and hear) what a reminder looks like."""
    try:
        delivered = bool(notifier.deliver(TEST_TITLE, TEST_BODY, DEFAULT_ICON))
    except Exception:
        logger.exception("Test notification failed")
        return False
    _play_tone(audio, "Digital")
    return delivered
