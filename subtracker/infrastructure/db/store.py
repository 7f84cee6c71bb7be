"""
Key-value persistence for the subscription collection.

The whole collection is one JSON document under STORAGE_KEY; custom categories
live under CAT_STORAGE_KEY. Reads never fail: an absent key, broken JSON or a
non-list payload all load as an empty collection, and single bad records are
skipped. Writes replace the whole document.
"""
import json
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from subtracker.domain.subscription import Subscription
from subtracker.infrastructure.db.models import KeyValueEntry

logger = logging.getLogger(__name__)

STORAGE_KEY = "subtracker_data_v2"
CAT_STORAGE_KEY = "subtracker_categories_v2"


class StorageError(RuntimeError):
    pass


class SubscriptionStore:
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    # ------------------------------------------------------------------
    # Raw blobs
    # ------------------------------------------------------------------

    def _read(self, key: str):
        """Decoded JSON under key, or None if absent/unreadable."""
        db: Session = self.session_factory()
        try:
            row = db.query(KeyValueEntry).filter(KeyValueEntry.key == key).first()
            if row is None:
                return None
            return json.loads(row.value)
        except (SQLAlchemyError, json.JSONDecodeError, TypeError):
            logger.exception("Failed to read %s from store", key)
            return None
        finally:
            db.close()

    def _write(self, key: str, payload) -> None:
        data = json.dumps(payload, ensure_ascii=False)
        db: Session = self.session_factory()
        try:
            row = db.query(KeyValueEntry).filter(KeyValueEntry.key == key).first()
            if row is None:
                db.add(KeyValueEntry(key=key, value=data))
            else:
                row.value = data
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("Failed to write %s to store", key)
            raise StorageError(f"could not save {key}") from e
        finally:
            db.close()

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def load(self) -> list[Subscription]:
        raw = self._read(STORAGE_KEY)
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning("Ignoring %s: expected a list, got %s", STORAGE_KEY, type(raw).__name__)
            return []

        subs: list[Subscription] = []
        for item in raw:
            try:
                subs.append(Subscription.from_dict(item))
            except (ValueError, TypeError, ArithmeticError) as e:
                logger.warning("Skipping corrupt subscription record: %s", e)
        return subs

    def save(self, subs: list[Subscription]) -> None:
        self._write(STORAGE_KEY, [s.to_dict() for s in subs])

    # ------------------------------------------------------------------
    # Custom categories
    # ------------------------------------------------------------------

    def load_categories(self) -> list[str]:
        raw = self._read(CAT_STORAGE_KEY)
        if not isinstance(raw, list):
            return []
        return [c for c in raw if isinstance(c, str) and c.strip()]

    def save_categories(self, categories: list[str]) -> None:
        self._write(CAT_STORAGE_KEY, list(categories))
