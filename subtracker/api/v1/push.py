"""
Device registration for Web Push reminders.

A registered device is what grants the reminder sweep its delivery permission;
removing the last one revokes it.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from pydantic import BaseModel

from subtracker.api.deps import get_db
from subtracker.application.push_service import push_enabled
from subtracker.config import get_settings
from subtracker.infrastructure.db.models import PushSubscription

router = APIRouter(prefix="/api/push", tags=["push"])


class PushKeys(BaseModel):
    p256dh: str
    auth: str


class DeviceRequest(BaseModel):
    endpoint: str
    keys: PushKeys


def _device_count(db: Session) -> int:
    return db.query(PushSubscription).count()


@router.get("/public-key")
def public_key():
    """VAPID public key for PushManager.subscribe() on the client."""
    return {"public_key": get_settings().VAPID_PUBLIC_KEY}


@router.get("/status")
def push_status(db: Session = Depends(get_db)):
    devices = _device_count(db)
    return {
        "configured": push_enabled(),
        "devices": devices,
        "authorized": push_enabled() and devices > 0,
    }


@router.post("/subscribe")
def register_device(body: DeviceRequest, db: Session = Depends(get_db)):
    device = db.query(PushSubscription).filter_by(endpoint=body.endpoint).one_or_none()
    if device is None:
        device = PushSubscription(endpoint=body.endpoint)
        db.add(device)
    # browsers rotate keys for the same endpoint
    device.p256dh = body.keys.p256dh
    device.auth = body.keys.auth
    db.commit()
    return {"success": True, "devices": _device_count(db)}


@router.delete("/unsubscribe")
def unregister_device(body: DeviceRequest, db: Session = Depends(get_db)):
    deleted = db.query(PushSubscription).filter_by(endpoint=body.endpoint).delete()
    db.commit()
    return {"success": True, "deleted": deleted, "devices": _device_count(db)}
