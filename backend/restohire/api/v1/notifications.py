"""
Notification endpoints.

In-app notification inbox, per-user delivery preferences and push device
registration.
"""

from datetime import datetime
from typing import Any, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from restohire.api.v1.auth import get_current_user
from restohire.core.errors import NotFoundError
from restohire.db.session import get_db
from restohire.models import (
    Notification,
    NotificationDevice,
    NotificationPreference,
    NotificationType,
    User,
)

router = APIRouter()

NOTIFICATION_PAGE_SIZE = 50


# ============== Pydantic Schemas ==============


class NotificationResponse(BaseModel):
    id: int
    type: NotificationType
    title: str
    message: str
    is_read: bool
    read_at: Optional[datetime] = None
    data: Optional[dict[str, Any]] = None
    created_at: datetime

    class Config:
        from_attributes = True


class NotificationListResponse(BaseModel):
    notifications: list[NotificationResponse]
    unread_count: int


class PreferencesSchema(BaseModel):
    in_app_enabled: bool = True
    push_enabled: bool = True
    application_updates: bool = True
    messages: bool = True
    job_postings: bool = True
    shift_reminders: bool = True
    reviews_and_ratings: bool = True

    class Config:
        from_attributes = True


class PreferencesUpdate(BaseModel):
    """Partial update; omitted switches keep their current value."""

    in_app_enabled: Optional[bool] = None
    push_enabled: Optional[bool] = None
    application_updates: Optional[bool] = None
    messages: Optional[bool] = None
    job_postings: Optional[bool] = None
    shift_reminders: Optional[bool] = None
    reviews_and_ratings: Optional[bool] = None


class DeviceRegister(BaseModel):
    token: str = Field(min_length=1)
    platform: Literal["ios", "android", "web"]


class DeviceResponse(BaseModel):
    id: int
    token: str
    platform: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ============== API Endpoints ==============


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    unread_only: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """The caller's notifications, newest first, with the unread total."""
    query = db.query(Notification).filter(Notification.user_id == current_user.id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))

    notifications = (
        query.order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(NOTIFICATION_PAGE_SIZE)
        .all()
    )
    unread_count = (
        db.query(Notification)
        .filter(Notification.user_id == current_user.id, Notification.is_read.is_(False))
        .count()
    )

    return NotificationListResponse(
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
        unread_count=unread_count,
    )


@router.post("/read-all")
async def mark_all_read(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    updated = (
        db.query(Notification)
        .filter(Notification.user_id == current_user.id, Notification.is_read.is_(False))
        .update(
            {Notification.is_read: True, Notification.read_at: datetime.utcnow()},
            synchronize_session=False,
        )
    )
    db.commit()
    return {"success": True, "updated": updated}


@router.get("/preferences", response_model=PreferencesSchema)
async def get_preferences(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Stored switches, or all-enabled defaults when none were saved."""
    prefs = (
        db.query(NotificationPreference)
        .filter(NotificationPreference.user_id == current_user.id)
        .first()
    )
    if not prefs:
        return PreferencesSchema()
    return PreferencesSchema.model_validate(prefs)


@router.put("/preferences", response_model=PreferencesSchema)
async def update_preferences(
    request: PreferencesUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    prefs = (
        db.query(NotificationPreference)
        .filter(NotificationPreference.user_id == current_user.id)
        .first()
    )
    if not prefs:
        prefs = NotificationPreference(user_id=current_user.id, **PreferencesSchema().model_dump())
        db.add(prefs)

    for field_name, value in request.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(prefs, field_name, value)

    db.commit()
    db.refresh(prefs)
    return PreferencesSchema.model_validate(prefs)


@router.get("/devices", response_model=list[DeviceResponse])
async def list_devices(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return (
        db.query(NotificationDevice)
        .filter(NotificationDevice.user_id == current_user.id)
        .all()
    )


@router.post("/devices", response_model=DeviceResponse)
async def register_device(
    request: DeviceRegister,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Register a push token.

    A token already registered by another user is moved to the caller.
    Re-registering always records the platform sent last.
    """
    device = db.query(NotificationDevice).filter(NotificationDevice.token == request.token).first()

    if device:
        if device.user_id != current_user.id or device.platform != request.platform:
            device.user_id = current_user.id
            device.platform = request.platform
            db.commit()
            db.refresh(device)
        return device

    device = NotificationDevice(
        user_id=current_user.id,
        token=request.token,
        platform=request.platform,
    )
    db.add(device)
    db.commit()
    db.refresh(device)
    return device


@router.delete("/devices")
async def unregister_device(
    token: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not token:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Device token is required",
        )

    device = (
        db.query(NotificationDevice)
        .filter(
            NotificationDevice.token == token,
            NotificationDevice.user_id == current_user.id,
        )
        .first()
    )
    if not device:
        raise NotFoundError("Device not found")

    db.delete(device)
    db.commit()
    return {"success": True}


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    notification = (
        db.query(Notification)
        .filter(
            Notification.id == notification_id,
            Notification.user_id == current_user.id,
        )
        .first()
    )
    if not notification:
        raise NotFoundError("Notification not found")

    if not notification.is_read:
        notification.is_read = True
        notification.read_at = datetime.utcnow()
        db.commit()
        db.refresh(notification)

    return notification
