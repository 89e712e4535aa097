import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum, ForeignKey, JSON, Text
from sqlalchemy.orm import relationship

from restohire.db.base import Base


class NotificationType(str, enum.Enum):
    APPLICATION_STATUS = "APPLICATION_STATUS"
    NEW_APPLICATION = "NEW_APPLICATION"
    NEW_MESSAGE = "NEW_MESSAGE"
    NEW_JOB = "NEW_JOB"
    SHIFT_REMINDER = "SHIFT_REMINDER"
    NEW_REVIEW = "NEW_REVIEW"


class Notification(Base):
    """In-app notification addressed to a single user."""

    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    type = Column(Enum(NotificationType, native_enum=False, length=32), nullable=False)
    title = Column(String, nullable=False)
    message = Column(Text, nullable=False)

    is_read = Column(Boolean, default=False, nullable=False)
    read_at = Column(DateTime, nullable=True)

    # Deep-link references for the UI, e.g. {"applicationId": 3, "jobTitle": "Line Cook"}
    data = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    # Relationships
    user = relationship("User", back_populates="notifications")


class NotificationPreference(Base):
    """
    Per-user delivery switches.

    A user without a row gets every channel and every kind enabled.
    """

    __tablename__ = "notification_preferences"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)

    # Channels
    in_app_enabled = Column(Boolean, default=True, nullable=False)
    push_enabled = Column(Boolean, default=True, nullable=False)

    # Kinds
    application_updates = Column(Boolean, default=True, nullable=False)
    messages = Column(Boolean, default=True, nullable=False)
    job_postings = Column(Boolean, default=True, nullable=False)
    shift_reminders = Column(Boolean, default=True, nullable=False)
    reviews_and_ratings = Column(Boolean, default=True, nullable=False)

    user = relationship("User", back_populates="notification_preference")


class NotificationDevice(Base):
    """Push target registered by a client app."""

    __tablename__ = "notification_devices"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    token = Column(String, unique=True, nullable=False)
    platform = Column(String, nullable=False)  # "ios" | "android" | "web"
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="devices")
