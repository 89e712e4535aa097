import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Enum
from sqlalchemy.orm import relationship

from restohire.db.base import Base


class Role(str, enum.Enum):
    RESTAURANT_OWNER = "RESTAURANT_OWNER"
    WORKER = "WORKER"


class User(Base):
    """User model for authentication and authorization."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    name = Column(String)
    phone = Column(String, nullable=True)
    role = Column(Enum(Role, native_enum=False, length=32), nullable=False)
    email_verified_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    restaurant = relationship("Restaurant", back_populates="owner", uselist=False)
    worker_profile = relationship("WorkerProfile", back_populates="user", uselist=False)
    notifications = relationship("Notification", back_populates="user")
    notification_preference = relationship(
        "NotificationPreference", back_populates="user", uselist=False
    )
    devices = relationship("NotificationDevice", back_populates="user")
