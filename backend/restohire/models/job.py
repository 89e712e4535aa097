import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Enum, Float, ForeignKey, Text
from sqlalchemy.orm import relationship

from restohire.db.base import Base


class JobStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    FILLED = "FILLED"
    CLOSED = "CLOSED"
    CANCELLED = "CANCELLED"


class Job(Base):
    """Job posting published by a restaurant."""

    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), index=True, nullable=False)

    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    requirements = Column(Text, nullable=True)
    hourly_rate = Column(Float, nullable=False)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    max_workers = Column(Integer, default=1)

    status = Column(Enum(JobStatus, native_enum=False, length=16), default=JobStatus.ACTIVE, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    # Relationships
    restaurant = relationship("Restaurant", back_populates="jobs")
    applications = relationship("Application", back_populates="job")
