import enum
from datetime import datetime

from sqlalchemy import Column, Integer, DateTime, Enum, Float, ForeignKey
from sqlalchemy.orm import relationship

from restohire.db.base import Base


class ShiftStatus(str, enum.Enum):
    SCHEDULED = "SCHEDULED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class ShiftAssignment(Base):
    """A worker booked onto a concrete shift for one of the restaurant's jobs."""

    __tablename__ = "shift_assignments"

    id = Column(Integer, primary_key=True)
    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False)
    worker_id = Column(Integer, ForeignKey("worker_profiles.id"), nullable=False, index=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=False, index=True)

    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)
    pay_amount = Column(Float, nullable=True)

    status = Column(
        Enum(ShiftStatus, native_enum=False, length=16),
        default=ShiftStatus.SCHEDULED,
        nullable=False,
    )
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    job = relationship("Job")
    worker = relationship("WorkerProfile")
    restaurant = relationship("Restaurant")
