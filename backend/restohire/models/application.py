import enum
from datetime import datetime

from sqlalchemy import Column, Integer, DateTime, Enum, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from restohire.db.base import Base


class ApplicationStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    INTERVIEWING = "INTERVIEWING"
    WITHDRAWN = "WITHDRAWN"


class Application(Base):
    """
    A worker's application to a job.

    At most one application exists per (job, worker) pair; the unique
    constraint is the only guard against concurrent duplicate submissions.
    """

    __tablename__ = "applications"
    __table_args__ = (
        UniqueConstraint("job_id", "worker_id", name="uq_applications_job_worker"),
    )

    id = Column(Integer, primary_key=True, index=True)
    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False, index=True)
    worker_id = Column(Integer, ForeignKey("worker_profiles.id"), nullable=False, index=True)
    # Copied from the job so owner dashboards don't need a join
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=False, index=True)

    status = Column(
        Enum(ApplicationStatus, native_enum=False, length=16),
        default=ApplicationStatus.PENDING,
        nullable=False,
    )
    message = Column(Text, nullable=True)  # cover note from the worker
    response_note = Column(Text, nullable=True)

    applied_at = Column(DateTime, default=datetime.utcnow, index=True)
    responded_at = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    job = relationship("Job", back_populates="applications")
    worker = relationship("WorkerProfile", back_populates="applications")
    restaurant = relationship("Restaurant")
