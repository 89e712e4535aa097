from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Float, ForeignKey, JSON, Text
from sqlalchemy.orm import relationship

from restohire.db.base import Base


class WorkerProfile(Base):
    """Worker profile, one-to-one with a WORKER user."""

    __tablename__ = "worker_profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)

    title = Column(String, nullable=True)  # "Line Cook", "Bartender"
    bio = Column(Text, nullable=True)

    # Ordered list of skill names, e.g. ["Grill", "Prep", "Barista"]
    skills = Column(JSON, default=list)

    hourly_rate = Column(Float, nullable=True)
    availability = Column(String, nullable=True)  # free text: "Weekends, evenings"
    years_of_experience = Column(Integer, nullable=True)

    # Contact
    contact_email = Column(String, nullable=True)
    contact_phone = Column(String, nullable=True)
    address = Column(String, nullable=True)
    city = Column(String, nullable=True)
    state = Column(String, nullable=True)
    zip_code = Column(String, nullable=True)
    profile_picture_url = Column(String, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="worker_profile")
    applications = relationship("Application", back_populates="worker")
    certifications = relationship(
        "Certification",
        back_populates="worker",
        order_by=lambda: Certification.issue_date.desc(),
    )


class Certification(Base):
    """Food-handler card, alcohol server permit and the like."""

    __tablename__ = "worker_certifications"

    id = Column(Integer, primary_key=True, index=True)
    worker_id = Column(Integer, ForeignKey("worker_profiles.id"), index=True, nullable=False)

    name = Column(String, nullable=False)
    issuing_organization = Column(String, nullable=False)
    issue_date = Column(DateTime, nullable=False)
    expiration_date = Column(DateTime, nullable=True)
    credential_id = Column(String, nullable=True)
    verification_url = Column(String, nullable=True)
    document_url = Column(String, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    worker = relationship("WorkerProfile", back_populates="certifications")
