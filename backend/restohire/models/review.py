from datetime import datetime

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from restohire.db.base import Base


class Review(Base):
    """
    Rating left between a restaurant and a worker.

    target_type "worker": the restaurant reviewed the worker.
    target_type "restaurant": the worker reviewed the restaurant.
    """

    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("restaurant_id", "worker_id", "target_type", name="uq_reviews_pair"),
    )

    id = Column(Integer, primary_key=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=False, index=True)
    worker_id = Column(Integer, ForeignKey("worker_profiles.id"), nullable=False, index=True)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    target_type = Column(String, nullable=False)
    rating = Column(Integer, nullable=False)  # 1-5
    comment = Column(Text, nullable=True)
    is_public = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    restaurant = relationship("Restaurant")
    worker = relationship("WorkerProfile")
    author = relationship("User")
