"""
Review endpoints.

Restaurant owners rate workers and workers rate restaurants. Each side
keeps a single review per pair; posting again edits it.
"""

import logging
from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session, joinedload

from restohire.api.v1.auth import ensure_role, get_current_user
from restohire.core.errors import NotFoundError
from restohire.db.session import get_db
from restohire.models import (
    NotificationType,
    Restaurant,
    Review,
    Role,
    User,
    WorkerProfile,
)
from restohire.services.accounts import get_restaurant_for_owner, get_worker_profile
from restohire.services.notifications import send_notification

logger = logging.getLogger("reviews")

router = APIRouter()

TargetType = Literal["worker", "restaurant"]


# ============== Pydantic Schemas ==============


class ReviewCreate(BaseModel):
    target_type: TargetType
    target_id: int
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = None
    is_public: bool = True


class ReviewResponse(BaseModel):
    id: int
    target_type: str
    restaurant_id: int
    restaurant_name: str
    worker_id: int
    worker_name: Optional[str] = None
    rating: int
    comment: Optional[str] = None
    is_public: bool
    created_at: datetime


class ReviewListResponse(BaseModel):
    reviews: list[ReviewResponse]
    average_rating: float
    total_reviews: int


def _to_response(review: Review) -> ReviewResponse:
    return ReviewResponse(
        id=review.id,
        target_type=review.target_type,
        restaurant_id=review.restaurant_id,
        restaurant_name=review.restaurant.name,
        worker_id=review.worker_id,
        worker_name=review.worker.user.name if review.worker.user else None,
        rating=review.rating,
        comment=review.comment,
        is_public=bool(review.is_public),
        created_at=review.created_at,
    )


def _review_query(db: Session):
    return db.query(Review).options(
        joinedload(Review.restaurant),
        joinedload(Review.worker).joinedload(WorkerProfile.user),
    )


# ============== API Endpoints ==============


@router.get("", response_model=ReviewListResponse)
async def list_reviews(
    target_type: TargetType,
    target_id: int,
    db: Session = Depends(get_db),
):
    """Public reviews of one worker or restaurant with the average rating."""
    query = _review_query(db).filter(Review.target_type == target_type, Review.is_public.is_(True))
    if target_type == "worker":
        query = query.filter(Review.worker_id == target_id)
    else:
        query = query.filter(Review.restaurant_id == target_id)

    reviews = query.order_by(Review.created_at.desc(), Review.id.desc()).all()
    average = sum(r.rating for r in reviews) / len(reviews) if reviews else 0

    return ReviewListResponse(
        reviews=[_to_response(r) for r in reviews],
        average_rating=round(average, 1),
        total_reviews=len(reviews),
    )


@router.post("", response_model=ReviewResponse)
async def create_review(
    request: ReviewCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Create or edit the caller's review of a worker or restaurant.

    The reviewed party is notified the first time only.
    """
    if request.target_type == "worker":
        ensure_role(current_user, Role.RESTAURANT_OWNER, "Only restaurant owners can review workers")
        worker = db.query(WorkerProfile).filter(WorkerProfile.id == request.target_id).first()
        if not worker:
            raise NotFoundError("Worker not found")
        restaurant = get_restaurant_for_owner(db, current_user)
        recipient_user_id = worker.user_id
        reviewer_name = restaurant.name
    else:
        ensure_role(current_user, Role.WORKER, "Only workers can review restaurants")
        restaurant = db.query(Restaurant).filter(Restaurant.id == request.target_id).first()
        if not restaurant:
            raise NotFoundError("Restaurant not found")
        worker = get_worker_profile(db, current_user)
        recipient_user_id = restaurant.owner_id
        reviewer_name = current_user.name or "A worker"

    review = (
        db.query(Review)
        .filter(
            Review.restaurant_id == restaurant.id,
            Review.worker_id == worker.id,
            Review.target_type == request.target_type,
        )
        .first()
    )
    is_new = review is None
    if is_new:
        review = Review(
            restaurant_id=restaurant.id,
            worker_id=worker.id,
            author_id=current_user.id,
            target_type=request.target_type,
        )
        db.add(review)

    review.rating = request.rating
    review.comment = request.comment
    review.is_public = request.is_public
    db.commit()

    review_id, rating = review.id, review.rating

    if is_new:
        result = send_notification(
            db,
            NotificationType.NEW_REVIEW,
            recipient_user_id,
            review_id=review_id,
            reviewer_name=reviewer_name,
            rating=rating,
        )
        if not result and not result.skipped:
            logger.warning(f"Review notification failed for review {review_id}")

    return _to_response(_review_query(db).filter(Review.id == review_id).first())
