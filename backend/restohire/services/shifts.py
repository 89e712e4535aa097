"""
Shift scheduling and reminders.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from restohire.core.config import settings
from restohire.core.errors import InvalidInputError, NotFoundError
from restohire.models import (
    Job,
    NotificationType,
    Role,
    ShiftAssignment,
    ShiftStatus,
    User,
    WorkerProfile,
)
from restohire.services.accounts import get_restaurant_for_owner, get_worker_profile
from restohire.services.notifications import send_notification

logger = logging.getLogger("shifts")


def _shift_query(db: Session):
    return db.query(ShiftAssignment).options(
        joinedload(ShiftAssignment.job),
        joinedload(ShiftAssignment.restaurant),
        joinedload(ShiftAssignment.worker).joinedload(WorkerProfile.user),
    )


def create_shift(
    db: Session,
    owner: User,
    job_id: int,
    worker_id: int,
    start_time: datetime,
    end_time: datetime,
    pay_amount: Optional[float] = None,
) -> ShiftAssignment:
    """Book a worker onto a shift for one of the owner's jobs."""
    restaurant = get_restaurant_for_owner(db, owner)

    job = db.query(Job).filter(Job.id == job_id).first()
    if not job or job.restaurant_id != restaurant.id:
        raise NotFoundError("Job not found")

    worker = db.query(WorkerProfile).filter(WorkerProfile.id == worker_id).first()
    if not worker:
        raise NotFoundError("Worker not found")

    if end_time <= start_time:
        raise InvalidInputError("Shift must end after it starts")

    shift = ShiftAssignment(
        job_id=job.id,
        worker_id=worker.id,
        restaurant_id=restaurant.id,
        start_time=start_time,
        end_time=end_time,
        pay_amount=pay_amount,
        status=ShiftStatus.SCHEDULED,
    )
    db.add(shift)
    db.commit()

    logger.info(f"Shift {shift.id} scheduled for worker {worker.id} on job {job.id}")
    return _shift_query(db).filter(ShiftAssignment.id == shift.id).first()


def list_shifts(db: Session, user: User) -> list[ShiftAssignment]:
    query = _shift_query(db)
    if user.role == Role.RESTAURANT_OWNER:
        restaurant = get_restaurant_for_owner(db, user)
        query = query.filter(ShiftAssignment.restaurant_id == restaurant.id)
    elif user.role == Role.WORKER:
        worker = get_worker_profile(db, user)
        query = query.filter(ShiftAssignment.worker_id == worker.id)
    else:
        raise ValueError(f"Unhandled role: {user.role}")
    return query.order_by(ShiftAssignment.start_time.asc()).all()


def send_shift_reminders(db: Session, owner: User, now: Optional[datetime] = None) -> int:
    """
    Remind workers of the owner's SCHEDULED shifts starting within the
    reminder window. Returns how many reminders were stored.
    """
    now = now or datetime.utcnow()
    restaurant = get_restaurant_for_owner(db, owner)
    window_end = now + timedelta(hours=settings.SHIFT_REMINDER_WINDOW_HOURS)

    shifts = (
        _shift_query(db)
        .filter(
            ShiftAssignment.restaurant_id == restaurant.id,
            ShiftAssignment.status == ShiftStatus.SCHEDULED,
            ShiftAssignment.start_time >= now,
            ShiftAssignment.start_time <= window_end,
        )
        .all()
    )
    reminders = [
        (shift.id, shift.worker.user_id, shift.job.title, shift.restaurant.name, shift.start_time)
        for shift in shifts
    ]

    sent = 0
    for shift_id, user_id, job_title, restaurant_name, start_time in reminders:
        result = send_notification(
            db,
            NotificationType.SHIFT_REMINDER,
            user_id,
            shift_id=shift_id,
            job_title=job_title,
            restaurant_name=restaurant_name,
            start_time=start_time,
        )
        if result:
            sent += 1
        elif not result.skipped:
            logger.warning(f"Shift reminder failed for shift {shift_id}")

    logger.info(f"Sent {sent} of {len(reminders)} shift reminders for restaurant {restaurant.id}")
    return sent
