"""
Application Service.

Submission, listing and status changes for job applications.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from restohire.core.errors import ConflictError, InvalidStateError, NotFoundError
from restohire.models import (
    Application,
    ApplicationStatus,
    Job,
    JobStatus,
    NotificationType,
    Role,
    User,
    WorkerProfile,
)
from restohire.services.accounts import get_restaurant_for_owner, get_worker_profile
from restohire.services.notifications import send_notification

logger = logging.getLogger("applications")


def _load_application(db: Session, application_id: int) -> Optional[Application]:
    return (
        db.query(Application)
        .options(
            joinedload(Application.job).joinedload(Job.restaurant),
            joinedload(Application.worker).joinedload(WorkerProfile.user),
        )
        .filter(Application.id == application_id)
        .first()
    )


def submit_application(
    db: Session,
    job_id: int,
    worker_user_id: int,
    message: Optional[str] = None,
) -> Application:
    """
    Submit a worker's application to a job.

    Checks, in order: the worker profile exists, the job exists, the job is
    ACTIVE, and the worker has not applied before. A duplicate that slips
    past the check is caught by the unique constraint and reported the same
    way.

    Raises:
        NotFoundError: No worker profile for the caller, or no such job
        InvalidStateError: The job is not ACTIVE
        ConflictError: The worker already applied to this job
    """
    worker = db.query(WorkerProfile).filter(WorkerProfile.user_id == worker_user_id).first()
    if not worker:
        raise NotFoundError("Worker profile not found")

    job = db.query(Job).filter(Job.id == job_id).first()
    if not job:
        raise NotFoundError("Job not found")

    if job.status != JobStatus.ACTIVE:
        raise InvalidStateError("This job is no longer accepting applications")

    existing = (
        db.query(Application)
        .filter(Application.job_id == job.id, Application.worker_id == worker.id)
        .first()
    )
    if existing:
        raise ConflictError("You have already applied for this job")

    application = Application(
        job_id=job.id,
        worker_id=worker.id,
        restaurant_id=job.restaurant_id,
        status=ApplicationStatus.PENDING,
        message=message,
    )
    db.add(application)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("You have already applied for this job")

    application_id = application.id
    logger.info(f"Worker {worker.id} applied to job {job.id} (application {application_id})")

    result = send_notification(
        db,
        NotificationType.NEW_APPLICATION,
        job.restaurant.owner_id,
        application_id=application_id,
        worker_name=worker.user.name or "A worker",
        job_title=job.title,
    )
    if not result and not result.skipped:
        logger.warning(f"New application notification failed for application {application_id}")

    return _load_application(db, application_id)


def list_applications(db: Session, user: User) -> list[Application]:
    """Applications visible to the user: its restaurant's for owners, its own for workers."""
    query = db.query(Application).options(
        joinedload(Application.job).joinedload(Job.restaurant),
        joinedload(Application.worker).joinedload(WorkerProfile.user),
    )

    if user.role == Role.RESTAURANT_OWNER:
        restaurant = get_restaurant_for_owner(db, user)
        query = query.filter(Application.restaurant_id == restaurant.id)
    elif user.role == Role.WORKER:
        worker = get_worker_profile(db, user)
        query = query.filter(Application.worker_id == worker.id)
    else:
        raise ValueError(f"Unhandled role: {user.role}")

    return query.order_by(Application.applied_at.desc(), Application.id.desc()).all()


def update_application_status(
    db: Session,
    owner: User,
    application_id: int,
    status: ApplicationStatus,
    response_note: Optional[str] = None,
) -> Application:
    """
    Set an application's status on behalf of the restaurant owner.

    Any status may be set from any other; there is no transition table.
    The worker is notified best-effort after the update is committed.
    """
    restaurant = get_restaurant_for_owner(db, owner)

    application = _load_application(db, application_id)
    if not application or application.restaurant_id != restaurant.id:
        raise NotFoundError("Application not found")

    application.status = status
    application.response_note = response_note
    application.responded_at = datetime.utcnow()
    db.commit()

    logger.info(f"Application {application_id} set to {status.value} by restaurant {restaurant.id}")

    result = send_notification(
        db,
        NotificationType.APPLICATION_STATUS,
        application.worker.user_id,
        application_id=application_id,
        job_title=application.job.title,
        status=status,
    )
    if not result and not result.skipped:
        logger.warning(f"Status notification failed for application {application_id}")

    return _load_application(db, application_id)


def withdraw_application(db: Session, worker_user: User, application_id: int) -> Application:
    """Mark the caller's own application as WITHDRAWN."""
    worker = get_worker_profile(db, worker_user)

    application = _load_application(db, application_id)
    if not application or application.worker_id != worker.id:
        raise NotFoundError("Application not found")

    application.status = ApplicationStatus.WITHDRAWN
    db.commit()

    return _load_application(db, application_id)
