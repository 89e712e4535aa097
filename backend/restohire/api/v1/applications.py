"""
Job application endpoints.

Workers submit and withdraw applications; restaurant owners review them.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from restohire.api.v1.auth import ensure_role, get_current_user
from restohire.db.session import get_db
from restohire.models import Application, ApplicationStatus, Role, User
from restohire.services.applications import (
    list_applications,
    submit_application,
    update_application_status,
    withdraw_application,
)

router = APIRouter()


# ============== Pydantic Schemas ==============


class ApplicationCreate(BaseModel):
    job_id: int
    message: Optional[str] = None


class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus
    response_note: Optional[str] = None


class ApplicationResponse(BaseModel):
    """Application with the job, restaurant and worker fields the UI shows."""

    id: int
    job_id: int
    job_title: str
    restaurant_id: int
    restaurant_name: str
    worker_id: int
    worker_user_id: int
    worker_name: Optional[str] = None
    worker_email: Optional[str] = None
    status: ApplicationStatus
    message: Optional[str] = None
    response_note: Optional[str] = None
    applied_at: Optional[datetime] = None
    responded_at: Optional[datetime] = None


def _to_response(application: Application) -> ApplicationResponse:
    worker_user = application.worker.user
    return ApplicationResponse(
        id=application.id,
        job_id=application.job_id,
        job_title=application.job.title,
        restaurant_id=application.restaurant_id,
        restaurant_name=application.job.restaurant.name,
        worker_id=application.worker_id,
        worker_user_id=application.worker.user_id,
        worker_name=worker_user.name if worker_user else None,
        worker_email=worker_user.email if worker_user else None,
        status=application.status,
        message=application.message,
        response_note=application.response_note,
        applied_at=application.applied_at,
        responded_at=application.responded_at,
    )


# ============== API Endpoints ==============


@router.post("", response_model=ApplicationResponse)
async def create_application(
    request: ApplicationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Apply to an ACTIVE job.

    A second application to the same job is rejected with 400.
    """
    ensure_role(current_user, Role.WORKER, "Only workers can apply for jobs")
    application = submit_application(db, request.job_id, current_user.id, request.message)
    return _to_response(application)


@router.get("", response_model=list[ApplicationResponse])
async def get_applications(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Owners see their restaurant's applications, workers their own."""
    return [_to_response(app) for app in list_applications(db, current_user)]


@router.patch("/{application_id}", response_model=ApplicationResponse)
async def update_application(
    application_id: int,
    request: ApplicationStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Accept, reject, interview or otherwise update an application."""
    ensure_role(current_user, Role.RESTAURANT_OWNER, "Only restaurant owners can update applications")
    application = update_application_status(
        db,
        current_user,
        application_id,
        request.status,
        request.response_note,
    )
    return _to_response(application)


@router.post("/{application_id}/withdraw", response_model=ApplicationResponse)
async def withdraw(
    application_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_role(current_user, Role.WORKER, "Only workers can withdraw applications")
    return _to_response(withdraw_application(db, current_user, application_id))
