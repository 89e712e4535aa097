"""
Job posting endpoints.

Public listing of active jobs, search and recommendations, job creation
and status changes for owners, and per-user saved jobs.
"""

import logging
from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field, model_validator
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload, selectinload

from restohire.api.v1.auth import ensure_role, get_current_user
from restohire.core.errors import NotFoundError
from restohire.db.session import get_db
from restohire.models import (
    Application,
    Job,
    JobStatus,
    NotificationType,
    Role,
    SavedJob,
    User,
    WorkerProfile,
)
from restohire.services.accounts import get_restaurant_for_owner
from restohire.services.jobs import recommend_jobs, search_jobs
from restohire.services.notifications import send_notification

logger = logging.getLogger("jobs")

router = APIRouter()


# ============== Pydantic Schemas ==============


class JobCreate(BaseModel):
    """Schema for a new job posting."""

    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    requirements: Optional[str] = None
    hourly_rate: float = Field(gt=0)
    start_date: datetime
    end_date: datetime
    max_workers: int = Field(default=1, gt=0)

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class JobStatusUpdate(BaseModel):
    status: JobStatus


class RestaurantSummary(BaseModel):
    id: int
    name: str
    address: Optional[str] = None


class JobResponse(BaseModel):
    id: int
    title: str
    description: str
    requirements: Optional[str] = None
    hourly_rate: float
    start_date: datetime
    end_date: datetime
    max_workers: int
    status: JobStatus
    created_at: datetime
    restaurant: RestaurantSummary
    application_count: int = 0
    is_saved: bool = False


class SavedJobRequest(BaseModel):
    job_id: int
    saved: bool


class Pagination(BaseModel):
    page: int
    limit: int
    total_count: int
    total_pages: int


class JobSearchResponse(BaseModel):
    jobs: list[JobResponse]
    pagination: Pagination


def _job_response(job: Job, application_count: int = 0, is_saved: bool = False) -> JobResponse:
    return JobResponse(
        id=job.id,
        title=job.title,
        description=job.description,
        requirements=job.requirements,
        hourly_rate=job.hourly_rate,
        start_date=job.start_date,
        end_date=job.end_date,
        max_workers=job.max_workers or 1,
        status=job.status,
        created_at=job.created_at,
        restaurant=RestaurantSummary(
            id=job.restaurant.id,
            name=job.restaurant.name,
            address=job.restaurant.address,
        ),
        application_count=application_count,
        is_saved=is_saved,
    )


def _active_jobs_with_counts(db: Session, job_ids: Optional[list[int]] = None):
    query = (
        db.query(Job, func.count(Application.id))
        .outerjoin(Application, Application.job_id == Job.id)
        .options(selectinload(Job.restaurant))
        .filter(Job.status == JobStatus.ACTIVE)
    )
    if job_ids is not None:
        query = query.filter(Job.id.in_(job_ids))
    return query.group_by(Job.id).order_by(Job.created_at.desc(), Job.id.desc()).all()


def _saved_job_ids(db: Session, user: User) -> set[int]:
    return {
        row[0]
        for row in db.query(SavedJob.job_id).filter(SavedJob.user_id == user.id).all()
    }


# ============== API Endpoints ==============


@router.get("", response_model=list[JobResponse])
async def list_jobs(db: Session = Depends(get_db)):
    """List all ACTIVE jobs, newest first, with their application counts."""
    return [_job_response(job, count) for job, count in _active_jobs_with_counts(db)]


@router.post("", response_model=JobResponse)
async def create_job(
    request: JobCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Publish a job for the owner's restaurant.

    Workers that list at least one skill are told about it, best-effort.
    """
    ensure_role(current_user, Role.RESTAURANT_OWNER, "Only restaurant owners can post jobs")
    restaurant = get_restaurant_for_owner(db, current_user)

    job = Job(restaurant_id=restaurant.id, status=JobStatus.ACTIVE, **request.model_dump())
    db.add(job)
    db.commit()
    db.refresh(job)

    job_id, job_title, restaurant_name = job.id, job.title, restaurant.name
    recipients = [
        profile.user_id
        for profile in db.query(WorkerProfile).all()
        if profile.skills
    ]
    for user_id in recipients:
        result = send_notification(
            db,
            NotificationType.NEW_JOB,
            user_id,
            job_id=job_id,
            job_title=job_title,
            restaurant_name=restaurant_name,
        )
        if not result and not result.skipped:
            logger.warning(f"New job notification failed for user {user_id}")

    job = db.query(Job).options(joinedload(Job.restaurant)).filter(Job.id == job_id).first()
    return _job_response(job)


@router.get("/search", response_model=JobSearchResponse)
async def search(
    query: Optional[str] = None,
    location: Optional[str] = None,
    min_hourly_rate: float = Query(default=0, ge=0),
    max_hourly_rate: float = Query(default=1000, ge=0),
    job_types: Optional[str] = Query(default=None, description="Comma separated title keywords"),
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    sort_by: Literal["relevance", "date", "hourly_rate", "distance"] = "relevance",
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Search ACTIVE jobs with text, pay, date and location filters.

    ``distance`` is accepted but sorts like ``relevance`` (newest first).
    """
    types = [t.strip() for t in job_types.split(",")] if job_types else []
    result = search_jobs(
        db,
        query=query,
        location=location,
        min_hourly_rate=min_hourly_rate,
        max_hourly_rate=max_hourly_rate,
        job_types=types,
        start_date=start_date,
        end_date=end_date,
        sort_by=sort_by,
        page=page,
        limit=limit,
    )
    saved_ids = _saved_job_ids(db, current_user)
    return JobSearchResponse(
        jobs=[
            _job_response(job, count, is_saved=job.id in saved_ids)
            for job, count in result["jobs"]
        ],
        pagination=Pagination(**result["pagination"]),
    )


@router.get("/recommendations", response_model=list[JobResponse])
async def recommendations(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Skill-matched jobs for workers, same-cuisine jobs for owners."""
    saved_ids = _saved_job_ids(db, current_user)
    return [
        _job_response(job, count, is_saved=job.id in saved_ids)
        for job, count in recommend_jobs(db, current_user)
    ]


@router.get("/saved", response_model=list[JobResponse])
async def list_saved_jobs(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """The caller's saved jobs that are still ACTIVE."""
    saved_ids = list(_saved_job_ids(db, current_user))
    if not saved_ids:
        return []
    return [
        _job_response(job, count, is_saved=True)
        for job, count in _active_jobs_with_counts(db, saved_ids)
    ]


@router.post("/saved")
async def toggle_saved_job(
    request: SavedJobRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Save or unsave a job. Saving twice is a no-op."""
    job = db.query(Job).filter(Job.id == request.job_id).first()
    if not job:
        raise NotFoundError("Job not found")

    existing = (
        db.query(SavedJob)
        .filter(SavedJob.user_id == current_user.id, SavedJob.job_id == job.id)
        .first()
    )
    if request.saved and not existing:
        db.add(SavedJob(user_id=current_user.id, job_id=job.id))
    elif not request.saved and existing:
        db.delete(existing)
    db.commit()

    return {"success": True, "saved": request.saved}


@router.patch("/{job_id}", response_model=JobResponse)
async def update_job_status(
    job_id: int,
    request: JobStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Change the status of one of the owner's jobs."""
    ensure_role(current_user, Role.RESTAURANT_OWNER, "Only restaurant owners can update jobs")
    restaurant = get_restaurant_for_owner(db, current_user)

    job = db.query(Job).filter(Job.id == job_id).first()
    if not job or job.restaurant_id != restaurant.id:
        raise NotFoundError("Job not found")

    job.status = request.status
    db.commit()
    db.refresh(job)

    application_count = db.query(Application).filter(Application.job_id == job.id).count()
    return _job_response(job, application_count)
