"""
Dashboard API endpoints.

Role-specific statistics, the recent-activity feed and pending tasks.
"""

from datetime import datetime
from typing import Any, Literal, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from restohire.api.v1.auth import get_current_user
from restohire.db.session import get_db
from restohire.models import User
from restohire.services.dashboard import get_activity, get_stats, get_tasks

router = APIRouter()


# ============== Pydantic Schemas ==============


class OwnerMetrics(BaseModel):
    application_rate: float
    average_hire_time: float
    job_fill_rate: float


class WorkerMetrics(BaseModel):
    profile_completion: int
    application_statuses: dict[str, int]
    upcoming_shifts: list[dict[str, Any]]


class DashboardStats(BaseModel):
    """Summary counts; owners also get ``metrics``, workers ``worker_metrics``."""

    total_jobs: int
    active_jobs: int
    total_applications: int
    pending_applications: int
    total_workers: int
    active_workers: int
    metrics: Optional[OwnerMetrics] = None
    worker_metrics: Optional[WorkerMetrics] = None
    trends: dict[str, list[int]] = {}


class ActivityItem(BaseModel):
    """One feed entry. ``id`` is only unique together with ``type``."""

    id: int
    type: str
    message: str
    time: str
    details: Optional[str] = None
    link: Optional[str] = None


class Task(BaseModel):
    id: str
    title: str
    completed: bool = False
    priority: Literal["low", "medium", "high"]
    due_date: datetime


# ============== API Endpoints ==============


@router.get("/stats", response_model=DashboardStats, response_model_exclude_none=True)
async def dashboard_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return get_stats(db, current_user)


@router.get("/activity", response_model=list[ActivityItem])
async def dashboard_activity(
    limit: Optional[int] = Query(default=None, ge=1, le=50),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Newest activity first, capped at ``limit`` entries."""
    return get_activity(db, current_user, limit=limit)


@router.get("/tasks", response_model=list[Task])
async def dashboard_tasks(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return get_tasks(db, current_user)
