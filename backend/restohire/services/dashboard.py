"""
Dashboard Aggregator.

Read-only roll-ups for the owner and worker dashboards: summary counts,
derived hiring metrics, six-month trends, the recent-activity feed and
the pending-task list.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from restohire.core.config import settings
from restohire.models import (
    Application,
    ApplicationStatus,
    Job,
    JobStatus,
    Role,
    ShiftAssignment,
    ShiftStatus,
    User,
    WorkerProfile,
)
from restohire.services.accounts import get_restaurant_for_owner, get_worker_profile

logger = logging.getLogger("dashboard")

TREND_MONTHS = 6
UPCOMING_SHIFT_DAYS = 7
TASK_JOB_LIMIT = 2

# (label, weight, predicate) - weights add up to 100
PROFILE_SECTIONS = [
    ("Basic Info", 20, lambda p: bool(p.bio)),
    ("Contact Info", 15, lambda p: bool(p.contact_email and p.contact_phone)),
    ("Address", 10, lambda p: bool(p.address and p.city and p.state)),
    ("Profile Picture", 10, lambda p: bool(p.profile_picture_url)),
    ("Skills", 15, lambda p: bool(p.skills)),
    ("Experience", 10, lambda p: bool(p.years_of_experience)),
    ("Hourly Rate", 10, lambda p: p.hourly_rate is not None),
    ("Availability", 10, lambda p: bool(p.availability)),
]


# ============== Helper Functions ==============


def format_time_ago(then: datetime, now: Optional[datetime] = None) -> str:
    """
    Render elapsed time as a relative phrase.

    Units are floored: 90 minutes is "1 hour ago". Anything under a minute
    (or in the future) is "Just now".
    """
    now = now or datetime.utcnow()
    diff_in_minutes = int((now - then).total_seconds() // 60)
    diff_in_hours = diff_in_minutes // 60
    diff_in_days = diff_in_hours // 24

    if diff_in_days > 0:
        return f"{diff_in_days} day{'s' if diff_in_days > 1 else ''} ago"
    if diff_in_hours > 0:
        return f"{diff_in_hours} hour{'s' if diff_in_hours > 1 else ''} ago"
    if diff_in_minutes > 0:
        return f"{diff_in_minutes} minute{'s' if diff_in_minutes > 1 else ''} ago"
    return "Just now"


def _truncate(text: Optional[str], limit: int = 100) -> str:
    text = text or ""
    return f"{text[:limit]}{'...' if len(text) > limit else ''}"


def _count(model, *criteria):
    return select(func.count()).select_from(model).where(*criteria).scalar_subquery()


def _month_keys(now: datetime, months: int = TREND_MONTHS) -> list[tuple[int, int]]:
    """(year, month) pairs for the last ``months`` calendar months, oldest first."""
    keys = []
    year, month = now.year, now.month
    for _ in range(months):
        keys.append((year, month))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(keys))


def _monthly_counts(timestamps: list[datetime], now: datetime) -> list[int]:
    keys = _month_keys(now)
    buckets = {key: 0 for key in keys}
    for ts in timestamps:
        key = (ts.year, ts.month)
        if key in buckets:
            buckets[key] += 1
    return [buckets[key] for key in keys]


def calculate_profile_completion(profile: WorkerProfile) -> int:
    """Weighted percentage of filled-in profile sections."""
    total_weight = sum(weight for _, weight, _ in PROFILE_SECTIONS)
    completed_weight = sum(
        weight for _, weight, is_complete in PROFILE_SECTIONS if is_complete(profile)
    )
    return round(completed_weight / total_weight * 100)


# ============== Stats ==============


def _owner_stats(db: Session, user: User, now: datetime) -> dict[str, Any]:
    restaurant = get_restaurant_for_owner(db, user)
    rid = restaurant.id

    counts = db.execute(
        select(
            _count(Job, Job.restaurant_id == rid).label("total_jobs"),
            _count(Job, Job.restaurant_id == rid, Job.status == JobStatus.ACTIVE).label("active_jobs"),
            _count(Job, Job.restaurant_id == rid, Job.status == JobStatus.FILLED).label("filled_jobs"),
            _count(Application, Application.restaurant_id == rid).label("total_applications"),
            _count(
                Application,
                Application.restaurant_id == rid,
                Application.status == ApplicationStatus.PENDING,
            ).label("pending_applications"),
            _count(
                Application,
                Application.restaurant_id == rid,
                Application.status == ApplicationStatus.ACCEPTED,
            ).label("total_workers"),
            _count(
                ShiftAssignment,
                ShiftAssignment.restaurant_id == rid,
                ShiftAssignment.status == ShiftStatus.SCHEDULED,
            ).label("active_workers"),
        )
    ).one()._mapping

    total_jobs = counts["total_jobs"]
    application_rate = round(counts["total_applications"] / total_jobs, 1) if total_jobs else 0.0
    job_fill_rate = round(counts["filled_jobs"] / total_jobs * 100, 1) if total_jobs else 0.0

    hires = (
        db.query(Application.responded_at, Application.updated_at, Job.created_at)
        .join(Job, Application.job_id == Job.id)
        .filter(
            Application.restaurant_id == rid,
            Application.status == ApplicationStatus.ACCEPTED,
        )
        .all()
    )
    hire_days = [
        ((responded_at or updated_at) - posted_at).total_seconds() / 86400
        for responded_at, updated_at, posted_at in hires
        if (responded_at or updated_at) and posted_at
    ]
    average_hire_time = round(sum(hire_days) / len(hire_days), 1) if hire_days else 0.0

    applied = [
        row[0]
        for row in db.query(Application.applied_at)
        .filter(Application.restaurant_id == rid)
        .all()
        if row[0]
    ]
    hired = [(row[0] or row[1]) for row in hires if (row[0] or row[1])]

    return {
        "total_jobs": total_jobs,
        "active_jobs": counts["active_jobs"],
        "total_applications": counts["total_applications"],
        "pending_applications": counts["pending_applications"],
        "total_workers": counts["total_workers"],
        "active_workers": counts["active_workers"],
        "metrics": {
            "application_rate": application_rate,
            "average_hire_time": average_hire_time,
            "job_fill_rate": job_fill_rate,
        },
        "trends": {
            "applications": _monthly_counts(applied, now),
            "hires": _monthly_counts(hired, now),
        },
    }


def _worker_stats(db: Session, user: User, now: datetime) -> dict[str, Any]:
    worker = get_worker_profile(db, user)
    wid = worker.id

    counts = db.execute(
        select(
            _count(Job, Job.status == JobStatus.ACTIVE).label("active_jobs"),
            _count(Application, Application.worker_id == wid).label("total_applications"),
            _count(
                Application,
                Application.worker_id == wid,
                Application.status == ApplicationStatus.PENDING,
            ).label("pending_applications"),
        )
    ).one()._mapping

    status_counts = {status.value.lower(): 0 for status in ApplicationStatus}
    for app_status, count in (
        db.query(Application.status, func.count(Application.id))
        .filter(Application.worker_id == wid)
        .group_by(Application.status)
        .all()
    ):
        status_counts[app_status.value.lower()] = count

    upcoming = (
        db.query(ShiftAssignment)
        .options(joinedload(ShiftAssignment.job), joinedload(ShiftAssignment.restaurant))
        .filter(
            ShiftAssignment.worker_id == wid,
            ShiftAssignment.start_time >= now,
            ShiftAssignment.end_time <= now + timedelta(days=UPCOMING_SHIFT_DAYS),
        )
        .order_by(ShiftAssignment.start_time.asc())
        .all()
    )
    upcoming_shifts = [
        {
            "id": shift.id,
            "date": shift.start_time.date().isoformat(),
            "start_time": shift.start_time.strftime("%H:%M"),
            "end_time": shift.end_time.strftime("%H:%M"),
            "restaurant": shift.restaurant.name,
            "position": shift.job.title,
            "earnings": shift.pay_amount or 0,
        }
        for shift in upcoming
    ]

    applied = [
        row[0]
        for row in db.query(Application.applied_at).filter(Application.worker_id == wid).all()
        if row[0]
    ]

    return {
        "total_jobs": 0,
        "active_jobs": counts["active_jobs"],
        "total_applications": counts["total_applications"],
        "pending_applications": counts["pending_applications"],
        "total_workers": 0,
        "active_workers": 0,
        "worker_metrics": {
            "profile_completion": calculate_profile_completion(worker),
            "application_statuses": status_counts,
            "upcoming_shifts": upcoming_shifts,
        },
        "trends": {
            "applications": _monthly_counts(applied, now),
        },
    }


def get_stats(db: Session, user: User, now: Optional[datetime] = None) -> dict[str, Any]:
    """
    Role-specific dashboard statistics.

    Raises NotFoundError when the owner has no restaurant or the worker has
    no profile.
    """
    now = now or datetime.utcnow()
    if user.role == Role.RESTAURANT_OWNER:
        return _owner_stats(db, user, now)
    if user.role == Role.WORKER:
        return _worker_stats(db, user, now)
    raise ValueError(f"Unhandled role: {user.role}")


# ============== Activity Feed ==============


def _worker_application_message(app: Application) -> str:
    title = app.job.title
    if app.status == ApplicationStatus.ACCEPTED:
        return f"Your application for {title} was approved"
    if app.status == ApplicationStatus.REJECTED:
        return f"Your application for {title} was declined"
    if app.status == ApplicationStatus.INTERVIEWING:
        return f"You have an interview for {title}"
    return f"You applied for {title} at {app.job.restaurant.name}"


def get_activity(
    db: Session,
    user: User,
    now: Optional[datetime] = None,
    limit: Optional[int] = None,
) -> list[dict[str, Any]]:
    """
    Recent activity, newest first.

    Owners see recent applications and job postings merged together;
    workers see their own applications. The ``id`` is the id of the
    underlying record, so ``(type, id)`` is the unique key of an entry.
    """
    now = now or datetime.utcnow()
    limit = limit or settings.ACTIVITY_FEED_LIMIT
    entries: list[tuple[datetime, dict[str, Any]]] = []

    if user.role == Role.RESTAURANT_OWNER:
        restaurant = get_restaurant_for_owner(db, user)

        applications = (
            db.query(Application)
            .options(
                joinedload(Application.worker).joinedload(WorkerProfile.user),
                joinedload(Application.job),
            )
            .filter(Application.restaurant_id == restaurant.id)
            .order_by(Application.applied_at.desc())
            .limit(limit)
            .all()
        )
        for app in applications:
            entries.append((app.applied_at, {
                "id": app.id,
                "type": "application",
                "message": f"{app.worker.user.name} applied for {app.job.title} position",
                "time": format_time_ago(app.applied_at, now),
                "details": app.message or f"Experience: {app.worker.years_of_experience or 0} years",
                "link": f"/dashboard/applications?id={app.id}",
            }))

        jobs = (
            db.query(Job)
            .filter(Job.restaurant_id == restaurant.id)
            .order_by(Job.created_at.desc())
            .limit(limit)
            .all()
        )
        for job in jobs:
            entries.append((job.created_at, {
                "id": job.id,
                "type": "job",
                "message": f"{job.title} position was posted",
                "time": format_time_ago(job.created_at, now),
                "details": _truncate(job.description),
                "link": f"/dashboard/jobs?id={job.id}",
            }))

    elif user.role == Role.WORKER:
        worker = get_worker_profile(db, user)

        applications = (
            db.query(Application)
            .options(joinedload(Application.job).joinedload(Job.restaurant))
            .filter(Application.worker_id == worker.id)
            .order_by(Application.applied_at.desc())
            .limit(limit)
            .all()
        )
        for app in applications:
            entries.append((app.applied_at, {
                "id": app.id,
                "type": "application",
                "message": _worker_application_message(app),
                "time": format_time_ago(app.applied_at, now),
                "details": app.message or f"Status: {app.status.value}",
                "link": f"/dashboard/applications?id={app.id}",
            }))

    else:
        raise ValueError(f"Unhandled role: {user.role}")

    entries.sort(key=lambda entry: entry[0], reverse=True)
    return [item for _, item in entries[:limit]]


# ============== Tasks ==============


def _task(task_id: str, title: str, priority: str, due_date: datetime) -> dict[str, Any]:
    return {
        "id": task_id,
        "title": title,
        "completed": False,
        "priority": priority,
        "due_date": due_date,
    }


def get_tasks(db: Session, user: User, now: Optional[datetime] = None) -> list[dict[str, Any]]:
    """
    Pending work derived from the caller's data.

    Owners: applications waiting for review, candidates for up to
    ``TASK_JOB_LIMIT`` active jobs, and shifts in the coming week.
    Workers: an incomplete profile, pending applications, shifts in the
    next two days and a standing availability reminder.
    """
    now = now or datetime.utcnow()
    week_ahead = now + timedelta(days=UPCOMING_SHIFT_DAYS)
    tasks: list[dict[str, Any]] = []

    if user.role == Role.RESTAURANT_OWNER:
        restaurant = get_restaurant_for_owner(db, user)
        rid = restaurant.id

        counts = db.execute(
            select(
                _count(
                    Application,
                    Application.restaurant_id == rid,
                    Application.status == ApplicationStatus.PENDING,
                ).label("pending_applications"),
                _count(
                    ShiftAssignment,
                    ShiftAssignment.restaurant_id == rid,
                    ShiftAssignment.start_time >= now,
                    ShiftAssignment.end_time <= week_ahead,
                ).label("upcoming_shifts"),
            )
        ).one()._mapping

        pending = counts["pending_applications"]
        if pending:
            tasks.append(_task(
                "review-applications",
                f"Review {pending} pending application{'s' if pending > 1 else ''}",
                "high",
                now + timedelta(days=2),
            ))

        active_jobs = (
            db.query(Job)
            .filter(Job.restaurant_id == rid, Job.status == JobStatus.ACTIVE)
            .order_by(Job.created_at.desc(), Job.id.desc())
            .limit(TASK_JOB_LIMIT)
            .all()
        )
        for job in active_jobs:
            tasks.append(_task(
                f"job-task-{job.id}",
                f"Review candidates for {job.title} position",
                "medium",
                now + timedelta(days=3),
            ))

        upcoming = counts["upcoming_shifts"]
        if upcoming:
            tasks.append(_task(
                "shift-task-1",
                f"Prepare for {upcoming} upcoming shift{'s' if upcoming > 1 else ''} this week",
                "high",
                now + timedelta(days=1),
            ))
        return tasks

    if user.role == Role.WORKER:
        worker = get_worker_profile(db, user)

        if calculate_profile_completion(worker) < 100:
            tasks.append(_task(
                "profile-task-1",
                "Complete your profile information",
                "high",
                now + timedelta(days=1),
            ))

        pending = (
            db.query(Application)
            .filter(
                Application.worker_id == worker.id,
                Application.status == ApplicationStatus.PENDING,
            )
            .count()
        )
        if pending:
            tasks.append(_task(
                "app-task-1",
                f"Follow up on {pending} pending application{'s' if pending > 1 else ''}",
                "medium",
                now + timedelta(days=3),
            ))

        shifts = (
            db.query(ShiftAssignment)
            .options(joinedload(ShiftAssignment.job), joinedload(ShiftAssignment.restaurant))
            .filter(
                ShiftAssignment.worker_id == worker.id,
                ShiftAssignment.start_time >= now,
                ShiftAssignment.end_time <= week_ahead,
            )
            .order_by(ShiftAssignment.start_time.asc())
            .all()
        )
        for shift in shifts:
            days_until = (shift.start_time - now).days
            if days_until > 2:
                continue
            tasks.append(_task(
                f"shift-task-{shift.id}",
                f"Prepare for {shift.job.title} shift at {shift.restaurant.name}",
                "high" if days_until <= 1 else "medium",
                shift.start_time,
            ))

        tasks.append(_task(
            "general-task-1",
            "Update availability for next month",
            "low",
            now + timedelta(days=7),
        ))
        return tasks

    raise ValueError(f"Unhandled role: {user.role}")
