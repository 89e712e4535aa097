"""
Job discovery.

Filtered, paginated search over ACTIVE jobs and per-role recommendations.
Both return ``(job, application_count)`` pairs so the router can render
them the same way as the plain listing.
"""

import logging
import math
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session, selectinload

from restohire.models import (
    Application,
    Job,
    JobStatus,
    Location,
    Restaurant,
    Role,
    User,
)
from restohire.services.accounts import get_restaurant_for_owner, get_worker_profile

logger = logging.getLogger("jobs")

SORT_OPTIONS = ("relevance", "date", "hourly_rate", "distance")
RECOMMENDATION_LIMIT = 6


def _with_counts(db: Session, filters: list, order_by: list):
    return (
        db.query(Job, func.count(Application.id))
        .outerjoin(Application, Application.job_id == Job.id)
        .options(selectinload(Job.restaurant))
        .filter(*filters)
        .group_by(Job.id)
        .order_by(*order_by)
    )


def _location_filter(location: str):
    """Plain text match on the restaurant address and its branch locations."""
    pattern = f"%{location}%"
    return Job.restaurant.has(
        or_(
            Restaurant.address.ilike(pattern),
            Restaurant.city.ilike(pattern),
            Restaurant.state.ilike(pattern),
            Restaurant.zip_code.ilike(pattern),
            Restaurant.locations.any(
                or_(
                    Location.city.ilike(pattern),
                    Location.state.ilike(pattern),
                    Location.zip_code.ilike(pattern),
                )
            ),
        )
    )


def search_jobs(
    db: Session,
    query: Optional[str] = None,
    location: Optional[str] = None,
    min_hourly_rate: float = 0,
    max_hourly_rate: float = 1000,
    job_types: Iterable[str] = (),
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    sort_by: str = "relevance",
    page: int = 1,
    limit: int = 20,
) -> dict:
    """
    Search ACTIVE jobs.

    ``query`` matches title or description, each of ``job_types`` matches
    the title; a job passes when any of those text terms hits. ``start_date``
    and ``end_date`` bound the job's own dates. ``relevance`` and
    ``distance`` both fall back to newest first.

    Returns ``{"jobs": [(job, count), ...], "pagination": {...}}``.
    """
    filters = [
        Job.status == JobStatus.ACTIVE,
        Job.hourly_rate >= min_hourly_rate,
        Job.hourly_rate <= max_hourly_rate,
    ]

    text_terms = []
    if query:
        pattern = f"%{query}%"
        text_terms += [Job.title.ilike(pattern), Job.description.ilike(pattern)]
    text_terms += [Job.title.ilike(f"%{job_type}%") for job_type in job_types if job_type]
    if text_terms:
        filters.append(or_(*text_terms))

    if start_date:
        filters.append(Job.start_date >= start_date)
    if end_date:
        filters.append(Job.end_date <= end_date)
    if location:
        filters.append(_location_filter(location))

    if sort_by == "date":
        order_by = [Job.start_date.asc(), Job.id.asc()]
    elif sort_by == "hourly_rate":
        order_by = [Job.hourly_rate.desc(), Job.id.desc()]
    else:
        order_by = [Job.created_at.desc(), Job.id.desc()]

    total_count = db.query(func.count(Job.id)).filter(*filters).scalar()
    rows = _with_counts(db, filters, order_by).offset((page - 1) * limit).limit(limit).all()

    return {
        "jobs": rows,
        "pagination": {
            "page": page,
            "limit": limit,
            "total_count": total_count,
            "total_pages": math.ceil(total_count / limit),
        },
    }


def recommend_jobs(db: Session, user: User, limit: int = RECOMMENDATION_LIMIT):
    """
    Suggested ACTIVE jobs for the caller.

    Workers get jobs whose title or description mentions one of their
    skills, or whose title matches a job they applied to before. Jobs
    they already applied to are left out. Best paid first.

    Owners get other restaurants' jobs with the same cuisine type, newest
    first.
    """
    if user.role == Role.WORKER:
        worker = get_worker_profile(db, user)

        terms = []
        for skill in worker.skills or []:
            pattern = f"%{skill.lower()}%"
            terms.append(or_(Job.title.ilike(pattern), Job.description.ilike(pattern)))
        applied_titles = {
            title.lower()
            for (title,) in db.query(Job.title)
            .join(Application, Application.job_id == Job.id)
            .filter(Application.worker_id == worker.id)
            .all()
        }
        terms += [Job.title.ilike(f"%{title}%") for title in sorted(applied_titles)]

        if not terms:
            return []

        filters = [
            Job.status == JobStatus.ACTIVE,
            or_(*terms),
            ~Job.applications.any(Application.worker_id == worker.id),
        ]
        order_by = [Job.hourly_rate.desc(), Job.created_at.desc(), Job.id.desc()]
        return _with_counts(db, filters, order_by).limit(limit).all()

    if user.role == Role.RESTAURANT_OWNER:
        restaurant = get_restaurant_for_owner(db, user)
        filters = [
            Job.status == JobStatus.ACTIVE,
            Job.restaurant.has(
                and_(
                    Restaurant.cuisine_type == restaurant.cuisine_type,
                    Restaurant.id != restaurant.id,
                )
            ),
        ]
        order_by = [Job.created_at.desc(), Job.id.desc()]
        return _with_counts(db, filters, order_by).limit(limit).all()

    logger.warning(f"No recommendations for role {user.role}")
    return []
