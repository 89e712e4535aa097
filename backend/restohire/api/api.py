"""
API Router Aggregator.

Combines all v1 API routers into a single router for the main app.
"""

from fastapi import APIRouter

from restohire.api.v1 import (
    applications,
    auth,
    dashboard,
    jobs,
    messages,
    notifications,
    restaurant,
    reviews,
    shifts,
    training,
    worker,
)

api_router = APIRouter()

# Include all v1 routers with their prefixes and tags
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(restaurant.router, prefix="/restaurant", tags=["Restaurant"])
api_router.include_router(worker.router, prefix="/worker", tags=["Worker"])
api_router.include_router(jobs.router, prefix="/jobs", tags=["Jobs"])
api_router.include_router(applications.router, prefix="/applications", tags=["Applications"])
api_router.include_router(messages.router, prefix="/messages", tags=["Messages"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
api_router.include_router(shifts.router, prefix="/shifts", tags=["Shifts"])
api_router.include_router(reviews.router, prefix="/reviews", tags=["Reviews"])
api_router.include_router(training.router, prefix="/training", tags=["Training"])
