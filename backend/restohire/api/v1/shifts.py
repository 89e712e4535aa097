"""
Shift assignment endpoints.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from restohire.api.v1.auth import ensure_role, get_current_user
from restohire.db.session import get_db
from restohire.models import Role, ShiftAssignment, ShiftStatus, User
from restohire.services.shifts import create_shift, list_shifts, send_shift_reminders

router = APIRouter()


# ============== Pydantic Schemas ==============


class ShiftCreate(BaseModel):
    job_id: int
    worker_id: int
    start_time: datetime
    end_time: datetime
    pay_amount: Optional[float] = Field(default=None, ge=0)


class ShiftResponse(BaseModel):
    id: int
    job_id: int
    job_title: str
    worker_id: int
    worker_name: Optional[str] = None
    restaurant_id: int
    restaurant_name: str
    start_time: datetime
    end_time: datetime
    pay_amount: Optional[float] = None
    status: ShiftStatus


def _to_response(shift: ShiftAssignment) -> ShiftResponse:
    return ShiftResponse(
        id=shift.id,
        job_id=shift.job_id,
        job_title=shift.job.title,
        worker_id=shift.worker_id,
        worker_name=shift.worker.user.name if shift.worker.user else None,
        restaurant_id=shift.restaurant_id,
        restaurant_name=shift.restaurant.name,
        start_time=shift.start_time,
        end_time=shift.end_time,
        pay_amount=shift.pay_amount,
        status=shift.status,
    )


# ============== API Endpoints ==============


@router.post("", response_model=ShiftResponse, status_code=status.HTTP_201_CREATED)
async def schedule_shift(
    request: ShiftCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_role(current_user, Role.RESTAURANT_OWNER, "Only restaurant owners can schedule shifts")
    shift = create_shift(
        db,
        current_user,
        job_id=request.job_id,
        worker_id=request.worker_id,
        start_time=request.start_time,
        end_time=request.end_time,
        pay_amount=request.pay_amount,
    )
    return _to_response(shift)


@router.get("", response_model=list[ShiftResponse])
async def get_shifts(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Restaurant shifts for owners, the caller's own shifts for workers."""
    return [_to_response(shift) for shift in list_shifts(db, current_user)]


@router.post("/reminders")
async def trigger_reminders(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Send reminders for the restaurant's shifts starting soon."""
    ensure_role(current_user, Role.RESTAURANT_OWNER, "Only restaurant owners can send shift reminders")
    return {"sent": send_shift_reminders(db, current_user)}
