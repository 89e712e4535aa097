"""
Training API endpoints.

Module catalogue, per-module progress and material viewing/progress updates.
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from restohire.api.v1.auth import get_current_user
from restohire.db.session import get_db
from restohire.models import ProgressStatus, Role, User
from restohire.services.training import (
    get_module_with_progress,
    list_modules,
    open_material,
    record_material_progress,
)

router = APIRouter()


# ============== Pydantic Schemas ==============


class MaterialProgressUpdate(BaseModel):
    status: Optional[ProgressStatus] = None
    time_spent_minutes: Optional[int] = Field(default=None, ge=0)
    score: Optional[float] = Field(default=None, ge=0, le=100)


# ============== API Endpoints ==============


@router.get("/modules")
async def get_modules(
    target_role: Optional[Role] = None,
    is_required: Optional[bool] = None,
    completed: Optional[bool] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[dict[str, Any]]:
    """Modules for ``target_role`` (default: the caller's role), in display order."""
    return list_modules(
        db,
        current_user,
        target_role=target_role,
        is_required=is_required,
        completed=completed,
    )


@router.get("/modules/{module_id}")
async def get_module(
    module_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict[str, Any]:
    """Module detail with the caller's progress on each material."""
    return get_module_with_progress(db, module_id, current_user.id)


@router.get("/materials/{material_id}")
async def get_material(
    material_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict[str, Any]:
    return open_material(db, material_id, current_user)


@router.put("/materials/{material_id}")
async def update_material_progress(
    material_id: int,
    request: MaterialProgressUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict[str, Any]:
    return record_material_progress(
        db,
        material_id,
        current_user,
        status=request.status,
        time_spent_minutes=request.time_spent_minutes,
        score=request.score,
    )
