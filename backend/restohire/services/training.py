"""
Training Progress Tracker.

Per-user progress over training modules and their materials, including the
prerequisite gate that decides whether a module is unlocked.
"""

import math
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.orm import Session, selectinload

from restohire.core.errors import ForbiddenError, NotFoundError
from restohire.models import (
    ProgressStatus,
    Role,
    TrainingMaterial,
    TrainingModule,
    TrainingProgress,
    User,
)


def completion_percentage(completed: int, total: int) -> int:
    """Whole-number percentage, rounding halves up. Zero materials is 0%."""
    if total <= 0:
        return 0
    return math.floor(completed / total * 100 + 0.5)


def prerequisites_completed(db: Session, module: TrainingModule, user_id: int) -> bool:
    """
    True when every material of every direct prerequisite is COMPLETED.

    Only one level is checked: a prerequisite's own prerequisites are not
    followed. Stops at the first prerequisite that is not complete.
    """
    for prerequisite in module.prerequisites:
        material_ids = [material.id for material in prerequisite.materials]
        if not material_ids:
            continue
        completed = (
            db.query(TrainingProgress)
            .filter(
                TrainingProgress.user_id == user_id,
                TrainingProgress.material_id.in_(material_ids),
                TrainingProgress.status == ProgressStatus.COMPLETED,
            )
            .count()
        )
        if completed < len(material_ids):
            return False
    return True


def _material_dict(material: TrainingMaterial) -> dict[str, Any]:
    return {
        "id": material.id,
        "module_id": material.module_id,
        "title": material.title,
        "description": material.description,
        "type": material.type.value if material.type else None,
        "content_url": material.content_url,
        "order": material.order,
        "estimated_time_minutes": material.estimated_time_minutes,
    }


def _progress_dict(progress: Optional[TrainingProgress]) -> Optional[dict[str, Any]]:
    if progress is None:
        return None
    return {
        "id": progress.id,
        "material_id": progress.material_id,
        "module_id": progress.module_id,
        "status": progress.status.value,
        "started_at": progress.started_at,
        "completed_at": progress.completed_at,
        "last_accessed_at": progress.last_accessed_at,
        "time_spent_minutes": progress.time_spent_minutes or 0,
        "score": progress.score,
    }


def _module_ref(module: TrainingModule) -> dict[str, Any]:
    return {"id": module.id, "title": module.title}


def _module_dict(module: TrainingModule) -> dict[str, Any]:
    return {
        "id": module.id,
        "title": module.title,
        "description": module.description,
        "target_role": module.target_role.value,
        "is_required": bool(module.is_required),
        "order": module.order,
    }


def get_module_with_progress(db: Session, module_id: int, user_id: int) -> dict[str, Any]:
    """
    A module with its ordered materials, the user's per-material progress
    and an aggregate progress summary.

    Raises NotFoundError if the module does not exist.
    """
    module = (
        db.query(TrainingModule)
        .options(
            selectinload(TrainingModule.materials),
            selectinload(TrainingModule.prerequisites).selectinload(TrainingModule.materials),
            selectinload(TrainingModule.required_for),
        )
        .filter(TrainingModule.id == module_id)
        .first()
    )
    if not module:
        raise NotFoundError("Training module not found")

    progress_records = (
        db.query(TrainingProgress)
        .filter(
            TrainingProgress.user_id == user_id,
            TrainingProgress.module_id == module_id,
        )
        .all()
    )
    progress_by_material = {record.material_id: record for record in progress_records}

    total_materials = len(module.materials)
    completed_materials = sum(
        1 for record in progress_records if record.status == ProgressStatus.COMPLETED
    )

    return {
        **_module_dict(module),
        "materials": [
            {**_material_dict(material), "progress": _progress_dict(progress_by_material.get(material.id))}
            for material in module.materials
        ],
        "prerequisites": [_module_ref(m) for m in module.prerequisites],
        "required_for": [_module_ref(m) for m in module.required_for],
        "progress": {
            "completion_percentage": completion_percentage(completed_materials, total_materials),
            "completed_materials": completed_materials,
            "total_materials": total_materials,
            "prerequisites_completed": prerequisites_completed(db, module, user_id),
        },
    }


def list_modules(
    db: Session,
    user: User,
    target_role: Optional[Role] = None,
    is_required: Optional[bool] = None,
    completed: Optional[bool] = None,
) -> list[dict[str, Any]]:
    """
    Modules for a role (the caller's by default), in display order.

    With ``completed`` set, keeps only modules the user has fully completed
    (or only those not yet completed). A module without materials never
    counts as completed.
    """
    query = (
        db.query(TrainingModule)
        .options(
            selectinload(TrainingModule.materials),
            selectinload(TrainingModule.prerequisites),
        )
        .filter(TrainingModule.target_role == (target_role or user.role))
    )
    if is_required is not None:
        query = query.filter(TrainingModule.is_required == is_required)

    modules = query.order_by(TrainingModule.order.asc(), TrainingModule.id.asc()).all()

    if completed is not None:
        completed_ids = {
            row[0]
            for row in db.query(TrainingProgress.material_id)
            .filter(
                TrainingProgress.user_id == user.id,
                TrainingProgress.status == ProgressStatus.COMPLETED,
            )
            .all()
        }

        def is_module_completed(module: TrainingModule) -> bool:
            return bool(module.materials) and all(m.id in completed_ids for m in module.materials)

        modules = [m for m in modules if is_module_completed(m) == completed]

    return [
        {
            **_module_dict(module),
            "materials": [_material_dict(material) for material in module.materials],
            "prerequisites": [_module_ref(m) for m in module.prerequisites],
            "material_count": len(module.materials),
        }
        for module in modules
    ]


def open_material(db: Session, material_id: int, user: User) -> dict[str, Any]:
    """
    Fetch a material for viewing and record the visit.

    The first view creates the progress record and moves it to IN_PROGRESS;
    later views only bump ``last_accessed_at``.
    """
    material = db.query(TrainingMaterial).filter(TrainingMaterial.id == material_id).first()
    if not material:
        raise NotFoundError("Training material not found")

    if material.module.target_role != user.role:
        raise ForbiddenError("You do not have access to this training material")

    now = datetime.utcnow()
    progress = (
        db.query(TrainingProgress)
        .filter(
            TrainingProgress.user_id == user.id,
            TrainingProgress.material_id == material.id,
        )
        .first()
    )
    if not progress:
        progress = TrainingProgress(
            user_id=user.id,
            material_id=material.id,
            module_id=material.module_id,
            status=ProgressStatus.NOT_STARTED,
            time_spent_minutes=0,
        )
        db.add(progress)

    if progress.status == ProgressStatus.NOT_STARTED:
        progress.status = ProgressStatus.IN_PROGRESS
        progress.started_at = now
    progress.last_accessed_at = now
    db.commit()
    db.refresh(progress)

    next_material = (
        db.query(TrainingMaterial)
        .filter(
            TrainingMaterial.module_id == material.module_id,
            TrainingMaterial.order > material.order,
        )
        .order_by(TrainingMaterial.order.asc())
        .first()
    )
    previous_material = (
        db.query(TrainingMaterial)
        .filter(
            TrainingMaterial.module_id == material.module_id,
            TrainingMaterial.order < material.order,
        )
        .order_by(TrainingMaterial.order.desc())
        .first()
    )

    return {
        **_material_dict(material),
        "module": _module_ref(material.module),
        "progress": _progress_dict(progress),
        "navigation": {
            "next": {"id": next_material.id, "title": next_material.title} if next_material else None,
            "previous": (
                {"id": previous_material.id, "title": previous_material.title}
                if previous_material
                else None
            ),
        },
    }


def record_material_progress(
    db: Session,
    material_id: int,
    user: User,
    status: Optional[ProgressStatus] = None,
    time_spent_minutes: Optional[int] = None,
    score: Optional[float] = None,
) -> dict[str, Any]:
    """Create or update the user's progress on a material."""
    material = db.query(TrainingMaterial).filter(TrainingMaterial.id == material_id).first()
    if not material:
        raise NotFoundError("Training material not found")

    now = datetime.utcnow()
    progress = (
        db.query(TrainingProgress)
        .filter(
            TrainingProgress.user_id == user.id,
            TrainingProgress.material_id == material.id,
        )
        .first()
    )
    if not progress:
        progress = TrainingProgress(
            user_id=user.id,
            material_id=material.id,
            module_id=material.module_id,
            status=status or ProgressStatus.IN_PROGRESS,
            started_at=now,
            time_spent_minutes=0,
        )
        db.add(progress)
    elif status is not None:
        progress.status = status

    if status == ProgressStatus.COMPLETED:
        progress.completed_at = now
    if time_spent_minutes is not None:
        progress.time_spent_minutes = time_spent_minutes
    if score is not None:
        progress.score = score
    progress.last_accessed_at = now

    db.commit()
    db.refresh(progress)
    return _progress_dict(progress)
