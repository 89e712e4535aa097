"""
Worker profile endpoints (workers only).

Profile fields and the worker's certifications.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field, field_validator, model_validator
from sqlalchemy.orm import Session

from restohire.api.v1.auth import ensure_role, get_current_user
from restohire.db.session import get_db
from restohire.models import Certification, Role, User
from restohire.services.accounts import get_worker_profile

router = APIRouter()


# ============== Pydantic Schemas ==============


class WorkerProfileUpdate(BaseModel):
    """Partial update; only fields present in the body are written."""

    title: Optional[str] = None
    bio: Optional[str] = None
    skills: Optional[list[str]] = None
    hourly_rate: Optional[float] = Field(default=None, ge=0)
    availability: Optional[str] = None
    years_of_experience: Optional[int] = Field(default=None, ge=0)
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    profile_picture_url: Optional[str] = None

    @field_validator("skills")
    @classmethod
    def clean_skills(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        """Strip blanks and drop case-insensitive duplicates, keeping order."""
        if v is None:
            return v
        cleaned: list[str] = []
        seen: set[str] = set()
        for skill in v:
            skill = skill.strip()
            if skill and skill.lower() not in seen:
                cleaned.append(skill)
                seen.add(skill.lower())
        return cleaned


class WorkerProfileResponse(BaseModel):
    id: int
    user_id: int
    name: Optional[str] = None
    email: Optional[str] = None
    title: Optional[str] = None
    bio: Optional[str] = None
    skills: list[str] = []
    hourly_rate: Optional[float] = None
    availability: Optional[str] = None
    years_of_experience: Optional[int] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    profile_picture_url: Optional[str] = None
    updated_at: Optional[datetime] = None


class CertificationCreate(BaseModel):
    name: str = Field(min_length=1)
    issuing_organization: str = Field(min_length=1)
    issue_date: datetime
    expiration_date: Optional[datetime] = None
    credential_id: Optional[str] = None
    verification_url: Optional[str] = Field(default=None, pattern=r"^https?://")
    document_url: Optional[str] = None

    @model_validator(mode="after")
    def check_dates(self):
        if self.expiration_date and self.expiration_date < self.issue_date:
            raise ValueError("expiration_date must not be before issue_date")
        return self


class CertificationResponse(CertificationCreate):
    id: int
    worker_id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


def _to_response(profile, user: User) -> WorkerProfileResponse:
    return WorkerProfileResponse(
        id=profile.id,
        user_id=profile.user_id,
        name=user.name,
        email=user.email,
        title=profile.title,
        bio=profile.bio,
        skills=profile.skills or [],
        hourly_rate=profile.hourly_rate,
        availability=profile.availability,
        years_of_experience=profile.years_of_experience,
        contact_email=profile.contact_email,
        contact_phone=profile.contact_phone,
        address=profile.address,
        city=profile.city,
        state=profile.state,
        zip_code=profile.zip_code,
        profile_picture_url=profile.profile_picture_url,
        updated_at=profile.updated_at,
    )


# ============== API Endpoints ==============


@router.get("/profile", response_model=WorkerProfileResponse)
async def get_worker_profile_endpoint(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_role(current_user, Role.WORKER, "Only workers can access this endpoint")
    profile = get_worker_profile(db, current_user)
    return _to_response(profile, current_user)


@router.put("/profile", response_model=WorkerProfileResponse)
async def update_worker_profile(
    request: WorkerProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_role(current_user, Role.WORKER, "Only workers can update their profile")
    profile = get_worker_profile(db, current_user)

    for field_name, value in request.model_dump(exclude_unset=True).items():
        if field_name == "skills" and value is None:
            value = []
        setattr(profile, field_name, value)

    db.commit()
    db.refresh(profile)
    return _to_response(profile, current_user)


@router.get("/certifications", response_model=list[CertificationResponse])
async def list_certifications(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """The caller's certifications, most recently issued first."""
    ensure_role(current_user, Role.WORKER, "Only workers can access this endpoint")
    return get_worker_profile(db, current_user).certifications


@router.post(
    "/certifications",
    response_model=CertificationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_certification(
    request: CertificationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_role(current_user, Role.WORKER, "Only workers can create certifications")
    profile = get_worker_profile(db, current_user)

    certification = Certification(worker_id=profile.id, **request.model_dump())
    db.add(certification)
    db.commit()
    db.refresh(certification)
    return certification
