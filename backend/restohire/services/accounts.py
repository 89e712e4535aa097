"""
Account helpers shared by the routers and services.

Registration creates the role-specific profile; the lookup helpers resolve
the restaurant or worker profile behind an authenticated user.
"""

from typing import Optional

from sqlalchemy.orm import Session

from restohire.core.errors import ConflictError, NotFoundError
from restohire.core.security import get_password_hash, verify_password
from restohire.models import Restaurant, Role, User, WorkerProfile


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Get a user by email address."""
    return db.query(User).filter(User.email == email.lower()).first()


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """Authenticate a user by email and password."""
    user = get_user_by_email(db, email)
    if not user:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


def register_user(
    db: Session,
    email: str,
    password: str,
    name: str,
    role: Role,
    phone: Optional[str] = None,
) -> User:
    """
    Create a user and the profile that goes with its role.

    Owners get a placeholder restaurant named after them, workers an empty
    worker profile.
    """
    if get_user_by_email(db, email):
        raise ConflictError("User already exists")

    user = User(
        email=email.lower(),
        hashed_password=get_password_hash(password),
        name=name,
        phone=phone,
        role=role,
    )
    db.add(user)
    db.flush()

    if role == Role.RESTAURANT_OWNER:
        db.add(Restaurant(owner_id=user.id, name=f"{name}'s Restaurant", address=""))
    elif role == Role.WORKER:
        db.add(WorkerProfile(user_id=user.id, skills=[]))

    db.commit()
    db.refresh(user)
    return user


def get_restaurant_for_owner(db: Session, user: User) -> Restaurant:
    restaurant = db.query(Restaurant).filter(Restaurant.owner_id == user.id).first()
    if not restaurant:
        raise NotFoundError("Restaurant not found")
    return restaurant


def get_worker_profile(db: Session, user: User) -> WorkerProfile:
    profile = db.query(WorkerProfile).filter(WorkerProfile.user_id == user.id).first()
    if not profile:
        raise NotFoundError("Worker profile not found")
    return profile
