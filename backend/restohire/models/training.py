import enum

from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Enum, Float, ForeignKey, Table, Text, UniqueConstraint
)
from sqlalchemy.orm import relationship

from restohire.db.base import Base
from restohire.models.user import Role


class MaterialType(str, enum.Enum):
    VIDEO = "VIDEO"
    DOCUMENT = "DOCUMENT"
    QUIZ = "QUIZ"
    INTERACTIVE = "INTERACTIVE"


class ProgressStatus(str, enum.Enum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


# module_id requires prerequisite_id to be completed first.
# Expected to form a DAG; cycles are not checked.
module_prerequisites = Table(
    "training_module_prerequisites",
    Base.metadata,
    Column("module_id", Integer, ForeignKey("training_modules.id"), primary_key=True),
    Column("prerequisite_id", Integer, ForeignKey("training_modules.id"), primary_key=True),
)


class TrainingModule(Base):
    """Onboarding unit targeted at one role, made of ordered materials."""

    __tablename__ = "training_modules"

    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    target_role = Column(Enum(Role, native_enum=False, length=32), nullable=False, index=True)
    is_required = Column(Boolean, default=False)
    order = Column(Integer, default=0)

    materials = relationship(
        "TrainingMaterial",
        back_populates="module",
        order_by="TrainingMaterial.order",
    )
    prerequisites = relationship(
        "TrainingModule",
        secondary=module_prerequisites,
        primaryjoin=id == module_prerequisites.c.module_id,
        secondaryjoin=id == module_prerequisites.c.prerequisite_id,
        back_populates="required_for",
    )
    required_for = relationship(
        "TrainingModule",
        secondary=module_prerequisites,
        primaryjoin=id == module_prerequisites.c.prerequisite_id,
        secondaryjoin=id == module_prerequisites.c.module_id,
        back_populates="prerequisites",
    )


class TrainingMaterial(Base):
    __tablename__ = "training_materials"

    id = Column(Integer, primary_key=True)
    module_id = Column(Integer, ForeignKey("training_modules.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    type = Column(Enum(MaterialType, native_enum=False, length=16), default=MaterialType.DOCUMENT)
    content_url = Column(String, nullable=True)
    order = Column(Integer, default=0)
    estimated_time_minutes = Column(Integer, nullable=True)

    module = relationship("TrainingModule", back_populates="materials")


class TrainingProgress(Base):
    """Per-user, per-material progress record."""

    __tablename__ = "training_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "material_id", name="uq_training_progress_user_material"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    module_id = Column(Integer, ForeignKey("training_modules.id"), nullable=False, index=True)
    material_id = Column(Integer, ForeignKey("training_materials.id"), nullable=False)

    status = Column(
        Enum(ProgressStatus, native_enum=False, length=16),
        default=ProgressStatus.NOT_STARTED,
        nullable=False,
    )
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    last_accessed_at = Column(DateTime, nullable=True)
    time_spent_minutes = Column(Integer, default=0)
    score = Column(Float, nullable=True)

    material = relationship("TrainingMaterial")
