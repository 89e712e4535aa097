from restohire.models.user import User, Role
from restohire.models.restaurant import Restaurant, Address, PaymentInfo, Location
from restohire.models.worker import WorkerProfile, Certification
from restohire.models.job import Job, JobStatus
from restohire.models.application import Application, ApplicationStatus
from restohire.models.message import Message
from restohire.models.notification import (
    Notification,
    NotificationType,
    NotificationPreference,
    NotificationDevice,
)
from restohire.models.shift import ShiftAssignment, ShiftStatus
from restohire.models.review import Review
from restohire.models.saved_job import SavedJob
from restohire.models.training import (
    TrainingModule,
    TrainingMaterial,
    TrainingProgress,
    MaterialType,
    ProgressStatus,
)

__all__ = [
    "User",
    "Role",
    "Restaurant",
    "Address",
    "PaymentInfo",
    "Location",
    "WorkerProfile",
    "Certification",
    "Job",
    "JobStatus",
    "Application",
    "ApplicationStatus",
    "Message",
    "Notification",
    "NotificationType",
    "NotificationPreference",
    "NotificationDevice",
    "ShiftAssignment",
    "ShiftStatus",
    "Review",
    "SavedJob",
    "TrainingModule",
    "TrainingMaterial",
    "TrainingProgress",
    "MaterialType",
    "ProgressStatus",
]
