"""
Notification Dispatch Service.

Turns domain events (new application, status change, new message, ...) into
persisted, recipient-targeted notifications.

Dispatch is best-effort: the caller's primary action is already committed by
the time a notification is sent, so failures are logged and reported through
the returned ``NotificationResult`` instead of being raised.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional

from sqlalchemy.orm import Session

from restohire.models import (
    ApplicationStatus,
    Notification,
    NotificationDevice,
    NotificationPreference,
    NotificationType,
)

# Configure logging for the notification service
logger = logging.getLogger("notifications")
logger.setLevel(logging.INFO)

# Console handler for terminal output
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("🔔 [NOTIFY] %(message)s"))
    logger.addHandler(handler)

MESSAGE_PREVIEW_LENGTH = 50


@dataclass
class NotificationContent:
    title: str
    message: str
    data: dict = field(default_factory=dict)


@dataclass
class NotificationResult:
    """
    Outcome of a dispatch attempt.

    Truthy only when an in-app notification row was written.
    """

    ok: bool
    notification_id: Optional[int] = None
    skipped: bool = False
    error: Optional[str] = None

    def __bool__(self) -> bool:
        return self.ok


# ============== Templates ==============


def message_preview(content: str) -> str:
    """First 50 characters of a message body, with an ellipsis when cut."""
    if len(content) > MESSAGE_PREVIEW_LENGTH:
        return content[:MESSAGE_PREVIEW_LENGTH] + "..."
    return content


def format_shift_time(start_time: datetime) -> str:
    """Format like 'Mon, Jun 3, 9:30 AM'."""
    hour = start_time.hour % 12 or 12
    return f"{start_time:%a, %b} {start_time.day}, {hour}:{start_time:%M %p}"


def _application_status(application_id: int, job_title: str, status: Any) -> NotificationContent:
    status_value = status.value if isinstance(status, ApplicationStatus) else str(status)

    if status_value == ApplicationStatus.ACCEPTED.value:
        title = "Application Accepted"
        message = f"Your application for {job_title} has been accepted!"
    elif status_value == ApplicationStatus.REJECTED.value:
        title = "Application Status Update"
        message = f"Your application for {job_title} was not selected at this time."
    elif status_value == ApplicationStatus.INTERVIEWING.value:
        title = "Interview Request"
        message = f"You've been selected for an interview for the {job_title} position."
    else:
        title = "Application Status Update"
        message = f"Your application for {job_title} has been updated to: {status_value}"

    return NotificationContent(
        title=title,
        message=message,
        data={"applicationId": application_id, "status": status_value, "jobTitle": job_title},
    )


def _new_application(application_id: int, worker_name: str, job_title: str) -> NotificationContent:
    return NotificationContent(
        title="New Application Received",
        message=f"{worker_name} applied for the {job_title} position",
        data={"applicationId": application_id, "workerName": worker_name, "jobTitle": job_title},
    )


def _new_message(sender_id: int, sender_name: str, content: str, conversation_id: Any) -> NotificationContent:
    return NotificationContent(
        title="New Message",
        message=f"{sender_name}: {message_preview(content)}",
        data={"senderId": sender_id, "conversationId": conversation_id},
    )


def _new_job(job_id: int, job_title: str, restaurant_name: str) -> NotificationContent:
    return NotificationContent(
        title="New Job Opportunity",
        message=f"{restaurant_name} posted a new {job_title} position that matches your profile",
        data={"jobId": job_id, "jobTitle": job_title, "restaurantName": restaurant_name},
    )


def _shift_reminder(
    shift_id: int, job_title: str, restaurant_name: str, start_time: datetime
) -> NotificationContent:
    return NotificationContent(
        title="Upcoming Shift Reminder",
        message=(
            f"You have a {job_title} shift at {restaurant_name} "
            f"on {format_shift_time(start_time)}"
        ),
        data={
            "shiftId": shift_id,
            "jobTitle": job_title,
            "restaurantName": restaurant_name,
            "startTime": start_time.isoformat(),
        },
    )


def _new_review(review_id: int, reviewer_name: str, rating: int) -> NotificationContent:
    return NotificationContent(
        title="New Review Received",
        message=f"{reviewer_name} left you a {rating}-star review",
        data={"reviewId": review_id, "reviewerName": reviewer_name, "rating": rating},
    )


TEMPLATES: dict[NotificationType, Callable[..., NotificationContent]] = {
    NotificationType.APPLICATION_STATUS: _application_status,
    NotificationType.NEW_APPLICATION: _new_application,
    NotificationType.NEW_MESSAGE: _new_message,
    NotificationType.NEW_JOB: _new_job,
    NotificationType.SHIFT_REMINDER: _shift_reminder,
    NotificationType.NEW_REVIEW: _new_review,
}

# Preference column that switches each kind on or off
KIND_PREFERENCE = {
    NotificationType.APPLICATION_STATUS: "application_updates",
    NotificationType.NEW_APPLICATION: "application_updates",
    NotificationType.NEW_MESSAGE: "messages",
    NotificationType.NEW_JOB: "job_postings",
    NotificationType.SHIFT_REMINDER: "shift_reminders",
    NotificationType.NEW_REVIEW: "reviews_and_ratings",
}


def render_notification(kind: NotificationType, **template_args) -> NotificationContent:
    """Build the title/message/data triple for a notification kind."""
    return TEMPLATES[kind](**template_args)


# ============== Dispatch ==============


def _is_kind_enabled(kind: NotificationType, prefs: Optional[NotificationPreference]) -> bool:
    if prefs is None:
        return True
    return bool(getattr(prefs, KIND_PREFERENCE[kind]))


def _log_push(db: Session, recipient_user_id: int, content: NotificationContent) -> None:
    # No push provider is wired up; registered devices are only logged.
    devices = (
        db.query(NotificationDevice)
        .filter(NotificationDevice.user_id == recipient_user_id)
        .all()
    )
    if not devices:
        return
    for device in devices:
        logger.info(f"Push to device {device.id} ({device.platform}): {content.title}")


def send_notification(
    db: Session,
    kind: NotificationType,
    recipient_user_id: int,
    **template_args,
) -> NotificationResult:
    """
    Render and persist a notification for one recipient.

    Never raises. A kind disabled in the recipient's preferences returns a
    skipped result; any failure is logged, the session rolled back and a
    failed result returned.
    """
    try:
        content = render_notification(kind, **template_args)

        prefs = (
            db.query(NotificationPreference)
            .filter(NotificationPreference.user_id == recipient_user_id)
            .first()
        )
        if not _is_kind_enabled(kind, prefs):
            logger.info(f"{kind.value} disabled for user {recipient_user_id}, skipping")
            return NotificationResult(ok=False, skipped=True)

        notification_id = None
        if prefs is None or prefs.in_app_enabled:
            notification = Notification(
                user_id=recipient_user_id,
                type=kind,
                title=content.title,
                message=content.message,
                data=content.data or None,
                is_read=False,
            )
            db.add(notification)
            db.commit()
            notification_id = notification.id
            logger.info(f"{kind.value} notification created for user {recipient_user_id}")

        if prefs is None or prefs.push_enabled:
            _log_push(db, recipient_user_id, content)

        if notification_id is None:
            return NotificationResult(ok=False, skipped=True)
        return NotificationResult(ok=True, notification_id=notification_id)

    except Exception as e:
        db.rollback()
        logger.error(f"❌ Failed to send {kind.value} notification to user {recipient_user_id}: {e}")
        return NotificationResult(ok=False, error=str(e))
