from datetime import datetime

from restohire.models import (
    ApplicationStatus,
    Notification,
    NotificationPreference,
    NotificationType,
    Role,
)
from restohire.services.notifications import (
    format_shift_time,
    render_notification,
    send_notification,
)


# ============== Templates ==============


def test_application_status_templates():
    accepted = render_notification(
        NotificationType.APPLICATION_STATUS,
        application_id=1,
        job_title="Server",
        status=ApplicationStatus.ACCEPTED,
    )
    assert accepted.title == "Application Accepted"
    assert accepted.data == {"applicationId": 1, "status": "ACCEPTED", "jobTitle": "Server"}

    interviewing = render_notification(
        NotificationType.APPLICATION_STATUS,
        application_id=1,
        job_title="Server",
        status=ApplicationStatus.INTERVIEWING,
    )
    assert interviewing.title == "Interview Request"

    withdrawn = render_notification(
        NotificationType.APPLICATION_STATUS,
        application_id=1,
        job_title="Server",
        status=ApplicationStatus.WITHDRAWN,
    )
    assert withdrawn.message == "Your application for Server has been updated to: WITHDRAWN"


def test_new_message_preview_is_truncated():
    content = "x" * 60
    rendered = render_notification(
        NotificationType.NEW_MESSAGE,
        sender_id=7,
        sender_name="Alex",
        content=content,
        conversation_id=7,
    )
    assert rendered.message == "Alex: " + "x" * 50 + "..."


def test_short_message_is_not_truncated():
    rendered = render_notification(
        NotificationType.NEW_MESSAGE,
        sender_id=7,
        sender_name="Alex",
        content="x" * 50,
        conversation_id=7,
    )
    assert rendered.message == "Alex: " + "x" * 50


def test_shift_reminder_time_format():
    assert format_shift_time(datetime(2024, 6, 3, 9, 30)) == "Mon, Jun 3, 9:30 AM"
    assert format_shift_time(datetime(2024, 6, 3, 0, 5)) == "Mon, Jun 3, 12:05 AM"

    rendered = render_notification(
        NotificationType.SHIFT_REMINDER,
        shift_id=3,
        job_title="Line Cook",
        restaurant_name="Casa Lopez",
        start_time=datetime(2024, 6, 3, 17, 0),
    )
    assert rendered.message == "You have a Line Cook shift at Casa Lopez on Mon, Jun 3, 5:00 PM"


# ============== Dispatch ==============


def test_send_notification_persists(db, make_user):
    user = make_user("w@example.com")

    result = send_notification(
        db,
        NotificationType.NEW_REVIEW,
        user.id,
        review_id=4,
        reviewer_name="Casa Lopez",
        rating=5,
    )

    assert result
    notification = db.query(Notification).filter(Notification.id == result.notification_id).one()
    assert notification.message == "Casa Lopez left you a 5-star review"
    assert notification.is_read is False


def test_disabled_kind_is_skipped(db, make_user):
    user = make_user("w@example.com")
    db.add(NotificationPreference(user_id=user.id, messages=False))
    db.commit()

    result = send_notification(
        db,
        NotificationType.NEW_MESSAGE,
        user.id,
        sender_id=1,
        sender_name="Maria",
        content="hi",
        conversation_id=1,
    )

    assert not result
    assert result.skipped
    assert db.query(Notification).count() == 0


def test_in_app_channel_disabled(db, make_user):
    user = make_user("w@example.com")
    db.add(NotificationPreference(user_id=user.id, in_app_enabled=False))
    db.commit()

    result = send_notification(
        db, NotificationType.NEW_JOB, user.id, job_id=1, job_title="Host", restaurant_name="Casa"
    )

    assert result.skipped
    assert db.query(Notification).count() == 0


def test_failure_is_reported_not_raised(db, make_user):
    user = make_user("w@example.com")

    result = send_notification(db, NotificationType.NEW_JOB, user.id, job_id=1)

    assert not result
    assert not result.skipped
    assert result.error
    assert db.query(Notification).count() == 0


# ============== API ==============


def _notify(db, user_id, job_title="Host"):
    send_notification(
        db, NotificationType.NEW_JOB, user_id, job_id=1, job_title=job_title, restaurant_name="Casa"
    )


def test_mark_read_and_read_all(client, db, worker):
    user, headers = worker
    _notify(db, user["id"], "Host")
    _notify(db, user["id"], "Busser")

    listing = client.get("/api/v1/notifications", headers=headers).json()
    assert listing["unread_count"] == 2
    newest = listing["notifications"][0]
    assert "Busser" in newest["message"]

    response = client.patch(f"/api/v1/notifications/{newest['id']}/read", headers=headers)
    assert response.json()["is_read"] is True
    assert response.json()["read_at"] is not None
    assert client.get("/api/v1/notifications", headers=headers).json()["unread_count"] == 1

    assert client.post("/api/v1/notifications/read-all", headers=headers).json()["updated"] == 1
    assert client.get("/api/v1/notifications", headers=headers).json()["unread_count"] == 0


def test_cannot_read_someone_elses_notification(client, db, worker, register):
    user, _ = worker
    _notify(db, user["id"])
    notification_id = db.query(Notification).one().id
    _, other_headers = register("other@example.com", Role.WORKER)

    response = client.patch(f"/api/v1/notifications/{notification_id}/read", headers=other_headers)
    assert response.status_code == 404


def test_preferences_default_and_update(client, worker):
    _, headers = worker

    defaults = client.get("/api/v1/notifications/preferences", headers=headers).json()
    assert all(defaults.values())

    updated = client.put(
        "/api/v1/notifications/preferences",
        json={"job_postings": False},
        headers=headers,
    ).json()
    assert updated["job_postings"] is False
    assert updated["messages"] is True

    stored = client.get("/api/v1/notifications/preferences", headers=headers).json()
    assert stored["job_postings"] is False


def test_device_registration_moves_token(client, worker, register):
    _, headers = worker
    _, other_headers = register("other@example.com", Role.WORKER)

    response = client.post(
        "/api/v1/notifications/devices",
        json={"token": "device-abc", "platform": "ios"},
        headers=headers,
    )
    assert response.status_code == 200

    client.post(
        "/api/v1/notifications/devices",
        json={"token": "device-abc", "platform": "ios"},
        headers=other_headers,
    )

    assert client.get("/api/v1/notifications/devices", headers=headers).json() == []
    assert len(client.get("/api/v1/notifications/devices", headers=other_headers).json()) == 1


def test_reregistering_device_updates_platform(client, worker):
    _, headers = worker
    for platform in ("ios", "web"):
        client.post(
            "/api/v1/notifications/devices",
            json={"token": "device-abc", "platform": platform},
            headers=headers,
        )

    devices = client.get("/api/v1/notifications/devices", headers=headers).json()
    assert len(devices) == 1
    assert devices[0]["platform"] == "web"


def test_device_validation_and_delete(client, worker):
    _, headers = worker

    bad = client.post(
        "/api/v1/notifications/devices",
        json={"token": "device-abc", "platform": "blackberry"},
        headers=headers,
    )
    assert bad.status_code == 400

    missing = client.delete("/api/v1/notifications/devices", headers=headers)
    assert missing.status_code == 400
    assert missing.json() == {"error": "Device token is required"}

    client.post(
        "/api/v1/notifications/devices",
        json={"token": "device-abc", "platform": "web"},
        headers=headers,
    )
    deleted = client.delete("/api/v1/notifications/devices?token=device-abc", headers=headers)
    assert deleted.json() == {"success": True}
    assert client.get("/api/v1/notifications/devices", headers=headers).json() == []
