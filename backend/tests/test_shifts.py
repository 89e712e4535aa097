from datetime import datetime, timedelta

from restohire.models import Job, Notification, Restaurant, Role, ShiftAssignment, ShiftStatus
from restohire.services.shifts import send_shift_reminders


def _shift_payload(job_id, worker_profile_id, start, hours=8):
    return {
        "job_id": job_id,
        "worker_id": worker_profile_id,
        "start_time": start.isoformat(),
        "end_time": (start + timedelta(hours=hours)).isoformat(),
        "pay_amount": 150.0,
    }


def test_schedule_and_list_shifts(client, owner, worker, job):
    worker_user, worker_headers = worker
    start = datetime.utcnow() + timedelta(days=2)

    response = client.post(
        "/api/v1/shifts",
        json=_shift_payload(job["id"], worker_user["worker_profile_id"], start),
        headers=owner[1],
    )
    assert response.status_code == 201
    assert response.json()["status"] == "SCHEDULED"
    assert response.json()["worker_name"] == "Alex Kim"

    assert len(client.get("/api/v1/shifts", headers=owner[1]).json()) == 1
    assert len(client.get("/api/v1/shifts", headers=worker_headers).json()) == 1

    upcoming = client.get("/api/v1/dashboard/stats", headers=worker_headers).json()
    assert upcoming["worker_metrics"]["upcoming_shifts"][0]["position"] == "Line Cook"


def test_shift_requires_own_job(client, register, worker, job):
    _, rival_headers = register("rival@example.com", Role.RESTAURANT_OWNER)
    response = client.post(
        "/api/v1/shifts",
        json=_shift_payload(job["id"], worker[0]["worker_profile_id"], datetime.utcnow()),
        headers=rival_headers,
    )
    assert response.status_code == 404


def test_workers_cannot_schedule(client, worker, job):
    response = client.post(
        "/api/v1/shifts",
        json=_shift_payload(job["id"], worker[0]["worker_profile_id"], datetime.utcnow()),
        headers=worker[1],
    )
    assert response.status_code == 403


def test_reminders_only_cover_the_window(client, owner, worker, job):
    _, owner_headers = owner
    worker_user, worker_headers = worker
    now = datetime.utcnow()
    for start in (now + timedelta(hours=2), now + timedelta(days=3), now - timedelta(hours=1)):
        client.post(
            "/api/v1/shifts",
            json=_shift_payload(job["id"], worker_user["worker_profile_id"], start),
            headers=owner_headers,
        )

    response = client.post("/api/v1/shifts/reminders", headers=owner_headers)
    assert response.json() == {"sent": 1}

    notifications = client.get("/api/v1/notifications", headers=worker_headers).json()["notifications"]
    assert len(notifications) == 1
    assert notifications[0]["type"] == "SHIFT_REMINDER"
    assert notifications[0]["title"] == "Upcoming Shift Reminder"


def test_cancelled_shifts_are_not_reminded(db, make_user):
    owner = make_user("owner@example.com", Role.RESTAURANT_OWNER)
    alex = make_user("alex@example.com", Role.WORKER, name="Alex")
    restaurant = db.query(Restaurant).filter(Restaurant.owner_id == owner.id).one()
    now = datetime(2024, 6, 3, 6, 0)

    job = Job(
        restaurant_id=restaurant.id, title="Prep Cook", description="d", hourly_rate=18,
        start_date=now, end_date=now,
    )
    db.add(job)
    db.flush()
    db.add_all([
        ShiftAssignment(
            job_id=job.id, worker_id=alex.worker_profile.id, restaurant_id=restaurant.id,
            start_time=now + timedelta(hours=3), end_time=now + timedelta(hours=9),
        ),
        ShiftAssignment(
            job_id=job.id, worker_id=alex.worker_profile.id, restaurant_id=restaurant.id,
            start_time=now + timedelta(hours=4), end_time=now + timedelta(hours=10),
            status=ShiftStatus.CANCELLED,
        ),
    ])
    db.commit()

    assert send_shift_reminders(db, owner, now=now) == 1
    reminder = db.query(Notification).one()
    assert reminder.message == "You have a Prep Cook shift at Test User's Restaurant on Mon, Jun 3, 9:00 AM"
