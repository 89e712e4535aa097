from datetime import datetime, timedelta

from restohire.models import (
    Application,
    ApplicationStatus,
    Job,
    JobStatus,
    Restaurant,
    Role,
    ShiftAssignment,
    WorkerProfile,
)
from restohire.services.dashboard import (
    calculate_profile_completion,
    format_time_ago,
    get_activity,
    get_stats,
    get_tasks,
)

NOW = datetime(2024, 6, 15, 12, 0)


def test_format_time_ago():
    assert format_time_ago(NOW - timedelta(seconds=45), NOW) == "Just now"
    assert format_time_ago(NOW - timedelta(minutes=1), NOW) == "1 minute ago"
    assert format_time_ago(NOW - timedelta(minutes=59), NOW) == "59 minutes ago"
    assert format_time_ago(NOW - timedelta(minutes=90), NOW) == "1 hour ago"
    assert format_time_ago(NOW - timedelta(days=2, hours=5), NOW) == "2 days ago"
    assert format_time_ago(NOW + timedelta(minutes=5), NOW) == "Just now"


def test_profile_completion():
    empty = WorkerProfile(skills=[])
    assert calculate_profile_completion(empty) == 0

    partial = WorkerProfile(bio="Grill cook", skills=["Grill"])
    assert calculate_profile_completion(partial) == 35

    full = WorkerProfile(
        bio="Grill cook",
        contact_email="a@example.com",
        contact_phone="555-0100",
        address="1 Main St",
        city="Austin",
        state="TX",
        profile_picture_url="https://example.com/me.png",
        skills=["Grill"],
        years_of_experience=3,
        hourly_rate=18.0,
        availability="Weekends",
    )
    assert calculate_profile_completion(full) == 100


def test_owner_stats_with_no_data(client, owner):
    _, headers = owner
    stats = client.get("/api/v1/dashboard/stats", headers=headers).json()

    assert stats["total_jobs"] == 0
    assert stats["active_jobs"] == 0
    assert stats["total_applications"] == 0
    assert stats["metrics"] == {
        "application_rate": 0.0,
        "average_hire_time": 0.0,
        "job_fill_rate": 0.0,
    }
    assert stats["trends"]["applications"] == [0] * 6
    assert "worker_metrics" not in stats


def test_owner_stats_and_metrics(db, make_user):
    owner = make_user("owner@example.com", Role.RESTAURANT_OWNER)
    alex = make_user("alex@example.com", Role.WORKER, name="Alex")
    sam = make_user("sam@example.com", Role.WORKER, name="Sam")
    restaurant = db.query(Restaurant).filter(Restaurant.owner_id == owner.id).one()
    alex_profile = alex.worker_profile
    sam_profile = sam.worker_profile

    posted = NOW - timedelta(days=10)
    filled = Job(
        restaurant_id=restaurant.id, title="Cook", description="d", hourly_rate=20,
        start_date=NOW, end_date=NOW, status=JobStatus.FILLED, created_at=posted,
    )
    active = Job(
        restaurant_id=restaurant.id, title="Host", description="d", hourly_rate=15,
        start_date=NOW, end_date=NOW, status=JobStatus.ACTIVE, created_at=posted,
    )
    db.add_all([filled, active])
    db.flush()

    db.add_all([
        Application(
            job_id=filled.id, worker_id=alex_profile.id, restaurant_id=restaurant.id,
            status=ApplicationStatus.ACCEPTED, applied_at=NOW - timedelta(days=8),
            responded_at=NOW - timedelta(days=6),
        ),
        Application(
            job_id=filled.id, worker_id=sam_profile.id, restaurant_id=restaurant.id,
            status=ApplicationStatus.PENDING, applied_at=NOW - timedelta(days=7),
        ),
        Application(
            job_id=active.id, worker_id=sam_profile.id, restaurant_id=restaurant.id,
            status=ApplicationStatus.PENDING, applied_at=NOW - timedelta(days=1),
        ),
    ])
    db.add(ShiftAssignment(
        job_id=filled.id, worker_id=alex_profile.id, restaurant_id=restaurant.id,
        start_time=NOW + timedelta(days=1), end_time=NOW + timedelta(days=1, hours=8),
    ))
    db.commit()

    stats = get_stats(db, owner, now=NOW)

    assert stats["total_jobs"] == 2
    assert stats["active_jobs"] == 1
    assert stats["total_applications"] == 3
    assert stats["pending_applications"] == 2
    assert stats["total_workers"] == 1
    assert stats["active_workers"] == 1
    assert stats["metrics"]["application_rate"] == 1.5
    assert stats["metrics"]["job_fill_rate"] == 50.0
    assert stats["metrics"]["average_hire_time"] == 4.0
    assert stats["trends"]["applications"][-1] == 3
    assert stats["trends"]["hires"][-1] == 1


def test_worker_stats(client, worker, job):
    _, headers = worker
    client.post("/api/v1/applications", json={"job_id": job["id"]}, headers=headers)

    stats = client.get("/api/v1/dashboard/stats", headers=headers).json()

    assert stats["active_jobs"] == 1
    assert stats["total_applications"] == 1
    assert stats["pending_applications"] == 1
    assert stats["worker_metrics"]["application_statuses"]["pending"] == 1
    assert stats["worker_metrics"]["application_statuses"]["accepted"] == 0
    assert stats["worker_metrics"]["profile_completion"] == 0
    assert stats["worker_metrics"]["upcoming_shifts"] == []
    assert "metrics" not in stats


def test_owner_activity_merges_and_sorts(db, make_user):
    owner = make_user("owner@example.com", Role.RESTAURANT_OWNER)
    alex = make_user("alex@example.com", Role.WORKER, name="Alex")
    restaurant = db.query(Restaurant).filter(Restaurant.owner_id == owner.id).one()

    job = Job(
        restaurant_id=restaurant.id, title="Host", description="Front desk", hourly_rate=15,
        start_date=NOW, end_date=NOW, created_at=NOW - timedelta(hours=3),
    )
    db.add(job)
    db.flush()
    application = Application(
        job_id=job.id, worker_id=alex.worker_profile.id, restaurant_id=restaurant.id,
        applied_at=NOW - timedelta(minutes=30),
    )
    db.add(application)
    db.commit()

    activity = get_activity(db, owner, now=NOW)

    assert [item["type"] for item in activity] == ["application", "job"]
    assert activity[0]["message"] == "Alex applied for Host position"
    assert activity[0]["time"] == "30 minutes ago"
    assert activity[1]["message"] == "Host position was posted"
    assert activity[1]["time"] == "3 hours ago"

    # Both records are the first of their table; entries are keyed by (type, id)
    assert application.id == job.id
    assert [(item["type"], item["id"]) for item in activity] == [
        ("application", application.id),
        ("job", job.id),
    ]


def test_activity_is_capped(client, owner, post_job):
    _, headers = owner
    for i in range(7):
        post_job(title=f"Job {i}")

    assert len(client.get("/api/v1/dashboard/activity", headers=headers).json()) == 5
    assert len(client.get("/api/v1/dashboard/activity?limit=2", headers=headers).json()) == 2


def test_owner_tasks(db, make_user):
    owner = make_user("owner@example.com", Role.RESTAURANT_OWNER)
    alex = make_user("alex@example.com", Role.WORKER, name="Alex")
    restaurant = db.query(Restaurant).filter(Restaurant.owner_id == owner.id).one()

    jobs = [
        Job(
            restaurant_id=restaurant.id, title=title, description="d", hourly_rate=18,
            start_date=NOW, end_date=NOW, created_at=NOW - timedelta(days=age),
        )
        for title, age in (("Host", 3), ("Server", 2), ("Dishwasher", 1))
    ]
    db.add_all(jobs)
    db.flush()
    db.add(Application(
        job_id=jobs[0].id, worker_id=alex.worker_profile.id, restaurant_id=restaurant.id,
    ))
    db.add(ShiftAssignment(
        job_id=jobs[0].id, worker_id=alex.worker_profile.id, restaurant_id=restaurant.id,
        start_time=NOW + timedelta(days=2), end_time=NOW + timedelta(days=2, hours=6),
    ))
    db.commit()

    tasks = get_tasks(db, owner, now=NOW)

    assert [task["title"] for task in tasks] == [
        "Review 1 pending application",
        "Review candidates for Dishwasher position",
        "Review candidates for Server position",
        "Prepare for 1 upcoming shift this week",
    ]
    assert tasks[0]["priority"] == "high"
    assert tasks[0]["due_date"] == NOW + timedelta(days=2)
    assert all(task["completed"] is False for task in tasks)


def test_worker_tasks(db, make_user):
    owner = make_user("owner@example.com", Role.RESTAURANT_OWNER, name="Maria")
    alex = make_user("alex@example.com", Role.WORKER, name="Alex")
    restaurant = db.query(Restaurant).filter(Restaurant.owner_id == owner.id).one()

    job = Job(
        restaurant_id=restaurant.id, title="Line Cook", description="d", hourly_rate=20,
        start_date=NOW, end_date=NOW,
    )
    db.add(job)
    db.flush()
    db.add(Application(job_id=job.id, worker_id=alex.worker_profile.id, restaurant_id=restaurant.id))
    db.add_all([
        ShiftAssignment(
            job_id=job.id, worker_id=alex.worker_profile.id, restaurant_id=restaurant.id,
            start_time=NOW + timedelta(hours=20), end_time=NOW + timedelta(hours=28),
        ),
        ShiftAssignment(
            job_id=job.id, worker_id=alex.worker_profile.id, restaurant_id=restaurant.id,
            start_time=NOW + timedelta(days=5), end_time=NOW + timedelta(days=5, hours=8),
        ),
    ])
    db.commit()

    tasks = get_tasks(db, alex, now=NOW)

    assert [task["id"] for task in tasks][:2] == ["profile-task-1", "app-task-1"]
    assert tasks[1]["title"] == "Follow up on 1 pending application"
    assert tasks[2]["title"] == "Prepare for Line Cook shift at Maria's Restaurant"
    assert tasks[2]["priority"] == "high"
    assert tasks[2]["due_date"] == NOW + timedelta(hours=20)
    assert tasks[-1]["title"] == "Update availability for next month"
    assert len(tasks) == 4


def test_tasks_endpoint(client, worker):
    response = client.get("/api/v1/dashboard/tasks", headers=worker[1])
    assert response.status_code == 200
    assert [task["priority"] for task in response.json()] == ["high", "low"]
