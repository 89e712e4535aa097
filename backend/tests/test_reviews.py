from restohire.models import Role


def test_owner_reviews_worker(client, owner, worker):
    worker_user, worker_headers = worker
    response = client.post(
        "/api/v1/reviews",
        json={
            "target_type": "worker",
            "target_id": worker_user["worker_profile_id"],
            "rating": 5,
            "comment": "Reliable and fast",
        },
        headers=owner[1],
    )
    assert response.status_code == 200
    assert response.json()["restaurant_name"] == "Maria Lopez's Restaurant"

    notification = client.get("/api/v1/notifications", headers=worker_headers).json()["notifications"][0]
    assert notification["type"] == "NEW_REVIEW"
    assert notification["message"] == "Maria Lopez's Restaurant left you a 5-star review"


def test_second_review_edits_the_first(client, owner, worker):
    worker_user, worker_headers = worker
    payload = {"target_type": "worker", "target_id": worker_user["worker_profile_id"], "rating": 2}
    first = client.post("/api/v1/reviews", json=payload, headers=owner[1]).json()
    second = client.post("/api/v1/reviews", json={**payload, "rating": 4}, headers=owner[1]).json()

    assert first["id"] == second["id"]
    listing = client.get(
        f"/api/v1/reviews?target_type=worker&target_id={worker_user['worker_profile_id']}"
    ).json()
    assert listing["total_reviews"] == 1
    assert listing["average_rating"] == 4.0
    assert len(client.get("/api/v1/notifications", headers=worker_headers).json()["notifications"]) == 1


def test_average_rating_and_private_reviews(client, register, owner):
    restaurant_id = owner[0]["restaurant_id"]
    ratings = [(5, True), (4, True), (4, True), (1, False)]
    for i, (rating, is_public) in enumerate(ratings):
        _, headers = register(f"w{i}@example.com", Role.WORKER)
        client.post(
            "/api/v1/reviews",
            json={
                "target_type": "restaurant",
                "target_id": restaurant_id,
                "rating": rating,
                "is_public": is_public,
            },
            headers=headers,
        )

    listing = client.get(f"/api/v1/reviews?target_type=restaurant&target_id={restaurant_id}").json()
    assert listing["total_reviews"] == 3
    assert listing["average_rating"] == 4.3


def test_review_role_rules(client, owner, worker):
    worker_user, worker_headers = worker
    assert client.post(
        "/api/v1/reviews",
        json={"target_type": "worker", "target_id": worker_user["worker_profile_id"], "rating": 3},
        headers=worker_headers,
    ).status_code == 403

    assert client.post(
        "/api/v1/reviews",
        json={"target_type": "restaurant", "target_id": owner[0]["restaurant_id"], "rating": 6},
        headers=worker_headers,
    ).status_code == 400

    assert client.post(
        "/api/v1/reviews",
        json={"target_type": "restaurant", "target_id": 999, "rating": 3},
        headers=worker_headers,
    ).status_code == 404
