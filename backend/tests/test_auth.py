from restohire.models import Role


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_register_owner_creates_placeholder_restaurant(client, owner):
    user, headers = owner
    assert user["role"] == "RESTAURANT_OWNER"
    assert user["restaurant_id"] is not None
    assert user["worker_profile_id"] is None

    profile = client.get("/api/v1/restaurant/profile", headers=headers).json()
    assert profile["name"] == "Maria Lopez's Restaurant"


def test_register_worker_creates_empty_profile(client, worker):
    user, headers = worker
    assert user["worker_profile_id"] is not None

    profile = client.get("/api/v1/worker/profile", headers=headers).json()
    assert profile["skills"] == []


def test_register_lowercases_email(client, register):
    user, _ = register("Mixed.Case@Example.com")
    assert user["email"] == "mixed.case@example.com"


def test_register_duplicate_email(client, worker):
    response = client.post(
        "/api/v1/auth/register",
        json={"email": "worker@example.com", "password": "another1", "name": "Dup", "role": "WORKER"},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "User already exists"


def test_register_invalid_input(client):
    response = client.post(
        "/api/v1/auth/register",
        json={"email": "not-an-email", "password": "123", "name": "X", "role": "ADMIN"},
    )
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Invalid input"
    assert len(body["details"]) == 3


def test_login_wrong_password(client, worker):
    response = client.post(
        "/api/v1/auth/login",
        data={"username": "worker@example.com", "password": "wrong-password"},
    )
    assert response.status_code == 401
    assert response.json() == {"error": "Incorrect email or password"}


def test_me_requires_token(client):
    assert client.get("/api/v1/auth/me").status_code == 401

    response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


def test_me_returns_current_user(client, owner):
    user, headers = owner
    me = client.get("/api/v1/auth/me", headers=headers).json()
    assert me["id"] == user["id"]
    assert me["role"] == Role.RESTAURANT_OWNER.value


def test_profiles_are_role_restricted(client, owner, worker):
    _, owner_headers = owner
    _, worker_headers = worker
    assert client.get("/api/v1/worker/profile", headers=owner_headers).status_code == 403
    assert client.get("/api/v1/restaurant/profile", headers=worker_headers).status_code == 403


def test_worker_profile_update_dedupes_skills(client, worker):
    _, headers = worker
    response = client.put(
        "/api/v1/worker/profile",
        json={"skills": ["Grill", "grill", " Prep ", ""], "bio": "Grill cook"},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["skills"] == ["Grill", "Prep"]
    assert response.json()["bio"] == "Grill cook"
