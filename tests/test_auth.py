# tests/test_auth.py

from itsdangerous import URLSafeTimedSerializer

from conftest import auth_headers
from services.auth_tokens import TOKEN_SALT


def register(client, **overrides):
    payload = {
        "name": "Grace Student",
        "email": "Grace@School.test",
        "password": "correct-horse",
        "role": "student",
    }
    payload.update(overrides)
    return client.post("/api/auth/register", json=payload)


def test_register_returns_user_and_token(client):
    response = register(client)

    assert response.status_code == 201
    data = response.get_json()
    assert data["success"] is True
    assert data["user"]["email"] == "grace@school.test"
    assert data["user"]["role"] == "student"
    assert data["token"]


def test_register_duplicate_email(client):
    register(client)
    response = register(client, email="grace@school.test")

    assert response.status_code == 409
    assert response.get_json()["error"] == "User already exists"


def test_register_validation(client):
    assert register(client, email="not-an-email").status_code == 400
    assert register(client, password="short").status_code == 400
    assert register(client, role="admin").status_code == 400
    assert register(client, name="").status_code == 400


def test_login(client):
    register(client)

    ok = client.post("/api/auth/login", json={"email": "grace@school.test", "password": "correct-horse"})
    wrong = client.post("/api/auth/login", json={"email": "grace@school.test", "password": "nope-nope"})

    assert ok.status_code == 200
    assert ok.get_json()["user"]["name"] == "Grace Student"
    assert wrong.status_code == 401
    assert wrong.get_json()["error"] == "Invalid credentials"


def test_token_from_login_authenticates(client, teacher, classroom):
    token = client.post(
        "/api/auth/login", json={"email": "ada@school.test", "password": "password123"}
    ).get_json()["token"]

    response = client.get(f"/api/materials?classroomId={classroom}",
                          headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    assert response.get_json() == []


def test_protected_route_without_token(client, classroom):
    response = client.get(f"/api/materials?classroomId={classroom}")

    assert response.status_code == 401
    assert response.get_json()["error"] == "Unauthorized"


def test_protected_route_with_tampered_token(client, classroom):
    response = client.get(f"/api/materials?classroomId={classroom}",
                          headers={"Authorization": "Bearer not.a.token"})

    assert response.status_code == 401
    assert response.get_json()["error"] == "Invalid token"


def test_token_signed_with_other_key_is_rejected(client, teacher, classroom):
    forged = URLSafeTimedSerializer("someone-elses-key", salt=TOKEN_SALT).dumps(
        {"userId": teacher, "role": "teacher"})

    response = client.get(f"/api/materials?classroomId={classroom}",
                          headers={"Authorization": f"Bearer {forged}"})

    assert response.status_code == 401


def test_expired_token(app, client, teacher, classroom):
    headers = auth_headers(app, teacher)
    app.config["TOKEN_MAX_AGE"] = -1

    response = client.get(f"/api/materials?classroomId={classroom}", headers=headers)

    assert response.status_code == 401
    assert response.get_json()["error"] == "Token expired"
