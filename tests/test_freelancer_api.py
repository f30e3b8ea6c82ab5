import pytest
from fastapi.testclient import TestClient

from backend.app.db.base import Base
from backend.app.db.session import engine
from backend.app.main import app


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def register_and_login(client: TestClient, email: str, password: str) -> str:
    client.post("/auth/register", json={"email": email, "password": password})
    resp = client.post("/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200
    return resp.json()["access_token"]


PROFILE = {"name": "Ada Lovelace", "email": "ada@example.com", "address": "1 Engine Way"}


def test_profile_missing_until_saved():
    client = TestClient(app)
    token = register_and_login(client, "ada@login.com", "secret")
    resp = client.get("/freelancer/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Freelancer not found"


def test_put_creates_then_updates_profile():
    client = TestClient(app)
    token = register_and_login(client, "ada@login.com", "secret")
    headers = {"Authorization": f"Bearer {token}"}

    created = client.put("/freelancer/me", json=PROFILE, headers=headers)
    assert created.status_code == 200
    profile_id = created.json()["id"]

    updated = client.put("/freelancer/me", json={**PROFILE, "phone": "555-0100"}, headers=headers)
    assert updated.status_code == 200
    assert updated.json()["id"] == profile_id
    assert updated.json()["phone"] == "555-0100"

    fetched = client.get("/freelancer/me", headers=headers)
    assert fetched.json()["name"] == "Ada Lovelace"


def test_invalid_profile_returns_400():
    client = TestClient(app)
    token = register_and_login(client, "ada@login.com", "secret")
    resp = client.put(
        "/freelancer/me",
        json={**PROFILE, "email": "not-an-email"},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invalid email format"


def test_duplicate_profile_email_returns_409():
    client = TestClient(app)
    first = register_and_login(client, "one@login.com", "secret")
    second = register_and_login(client, "two@login.com", "secret")
    assert client.put("/freelancer/me", json=PROFILE, headers={"Authorization": f"Bearer {first}"}).status_code == 200
    resp = client.put("/freelancer/me", json=PROFILE, headers={"Authorization": f"Bearer {second}"})
    assert resp.status_code == 409
    assert resp.json()["detail"] == "A freelancer with this email already exists"


def test_profile_requires_auth():
    client = TestClient(app)
    assert client.get("/freelancer/me").status_code == 401
    assert client.put("/freelancer/me", json=PROFILE).status_code == 401
