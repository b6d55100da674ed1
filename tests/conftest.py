"""
Shared fixtures.

The app runs against an in-memory SQLite database; tables are created and
dropped around every test. External services are switched off through the
environment before the package is imported.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["NFT_STORAGE_TOKEN"] = ""
os.environ["DEEPSEEK_API_KEY"] = ""
os.environ["CREDENTIAL_CONTRACT_ADDRESS"] = ""
os.environ["UNIVERSITY_PRIVATE_KEY"] = ""

import mongomock
import pytest
from fastapi.testclient import TestClient

from alumni_network.db import mongodb
from alumni_network.db.models import Base, UserProfile
from alumni_network.db.postgres import engine, get_db_session
from alumni_network.main import app

PASSWORD = "password123"


@pytest.fixture(autouse=True)
def database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def mongo_db(monkeypatch):
    db = mongomock.MongoClient()["alumni_docs_test"]
    monkeypatch.setattr(mongodb, "_db", db)
    return db


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def create_user(client, name: str, email: str = None) -> dict:
    """Register and log in; returns {"id", "name", "email", "token", "headers"}."""
    email = email or f"{name.lower().replace(' ', '.')}@alumni.edu"
    response = client.post("/api/auth/register", json={"name": name, "email": email, "password": PASSWORD})
    assert response.status_code == 201, response.text
    user_id = response.json()["id"]

    response = client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
    assert response.status_code == 200, response.text
    token = response.json()["accessToken"]
    return {"id": user_id, "name": name, "email": email, "token": token, "headers": auth_headers(token)}


def create_university(client, headers: dict, domain: str = "alumni.edu", **fields) -> dict:
    body = {
        "name": fields.pop("name", "Alumni University"),
        "domain": domain,
        "country": fields.pop("country", "India"),
        "tenantId": fields.pop("tenantId", domain.split(".")[0]),
        **fields
    }
    response = client.post("/api/universities", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def create_profile(client, user: dict, role: str = "alumni", **fields) -> dict:
    body = {"userId": user["id"], "role": role, **fields}
    response = client.post("/api/profiles", json=body, headers=user["headers"])
    assert response.status_code in (200, 201), response.text
    return response.json()


@pytest.fixture
def alice(client):
    return create_user(client, "Alice Rao")


@pytest.fixture
def bob(client):
    return create_user(client, "Bob Iyer")


@pytest.fixture
def university(client, alice):
    return create_university(client, alice["headers"])


@pytest.fixture
def admin(client):
    user = create_user(client, "Admin Kaur")
    with get_db_session() as db:
        db.add(UserProfile(user_id=user["id"], role="university_admin"))
    return user
