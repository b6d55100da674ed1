import pytest
from bson import ObjectId

from conftest import create_profile


@pytest.fixture
def mirror_university(client, alice, mongo_db):
    body = {"name": "Mirror Institute", "domain": " Mirror.EDU ", "country": "India", "tenantId": "mirror"}
    response = client.post("/api/mirror/universities", json=body, headers=alice["headers"])
    assert response.status_code == 201, response.text
    return response.json()


def test_university_documents(client, alice, mongo_db, mirror_university):
    assert ObjectId.is_valid(mirror_university["id"])
    assert mirror_university["domain"] == "mirror.edu"
    assert mirror_university["tenantId"] == "mirror"
    assert mirror_university["isActive"] is True
    assert "_id" not in mirror_university

    stored = mongo_db["universities"].find_one({"_id": ObjectId(mirror_university["id"])})
    assert stored["adminIds"] == []

    found = client.get("/api/mirror/universities", params={"domain": "MIRROR.edu"}).json()
    assert found["id"] == mirror_university["id"]

    listed = client.get("/api/mirror/universities", params={"search": "institute"}).json()
    assert [u["id"] for u in listed] == [mirror_university["id"]]


def test_university_uniqueness_and_ids(client, alice, mongo_db, mirror_university):
    body = {"name": "Copy", "domain": "mirror.edu", "country": "India", "tenantId": "copy"}
    response = client.post("/api/mirror/universities", json=body, headers=alice["headers"])
    assert response.json()["code"] == "DUPLICATE_DOMAIN"

    response = client.get("/api/mirror/universities", params={"id": "not-an-object-id"})
    assert response.json()["code"] == "INVALID_ID"

    response = client.get("/api/mirror/universities", params={"id": str(ObjectId())})
    assert response.status_code == 404


def test_university_update_and_delete(client, alice, mongo_db, mirror_university):
    doc_id = mirror_university["id"]
    response = client.put(
        "/api/mirror/universities", params={"id": doc_id}, json={"name": "Mirror University"}, headers=alice["headers"]
    )
    assert response.json()["name"] == "Mirror University"
    assert response.json()["domain"] == "mirror.edu"

    response = client.delete("/api/mirror/universities", params={"id": doc_id}, headers=alice["headers"])
    assert response.json()["university"]["name"] == "Mirror University"
    assert mongo_db["universities"].count_documents({}) == 0


def test_connection_documents(client, alice, bob, mongo_db):
    body = {"requesterId": alice["id"], "recipientId": bob["id"], "connectionType": "networking"}
    response = client.post("/api/mirror/connections", json=body, headers=alice["headers"])
    assert response.status_code == 201
    connection = response.json()
    assert connection["status"] == "pending"
    assert connection["requestedAt"] == connection["createdAt"]

    stored = client.get("/api/mirror/connections", params={"id": connection["id"]}).json()
    assert stored["requestedAt"] == connection["requestedAt"]
    assert mongo_db.connections.find_one()["requestedAt"] is not None

    reverse = {"requesterId": bob["id"], "recipientId": alice["id"], "connectionType": "networking"}
    response = client.post("/api/mirror/connections", json=reverse, headers=bob["headers"])
    assert response.json()["code"] == "CONNECTION_ALREADY_EXISTS"

    response = client.post("/api/mirror/connections", json={**body, "requesterId": bob["id"]}, headers=alice["headers"])
    assert response.status_code == 403

    response = client.put(
        "/api/mirror/connections", params={"id": connection["id"]}, json={"status": "accepted"},
        headers=bob["headers"]
    )
    assert response.json()["status"] == "accepted"
    assert response.json()["respondedAt"] is not None

    listed = client.get("/api/mirror/connections", params={"userId": bob["id"]}).json()
    assert [c["id"] for c in listed] == [connection["id"]]

    response = client.delete("/api/mirror/connections", params={"id": connection["id"]}, headers=alice["headers"])
    assert response.json()["deleted"]["id"] == connection["id"]


def test_admin_user_documents(client, admin, alice, mongo_db):
    inserted = mongo_db["users"].insert_one({"name": "Dev Shah", "email": "dev@alumni.edu", "emailVerified": False})
    user_id = str(inserted.inserted_id)
    mongo_db["user_profiles"].insert_one({"userId": user_id, "role": "student"})
    mongo_db["users"].insert_one({"name": "Esha Pal", "email": "esha@alumni.edu", "emailVerified": True})

    assert client.get("/api/mirror/admin/users", headers=alice["headers"]).status_code == 403

    students = client.get("/api/mirror/admin/users", params={"role": "student"}, headers=admin["headers"]).json()
    assert [u["email"] for u in students] == ["dev@alumni.edu"]
    assert students[0]["profile"]["role"] == "student"

    response = client.put(
        "/api/mirror/admin/users", params={"id": user_id}, json={"email": "ESHA@alumni.edu"}, headers=admin["headers"]
    )
    assert response.json()["code"] == "EMAIL_EXISTS"

    response = client.put(
        "/api/mirror/admin/users", params={"id": user_id}, json={"emailVerified": True}, headers=admin["headers"]
    )
    assert response.json()["emailVerified"] is True

    response = client.delete("/api/mirror/admin/users", params={"id": user_id}, headers=admin["headers"])
    assert response.json()["deletedUser"]["profile"]["role"] == "student"
    assert mongo_db["user_profiles"].count_documents({}) == 0

    response = client.delete("/api/mirror/admin/users", headers=admin["headers"])
    assert response.json()["code"] == "MISSING_USER_ID"
