from datetime import datetime, timedelta

import pytest

from conftest import create_user

NEXT_MONTH = (datetime.utcnow() + timedelta(days=30)).isoformat()

SCHOLARSHIP = {
    "title": "Women in Engineering",
    "description": "Tuition support for final-year students",
    "amount": 50000,
    "eligibilityCriteria": "CGPA above 8",
    "applicationDeadline": NEXT_MONTH,
    "category": "merit",
}


def create_scholarship(client, user, **overrides):
    response = client.post("/api/scholarships", json={**SCHOLARSHIP, **overrides}, headers=user["headers"])
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def scholarship(client, alice):
    return create_scholarship(client, alice)


def apply(client, user, scholarship_id, essay="I would like to study further"):
    return client.post(
        "/api/scholarships/applications",
        json={"scholarshipId": scholarship_id, "applicationEssay": essay},
        headers=user["headers"]
    )


def test_create_defaults(scholarship, alice):
    assert scholarship["fundedById"] == alice["id"]
    assert scholarship["status"] == "active"
    assert scholarship["maxRecipients"] == 1
    assert scholarship["currentRecipients"] == 0
    assert scholarship["recurringFrequency"] is None


def test_create_validation(client, alice):
    response = client.post("/api/scholarships", json={"title": "Half"}, headers=alice["headers"])
    assert response.json()["code"] == "MISSING_REQUIRED_FIELDS"

    response = client.post("/api/scholarships", json={**SCHOLARSHIP, "amount": -5}, headers=alice["headers"])
    assert response.json()["code"] == "INVALID_AMOUNT"

    past = (datetime.utcnow() - timedelta(days=1)).isoformat()
    response = client.post(
        "/api/scholarships", json={**SCHOLARSHIP, "applicationDeadline": past}, headers=alice["headers"]
    )
    assert response.json()["code"] == "INVALID_DEADLINE"

    response = client.post("/api/scholarships", json={**SCHOLARSHIP, "category": "lottery"}, headers=alice["headers"])
    assert response.json()["code"] == "INVALID_CATEGORY"


def test_get_includes_funder(client, scholarship):
    body = client.get("/api/scholarships", params={"id": scholarship["id"]}).json()
    assert body["funder"]["name"] == "Alice Rao"

    listed = client.get("/api/scholarships", params={"category": "merit"}).json()
    assert [s["id"] for s in listed] == [scholarship["id"]]

    response = client.get("/api/scholarships", params={"id": 404})
    assert response.status_code == 404
    assert response.json()["code"] == "SCHOLARSHIP_NOT_FOUND"


def test_only_funder_may_update_or_delete(client, alice, bob, scholarship):
    response = client.put(
        "/api/scholarships", params={"id": scholarship["id"]}, json={"amount": 1}, headers=bob["headers"]
    )
    assert response.status_code == 403

    response = client.put(
        "/api/scholarships", params={"id": scholarship["id"]}, json={"maxRecipients": 3}, headers=alice["headers"]
    )
    assert response.json()["maxRecipients"] == 3

    response = client.delete("/api/scholarships", params={"id": scholarship["id"]}, headers=alice["headers"])
    assert response.json()["message"] == "Scholarship deleted successfully"


def test_application_rules(client, bob, scholarship):
    response = client.post("/api/scholarships/applications", json={}, headers=bob["headers"])
    assert response.json()["code"] == "MISSING_SCHOLARSHIP_ID"

    response = apply(client, bob, scholarship["id"], essay="  ")
    assert response.json()["code"] == "MISSING_APPLICATION_ESSAY"

    response = apply(client, bob, 999)
    assert response.status_code == 404

    assert apply(client, bob, scholarship["id"]).status_code == 201
    assert apply(client, bob, scholarship["id"]).json()["code"] == "ALREADY_APPLIED"


def test_approvals_are_capped_by_max_recipients(client, alice, bob, scholarship):
    carol = create_user(client, "Carol Das")
    first = apply(client, bob, scholarship["id"]).json()
    second = apply(client, carol, scholarship["id"]).json()

    response = client.put(
        "/api/scholarships/applications", params={"id": first["id"]},
        json={"status": "approved", "reviewScore": 9}, headers=alice["headers"]
    )
    assert response.status_code == 200
    assert response.json()["reviewedById"] == alice["id"]

    response = client.put(
        "/api/scholarships/applications", params={"id": second["id"]},
        json={"status": "approved"}, headers=alice["headers"]
    )
    assert response.json()["code"] == "SCHOLARSHIP_FULL"

    # Withdrawing an approved application frees the slot
    client.delete("/api/scholarships/applications", params={"id": first["id"]}, headers=bob["headers"])
    body = client.get("/api/scholarships", params={"id": scholarship["id"]}).json()
    assert body["currentRecipients"] == 0


def test_applicant_cannot_review_own_application(client, bob, scholarship):
    application = apply(client, bob, scholarship["id"]).json()
    response = client.put(
        "/api/scholarships/applications", params={"id": application["id"]},
        json={"status": "approved", "applicationEssay": "Revised essay"}, headers=bob["headers"]
    )
    assert response.json()["status"] == "pending"
    assert response.json()["applicationEssay"] == "Revised essay"


def test_max_recipients_validation(client, alice, bob):
    for value in (0, -2, "many", None):
        response = client.post(
            "/api/scholarships", json={**SCHOLARSHIP, "maxRecipients": value}, headers=alice["headers"]
        )
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_MAX_RECIPIENTS"

    scholarship = create_scholarship(client, alice, maxRecipients=2)
    carol = create_user(client, "Carol Das")
    for applicant in (bob, carol):
        application = apply(client, applicant, scholarship["id"]).json()
        response = client.put(
            "/api/scholarships/applications", params={"id": application["id"]},
            json={"status": "approved"}, headers=alice["headers"]
        )
        assert response.status_code == 200

    params = {"id": scholarship["id"]}
    response = client.put("/api/scholarships", params=params, json={"maxRecipients": 1}, headers=alice["headers"])
    assert response.status_code == 400
    assert response.json()["code"] == "MAX_RECIPIENTS_TOO_LOW"

    response = client.put("/api/scholarships", params=params, json={"maxRecipients": "4"}, headers=alice["headers"])
    assert response.json()["maxRecipients"] == 4
