import pytest

from alumni_network.services import newsletter_service


@pytest.fixture
def newsletter_body(alice, university):
    return {
        "universityId": university["id"],
        "title": "Spring Update",
        "content": "Campus news.\n\nAlumni stories.",
        "createdBy": alice["id"],
    }


def test_create_defaults_to_draft(client, alice, newsletter_body):
    response = client.post("/api/newsletters", json=newsletter_body, headers=alice["headers"])
    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "draft"
    assert body["recipientCount"] == 0
    assert body["openRate"] == 0


def test_create_validation(client, alice, newsletter_body):
    response = client.post(
        "/api/newsletters", json={**newsletter_body, "userId": alice["id"]}, headers=alice["headers"]
    )
    assert response.json()["code"] == "USER_ID_NOT_ALLOWED"

    response = client.post("/api/newsletters", json={**newsletter_body, "title": " "}, headers=alice["headers"])
    assert response.json()["code"] == "MISSING_REQUIRED_FIELD"

    response = client.post(
        "/api/newsletters", json={**newsletter_body, "status": "scheduled"}, headers=alice["headers"]
    )
    assert response.json()["code"] == "MISSING_PUBLISH_DATE"

    response = client.post("/api/newsletters", json={**newsletter_body, "openRate": 120}, headers=alice["headers"])
    assert response.json()["code"] == "INVALID_OPEN_RATE"

    response = client.post(
        "/api/newsletters", json={**newsletter_body, "recipientCount": -1}, headers=alice["headers"]
    )
    assert response.json()["code"] == "INVALID_RECIPIENT_COUNT"


def test_update_and_filter(client, alice, newsletter_body):
    created = client.post("/api/newsletters", json=newsletter_body, headers=alice["headers"]).json()

    response = client.put(
        "/api/newsletters", params={"id": created["id"]},
        json={"status": "scheduled", "publishDate": "2030-01-15T09:00:00Z"}, headers=alice["headers"]
    )
    assert response.json()["status"] == "scheduled"
    assert response.json()["publishDate"].startswith("2030-01-15T09:00:00")

    assert len(client.get("/api/newsletters", params={"status": "scheduled"}).json()) == 1
    assert client.get("/api/newsletters", params={"status": "draft"}).json() == []

    response = client.delete("/api/newsletters", params={"id": created["id"]}, headers=alice["headers"])
    assert response.json()["deleted"]["title"] == "Spring Update"
    assert client.get("/api/newsletters", params={"id": created["id"]}).status_code == 404


def test_generate_uses_template_without_api_key(client, alice, university):
    response = client.post(
        "/api/newsletters/generate",
        json={"universityId": university["id"], "createdBy": alice["id"], "aiPrompt": "Homecoming week"},
        headers=alice["headers"]
    )
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    newsletter = body["newsletter"]
    assert newsletter["status"] == "draft"
    assert newsletter["aiPrompt"] == "Homecoming week"
    assert "[Based on prompt: Homecoming week]" in newsletter["content"]
    assert newsletter["htmlContent"].startswith("<!DOCTYPE html>")
    assert newsletter["title"].startswith("Newsletter for ")


def test_generate_falls_back_when_model_fails(client, alice, university, monkeypatch):
    class BrokenClient:
        def draft_newsletter(self, ai_prompt):
            raise RuntimeError("upstream timeout")

    monkeypatch.setattr(newsletter_service.settings, "deepseek_api_key", "sk-test")
    monkeypatch.setattr(newsletter_service, "get_deepseek_client", lambda: BrokenClient())

    response = client.post(
        "/api/newsletters/generate",
        json={"universityId": university["id"], "createdBy": alice["id"], "aiPrompt": "Reunion", "title": "May"},
        headers=alice["headers"]
    )
    newsletter = response.json()["newsletter"]
    assert newsletter["title"] == "May"
    assert "[Based on prompt: Reunion]" in newsletter["content"]


def test_generate_requires_prompt(client, alice, university):
    response = client.post(
        "/api/newsletters/generate",
        json={"universityId": university["id"], "createdBy": alice["id"]},
        headers=alice["headers"]
    )
    assert response.json()["code"] == "MISSING_AI_PROMPT"
