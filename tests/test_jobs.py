import pytest

from conftest import create_profile, create_user

JOB = {
    "title": "Backend Engineer",
    "description": "Build APIs",
    "company": "Zoho",
    "location": "Chennai",
    "jobType": "full-time",
    "experienceLevel": "mid",
    "requirements": "3 years of Python",
    "skills": ["Python", "PostgreSQL"],
}


def create_job(client, user, **overrides):
    response = client.post("/api/jobs", json={**JOB, **overrides}, headers=user["headers"])
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def job(client, alice):
    create_profile(client, alice, role="alumni", company="Zoho", currentPosition="Staff Engineer")
    return create_job(client, alice)


def test_create_defaults(job, alice):
    assert job["postedById"] == alice["id"]
    assert job["status"] == "active"
    assert job["applicationCount"] == 0
    assert job["currency"] == "INR"


def test_create_validation(client, alice):
    response = client.post("/api/jobs", json={"title": "Only title"}, headers=alice["headers"])
    assert response.json()["code"] == "MISSING_REQUIRED_FIELDS"

    response = client.post("/api/jobs", json={**JOB, "jobType": "gig"}, headers=alice["headers"])
    assert response.json()["code"] == "INVALID_JOB_TYPE"

    response = client.post("/api/jobs", json={**JOB, "experienceLevel": "guru"}, headers=alice["headers"])
    assert response.json()["code"] == "INVALID_EXPERIENCE_LEVEL"


def test_get_by_id_counts_view_and_includes_poster(client, job):
    client.get("/api/jobs", params={"id": job["id"]})
    response = client.get("/api/jobs", params={"id": job["id"]})
    body = response.json()
    assert body["viewCount"] == 2
    assert body["poster"]["name"] == "Alice Rao"
    assert body["posterProfile"]["company"] == "Zoho"


def test_list_shows_active_jobs_only(client, alice, job):
    create_job(client, alice, title="Old role", status="closed")
    response = client.get("/api/jobs")
    assert [j["title"] for j in response.json()] == ["Backend Engineer"]

    response = client.get("/api/jobs", params={"search": "old"})
    assert response.json() == []


def test_update_and_delete_are_poster_only(client, alice, bob, job):
    response = client.put("/api/jobs", params={"id": job["id"]}, json={"title": "Hacked"}, headers=bob["headers"])
    assert response.status_code == 403
    assert response.json()["code"] == "UNAUTHORIZED"

    response = client.put("/api/jobs", params={"id": job["id"]}, json={"isRemote": True}, headers=alice["headers"])
    assert response.json()["isRemote"] is True
    assert response.json()["title"] == "Backend Engineer"

    response = client.delete("/api/jobs", params={"id": job["id"]}, headers=alice["headers"])
    assert response.json()["message"] == "Job deleted successfully"


def test_application_flow(client, alice, bob, job):
    response = client.post(
        "/api/job-applications", json={"jobId": job["id"], "coverLetter": "Hire me"}, headers=bob["headers"]
    )
    assert response.status_code == 201
    application = response.json()
    assert application["status"] == "pending"

    response = client.post("/api/jobs/applications", json={"jobId": job["id"]}, headers=bob["headers"])
    assert response.json()["code"] == "ALREADY_APPLIED"

    assert client.get("/api/jobs", params={"id": job["id"]}).json()["applicationCount"] == 1

    notifications = client.get("/api/notifications", headers=alice["headers"]).json()["notifications"]
    assert notifications[0]["message"] == "Bob Iyer applied for Backend Engineer"

    listed = client.get("/api/jobs/applications", params={"jobId": job["id"]}).json()
    assert listed[0]["applicant"]["email"] == bob["email"]
    assert listed[0]["job"]["title"] == "Backend Engineer"

    response = client.put(
        "/api/job-applications", params={"id": application["id"]}, json={"status": "shortlisted"},
        headers=alice["headers"]
    )
    assert response.json()["status"] == "shortlisted"
    assert response.json()["reviewedAt"] is not None

    notifications = client.get("/api/notifications", headers=bob["headers"]).json()["notifications"]
    assert notifications[0]["message"] == "Congratulations! You have been shortlisted for Backend Engineer"

    response = client.delete("/api/job-applications", params={"id": application["id"]}, headers=alice["headers"])
    assert response.status_code == 403

    response = client.delete("/api/job-applications", params={"id": application["id"]}, headers=bob["headers"])
    assert response.json()["message"] == "Application deleted successfully"
    assert client.get("/api/jobs", params={"id": job["id"]}).json()["applicationCount"] == 0


def test_cannot_apply_to_closed_or_missing_job(client, alice, bob):
    closed = create_job(client, alice, status="closed")
    response = client.post("/api/job-applications", json={"jobId": closed["id"]}, headers=bob["headers"])
    assert response.json()["code"] == "JOB_CLOSED"

    response = client.post("/api/job-applications", json={"jobId": 999}, headers=bob["headers"])
    assert response.status_code == 404
    assert response.json()["code"] == "JOB_NOT_FOUND"

    response = client.post("/api/job-applications", json={}, headers=bob["headers"])
    assert response.json()["code"] == "MISSING_JOB_ID"


def test_stranger_cannot_update_application(client, alice, bob, job):
    application = client.post("/api/job-applications", json={"jobId": job["id"]}, headers=bob["headers"]).json()
    carol = create_user(client, "Carol Das")
    response = client.put(
        "/api/job-applications", params={"id": application["id"]}, json={"status": "hired"}, headers=carol["headers"]
    )
    assert response.status_code == 403
    assert response.json()["code"] == "UNAUTHORIZED"
