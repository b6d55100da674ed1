def notify_user(client, sender, recipient, **fields):
    body = {
        "userId": recipient["id"],
        "type": "job",
        "title": "New job posted",
        "message": "A role matching your skills was posted",
        **fields,
    }
    return client.post("/api/notifications", json=body, headers=sender["headers"])


def test_create_and_list_with_unread_count(client, alice, bob):
    response = notify_user(client, alice, bob, metadata={"jobId": 7}, actionUrl="/dashboard/jobs/7")
    assert response.status_code == 201
    created = response.json()
    assert created["isRead"] is False
    assert created["metadata"] == {"jobId": 7}

    notify_user(client, alice, bob, type="event", title="Meetup")

    body = client.get("/api/notifications", headers=bob["headers"]).json()
    assert body["unreadCount"] == 2
    assert [n["title"] for n in body["notifications"]] == ["Meetup", "New job posted"]

    body = client.get("/api/notifications", params={"type": "event"}, headers=bob["headers"]).json()
    assert len(body["notifications"]) == 1

    assert client.get("/api/notifications", headers=alice["headers"]).json()["notifications"] == []


def test_create_validation(client, alice, bob):
    assert notify_user(client, alice, bob, title="").json()["code"] == "MISSING_REQUIRED_FIELDS"
    assert notify_user(client, alice, bob, type="spam").json()["code"] == "INVALID_TYPE"


def test_requires_authentication(client):
    response = client.get("/api/notifications")
    assert response.status_code == 401
    assert response.json()["code"] == "AUTHENTICATION_REQUIRED"


def test_read_state_actions(client, alice, bob):
    first = notify_user(client, alice, bob).json()
    notify_user(client, alice, bob)

    response = client.put("/api/notifications", params={"action": "archive"}, headers=bob["headers"])
    assert response.json()["code"] == "INVALID_ACTION"

    response = client.put(
        "/api/notifications", params={"action": "mark-read", "id": first["id"]}, headers=bob["headers"]
    )
    assert response.json()["isRead"] is True
    assert response.json()["readAt"] is not None

    response = client.put(
        "/api/notifications", params={"action": "mark-unread", "id": first["id"]}, headers=bob["headers"]
    )
    assert response.json()["readAt"] is None

    response = client.put("/api/notifications", params={"action": "mark-all-read"}, headers=bob["headers"])
    assert response.json() == {"message": "All notifications marked as read"}
    assert client.get("/api/notifications", headers=bob["headers"]).json()["unreadCount"] == 0


def test_cannot_touch_someone_elses_notification(client, alice, bob):
    created = notify_user(client, alice, bob).json()

    response = client.put(
        "/api/notifications", params={"action": "mark-read", "id": created["id"]}, headers=alice["headers"]
    )
    assert response.status_code == 404
    assert response.json()["code"] == "NOTIFICATION_NOT_FOUND"

    response = client.delete("/api/notifications", params={"id": created["id"]}, headers=alice["headers"])
    assert response.status_code == 404

    response = client.delete("/api/notifications", params={"id": created["id"]}, headers=bob["headers"])
    assert response.json()["message"] == "Notification deleted successfully"
