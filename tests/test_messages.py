import pytest

from conftest import create_user


def start_conversation(client, user, participants, **fields):
    response = client.post(
        "/api/messages/conversations", json={"participants": participants, **fields}, headers=user["headers"]
    )
    return response


@pytest.fixture
def conversation(client, alice, bob):
    response = start_conversation(client, alice, [alice["id"], bob["id"]])
    assert response.status_code == 201, response.text
    return response.json()


def send(client, sender, receiver, conversation_id, **fields):
    body = {
        "senderId": sender["id"],
        "receiverId": receiver["id"],
        "conversationId": conversation_id,
        "encryptedContent": "U2FsdGVkX1+abc",
        "encryptedKey": "key-for-receiver",
        **fields,
    }
    return client.post("/api/messages", json=body, headers=sender["headers"])


def test_conversation_rules(client, alice, bob):
    assert start_conversation(client, alice, None).json()["code"] == "MISSING_PARTICIPANTS"
    assert start_conversation(client, alice, "x").json()["code"] == "INVALID_PARTICIPANTS_TYPE"
    assert start_conversation(client, alice, [alice["id"]]).json()["code"] == "INSUFFICIENT_PARTICIPANTS"

    carol = create_user(client, "Carol Das")
    group = [alice["id"], bob["id"], carol["id"]]
    assert start_conversation(client, alice, group).json()["code"] == "MISSING_GROUP_NAME"

    response = start_conversation(client, alice, group, groupName="Batch of 2015")
    assert response.json()["isGroupChat"] is True


def test_send_message_updates_preview_and_notifies(client, alice, bob, conversation):
    response = send(client, alice, bob, conversation["id"], messageType="image")
    assert response.status_code == 201
    message = response.json()
    assert message["isRead"] is False

    body = client.get("/api/messages/conversations", params={"id": conversation["id"]}).json()
    assert body["lastMessage"] == "Image"
    assert body["lastMessageAt"] is not None

    notifications = client.get("/api/notifications", headers=bob["headers"]).json()["notifications"]
    assert notifications[0]["message"] == "Alice Rao sent you a message"

    listed = client.get("/api/messages", params={"conversationId": conversation["id"]}).json()
    assert [m["id"] for m in listed] == [message["id"]]


def test_send_message_validation(client, alice, bob, conversation):
    response = send(client, bob, alice, conversation["id"], senderId=alice["id"])
    assert response.status_code == 403
    assert response.json()["code"] == "UNAUTHORIZED_SENDER"

    assert send(client, alice, bob, conversation["id"], encryptedKey="").json()["code"] == "MISSING_ENCRYPTED_KEY"
    assert send(client, alice, bob, conversation["id"], messageType="video").json()["code"] == "INVALID_MESSAGE_TYPE"
    assert send(client, alice, bob, 999).json()["code"] == "CONVERSATION_NOT_FOUND"

    carol = create_user(client, "Carol Das")
    assert send(client, carol, bob, conversation["id"]).json()["code"] == "NOT_PARTICIPANT"
    assert send(client, alice, carol, conversation["id"]).json()["code"] == "INVALID_RECEIVER"


def test_mark_read_is_receiver_only(client, alice, bob, conversation):
    message = send(client, alice, bob, conversation["id"]).json()

    response = client.put("/api/messages", params={"id": message["id"]}, headers=alice["headers"])
    assert response.status_code == 404

    response = client.put("/api/messages", params={"id": message["id"]}, headers=bob["headers"])
    assert response.json()["isRead"] is True
    assert response.json()["readAt"] is not None


def test_delete_message(client, alice, bob, conversation):
    message = send(client, alice, bob, conversation["id"]).json()
    carol = create_user(client, "Carol Das")

    response = client.delete("/api/messages", params={"id": message["id"]}, headers=carol["headers"])
    assert response.json()["code"] == "UNAUTHORIZED_DELETE"

    response = client.delete("/api/messages", params={"id": message["id"]}, headers=bob["headers"])
    assert response.json()["deletedMessage"]["id"] == message["id"]


def test_list_conversations_for_user(client, alice, bob, conversation):
    carol = create_user(client, "Carol Das")
    start_conversation(client, carol, [carol["id"], bob["id"]])

    rows = client.get("/api/messages/conversations", params={"userId": alice["id"]}).json()
    assert [c["id"] for c in rows] == [conversation["id"]]
    assert len(client.get("/api/messages/conversations", params={"userId": bob["id"]}).json()) == 2


def test_deleting_conversation_removes_messages(client, alice, bob, conversation):
    message = send(client, alice, bob, conversation["id"]).json()
    response = client.delete("/api/messages/conversations", params={"id": conversation["id"]}, headers=alice["headers"])
    assert response.json()["message"] == "Conversation deleted successfully"
    assert client.get("/api/messages", params={"id": message["id"]}).status_code == 404
