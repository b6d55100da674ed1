import pytest


@pytest.fixture
def post(client, alice):
    response = client.post("/api/posts", json={"content": "Started at a new company!"}, headers=alice["headers"])
    assert response.status_code == 201, response.text
    return response.json()


def test_create_post(post, alice):
    assert post["userId"] == alice["id"]
    assert post["likesCount"] == 0
    assert post["author"]["name"] == "Alice Rao"


def test_create_validation(client, alice):
    response = client.post("/api/posts", json={"content": "   "}, headers=alice["headers"])
    assert response.json()["code"] == "MISSING_CONTENT"

    response = client.post(
        "/api/posts", json={"mediaDataUrl": "data:audio/mp3;base64,AAA", "mediaType": "audio"},
        headers=alice["headers"]
    )
    assert response.json()["code"] == "INVALID_MEDIA_TYPE"


def test_media_only_post(client, alice):
    response = client.post(
        "/api/posts", json={"mediaDataUrl": "data:image/png;base64,iVBOR", "mediaType": "image"},
        headers=alice["headers"]
    )
    body = response.json()
    assert body["content"] is None
    assert body["mediaUrl"] == "data:image/png;base64,iVBOR"


def test_feed_is_newest_first(client, alice, bob, post):
    client.post("/api/posts", json={"content": "Hiring interns"}, headers=bob["headers"])

    feed = client.get("/api/posts").json()
    assert [p["content"] for p in feed] == ["Hiring interns", "Started at a new company!"]

    mine = client.get("/api/posts", params={"userId": alice["id"]}).json()
    assert [p["id"] for p in mine] == [post["id"]]


def test_like_toggles(client, bob, post):
    response = client.post(f"/api/posts/{post['id']}/like", headers=bob["headers"])
    assert response.json() == {"liked": True, "likesCount": 1}

    response = client.post(f"/api/posts/{post['id']}/like", headers=bob["headers"])
    assert response.json() == {"liked": False, "likesCount": 0}

    response = client.post("/api/posts/999/like", headers=bob["headers"])
    assert response.json()["code"] == "POST_NOT_FOUND"


def test_comments(client, alice, bob, post):
    response = client.post(f"/api/posts/{post['id']}/comments", json={"text": " "}, headers=bob["headers"])
    assert response.json()["code"] == "MISSING_TEXT"

    client.post(f"/api/posts/{post['id']}/comments", json={"text": "Congrats!"}, headers=bob["headers"])
    client.post(f"/api/posts/{post['id']}/comments", json={"text": "Thanks"}, headers=alice["headers"])

    comments = client.get(f"/api/posts/{post['id']}/comments").json()
    assert [(c["text"], c["author"]["name"]) for c in comments] == [("Congrats!", "Bob Iyer"), ("Thanks", "Alice Rao")]

    feed = client.get("/api/posts").json()
    assert feed[0]["commentsCount"] == 2


def test_only_author_may_delete(client, alice, bob, post):
    response = client.delete("/api/posts", params={"id": post["id"]}, headers=bob["headers"])
    assert response.status_code == 403

    response = client.delete("/api/posts", params={"id": post["id"]}, headers=alice["headers"])
    assert response.json()["message"] == "Post deleted successfully"
    assert client.get("/api/posts").json() == []
