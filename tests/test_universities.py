from conftest import create_university


def test_create_and_fetch_by_id_and_domain(client, alice):
    created = create_university(client, alice["headers"], domain="IIT.Example.edu", tenantId="iit")
    assert created["domain"] == "iit.example.edu"
    assert created["isActive"] is True
    assert created["adminIds"] == []
    assert created["settings"] == {}

    response = client.get("/api/universities", params={"id": created["id"]})
    assert response.status_code == 200
    assert response.json()["name"] == "Alumni University"

    response = client.get("/api/universities", params={"domain": "iit.example.edu"})
    assert response.json()["id"] == created["id"]


def test_missing_fields(client, alice):
    body = {"name": "X", "domain": "x.edu", "country": "India"}
    response = client.post("/api/universities", json=body, headers=alice["headers"])
    assert response.status_code == 400
    assert response.json()["code"] == "MISSING_TENANT_ID"

    response = client.post("/api/universities", json={"domain": "x.edu"}, headers=alice["headers"])
    assert response.json()["code"] == "MISSING_NAME"


def test_invalid_domain_and_duplicates(client, alice):
    body = {"name": "X", "domain": "not a domain", "country": "India", "tenantId": "x"}
    response = client.post("/api/universities", json=body, headers=alice["headers"])
    assert response.json()["code"] == "INVALID_DOMAIN_FORMAT"

    create_university(client, alice["headers"], domain="dup.edu", tenantId="dup")
    body = {"name": "Y", "domain": "dup.edu", "country": "India", "tenantId": "other"}
    response = client.post("/api/universities", json=body, headers=alice["headers"])
    assert response.status_code == 400
    assert response.json()["code"] == "DUPLICATE_DOMAIN"

    body = {"name": "Y", "domain": "fresh.edu", "country": "India", "tenantId": "dup"}
    response = client.post("/api/universities", json=body, headers=alice["headers"])
    assert response.json()["code"] == "DUPLICATE_TENANT_ID"


def test_post_requires_auth(client):
    body = {"name": "X", "domain": "x.edu", "country": "India", "tenantId": "x"}
    response = client.post("/api/universities", json=body)
    assert response.status_code == 401


def test_put_updates_only_sent_fields(client, alice, university):
    response = client.put(
        "/api/universities", params={"id": university["id"]},
        json={"description": "Founded 1950"}, headers=alice["headers"]
    )
    assert response.status_code == 200
    body = response.json()
    assert body["description"] == "Founded 1950"
    assert body["name"] == university["name"]
    assert body["domain"] == university["domain"]


def test_list_filters(client, alice):
    create_university(client, alice["headers"], domain="a.edu", tenantId="a", name="Alpha Institute")
    create_university(client, alice["headers"], domain="b.edu", tenantId="b", name="Beta College", country="Kenya")

    response = client.get("/api/universities", params={"country": "Kenya"})
    assert [u["name"] for u in response.json()] == ["Beta College"]

    response = client.get("/api/universities", params={"search": "alpha"})
    assert [u["name"] for u in response.json()] == ["Alpha Institute"]


def test_invalid_id_and_not_found(client, alice):
    response = client.get("/api/universities", params={"id": "abc"})
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_ID"

    response = client.get("/api/universities", params={"id": 999})
    assert response.status_code == 404
    assert response.json()["code"] == "UNIVERSITY_NOT_FOUND"

    response = client.delete("/api/universities", headers=alice["headers"])
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_ID"


def test_delete_returns_row(client, alice, university):
    response = client.delete("/api/universities", params={"id": university["id"]}, headers=alice["headers"])
    assert response.status_code == 200
    assert response.json()["message"] == "University deleted successfully"
    assert response.json()["university"]["id"] == university["id"]

    response = client.get("/api/universities", params={"id": university["id"]})
    assert response.status_code == 404
