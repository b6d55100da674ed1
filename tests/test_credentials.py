import pytest

from alumni_network.api.routes import credential_routes


@pytest.fixture
def credential(client, alice, university):
    body = {
        "universityId": university["id"],
        "credentialType": "degree",
        "title": "B.Tech Computer Science",
        "issueDate": "2020-06-01T00:00:00Z",
    }
    response = client.post("/api/credentials", json=body, headers=alice["headers"])
    assert response.status_code == 201, response.text
    return response.json()


def test_create_sets_issuer_from_university(credential, university):
    assert credential["issuerName"] == university["name"]
    assert credential["isVerifiedOnChain"] is False
    assert credential["ipfsHash"] is None


@pytest.mark.parametrize("body, code", [
    ({"userId": "someone"}, "USER_ID_NOT_ALLOWED"),
    ({}, "MISSING_UNIVERSITY_ID"),
    ({"universityId": 1}, "MISSING_CREDENTIAL_TYPE"),
    ({"universityId": 1, "credentialType": "diploma"}, "INVALID_CREDENTIAL_TYPE"),
    ({"universityId": 1, "credentialType": "exam"}, "MISSING_TITLE"),
    ({"universityId": 1, "credentialType": "exam", "title": "GRE"}, "MISSING_ISSUE_DATE"),
    ({"universityId": 1, "credentialType": "exam", "title": "GRE", "issueDate": "yesterday"}, "INVALID_ISSUE_DATE"),
    ({"universityId": 999, "credentialType": "exam", "title": "GRE", "issueDate": "2021-01-01"}, "UNIVERSITY_NOT_FOUND"),
])
def test_create_validation(client, alice, body, code):
    response = client.post("/api/credentials", json=body, headers=alice["headers"])
    assert response.status_code == 400
    assert response.json()["code"] == code


def test_metadata_is_pinned_to_ipfs(client, alice, university, monkeypatch):
    uploads = []

    def fake_upload(name, data):
        uploads.append((name, data))
        return "ipfs://bafytest"

    monkeypatch.setattr(credential_routes, "upload_json_to_ipfs", fake_upload)
    body = {
        "universityId": university["id"],
        "credentialType": "certificate",
        "title": "Cloud Practitioner",
        "issueDate": "2023-02-01",
        "metadata": {"grade": "A"},
    }
    response = client.post("/api/credentials", json=body, headers=alice["headers"])
    assert response.status_code == 201
    assert response.json()["ipfsHash"] == "ipfs://bafytest"
    assert response.json()["metadata"] == {"grade": "A"}
    assert uploads[0][0].startswith("credential-")
    assert uploads[0][1]["title"] == "Cloud Practitioner"


def test_update_is_owner_only(client, alice, bob, credential):
    response = client.put(
        "/api/credentials", params={"id": credential["id"]}, json={"title": "M.Tech"}, headers=bob["headers"]
    )
    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"

    response = client.put(
        "/api/credentials", params={"id": credential["id"]}, json={"title": "  "}, headers=alice["headers"]
    )
    assert response.json()["code"] == "INVALID_TITLE"

    response = client.put(
        "/api/credentials", params={"id": credential["id"]}, json={"description": "Honours"}, headers=alice["headers"]
    )
    assert response.status_code == 200
    assert response.json()["description"] == "Honours"
    assert response.json()["title"] == "B.Tech Computer Science"


def test_verify_marks_credential_and_notifies(client, alice, credential, monkeypatch):
    calls = []

    def fake_verify(tx_hash, expected_to=None):
        calls.append((tx_hash, expected_to))
        return {"ok": True, "receipt": {"status": 1}}

    monkeypatch.setattr(credential_routes, "verify_transaction_success", fake_verify)
    response = client.post(
        "/api/credentials/verify",
        json={"credentialId": credential["id"], "blockchainTxHash": "  0xabc  "},
        headers=alice["headers"]
    )
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Credential verified on blockchain"
    assert body["credential"]["isVerifiedOnChain"] is True
    assert body["credential"]["blockchainTxHash"] == "0xabc"
    assert calls == [("0xabc", None)]

    notifications = client.get("/api/notifications", headers=alice["headers"]).json()
    assert notifications["unreadCount"] == 1
    assert notifications["notifications"][0]["type"] == "credential"



def test_verify_checks_registry_contract(client, alice, credential, monkeypatch):
    contract = "0x" + "ab" * 20
    seen = {}

    def fake_verify(tx_hash, expected_to=None):
        seen["expected_to"] = expected_to
        return {"ok": False, "reason": "Mismatched recipient (to)"}

    monkeypatch.setattr(credential_routes.settings, "credential_contract_address", contract)
    monkeypatch.setattr(credential_routes, "verify_transaction_success", fake_verify)
    response = client.post(
        "/api/credentials/verify",
        json={"credentialId": credential["id"], "blockchainTxHash": "0xabc"},
        headers=alice["headers"]
    )
    assert seen["expected_to"] == contract
    assert response.json()["error"] == "Blockchain verification failed: Mismatched recipient (to)"

def test_verify_failure_reason(client, alice, credential, monkeypatch):
    monkeypatch.setattr(
        credential_routes, "verify_transaction_success",
        lambda tx_hash, expected_to=None: {"ok": False, "reason": "Transaction not found or failed"}
    )
    response = client.post(
        "/api/credentials/verify",
        json={"credentialId": credential["id"], "blockchainTxHash": "0xdead"},
        headers=alice["headers"]
    )
    assert response.status_code == 400
    assert response.json() == {
        "error": "Blockchain verification failed: Transaction not found or failed",
        "code": "BLOCKCHAIN_VERIFICATION_FAILED"
    }


def test_verify_validation(client, alice):
    response = client.post("/api/credentials/verify", json={}, headers=alice["headers"])
    assert response.json()["code"] == "MISSING_CREDENTIAL_ID"

    response = client.post("/api/credentials/verify", json={"credentialId": 1}, headers=alice["headers"])
    assert response.json()["code"] == "MISSING_BLOCKCHAIN_TX_HASH"

    response = client.post(
        "/api/credentials/verify", json={"credentialId": "abc", "blockchainTxHash": "0x1"}, headers=alice["headers"]
    )
    assert response.json()["code"] == "INVALID_CREDENTIAL_ID"

    response = client.post(
        "/api/credentials/verify", json={"credentialId": 42, "blockchainTxHash": "0x1"}, headers=alice["headers"]
    )
    assert response.status_code == 404
    assert response.json()["code"] == "CREDENTIAL_NOT_FOUND"


def test_delete_returns_row(client, alice, credential):
    response = client.delete("/api/credentials", params={"id": credential["id"]}, headers=alice["headers"])
    assert response.status_code == 200
    assert response.json()["credential"]["id"] == credential["id"]


class FakeRegistry:
    configured = True
    issued = []

    def is_configured(self):
        return self.configured

    def issue_credential(self, student_id, university_id, credential_type, credential_data):
        self.issued.append((student_id, university_id, credential_type, credential_data))
        return {"txHash": "0x" + "ef" * 32, "credentialId": "0x" + "01" * 32, "credentialHash": "0xhash"}

    def network_info(self):
        return {"chainId": 80002, "blockNumber": 42, "contractAddress": None, "isConfigured": self.configured}


def test_issue_on_chain(client, alice, bob, credential, monkeypatch):
    FakeRegistry.issued = []
    monkeypatch.setattr(credential_routes, "CredentialRegistry", FakeRegistry)

    response = client.post("/api/credentials/issue", params={"id": credential["id"]}, headers=bob["headers"])
    assert response.status_code == 404

    response = client.post("/api/credentials/issue", params={"id": credential["id"]}, headers=alice["headers"])
    assert response.status_code == 200
    issued = response.json()["credential"]
    assert issued["isVerifiedOnChain"] is True
    assert issued["blockchainTxHash"] == "0x" + "ef" * 32
    assert issued["metadata"]["blockchainCredentialId"] == "0x" + "01" * 32
    assert FakeRegistry.issued[0][:3] == (alice["id"], str(credential["universityId"]), "degree")

    response = client.post("/api/credentials/issue", params={"id": credential["id"]}, headers=alice["headers"])
    assert response.json()["code"] == "ALREADY_VERIFIED"


def test_issue_needs_configured_registry(client, alice, credential, monkeypatch):
    monkeypatch.setattr(FakeRegistry, "configured", False)
    monkeypatch.setattr(credential_routes, "CredentialRegistry", FakeRegistry)

    response = client.post("/api/credentials/issue", params={"id": credential["id"]}, headers=alice["headers"])
    assert response.status_code == 503
    assert response.json()["code"] == "BLOCKCHAIN_NOT_CONFIGURED"

    assert client.get("/api/credentials/chain").json()["isConfigured"] is False
