import json

import pytest
import requests

from alumni_network.services import ipfs_service


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self):
        return self.payload


def test_skipped_without_token(monkeypatch):
    monkeypatch.setattr(ipfs_service.settings, "nft_storage_token", "")
    assert ipfs_service.upload_json_to_ipfs("credential", {"a": 1}) is None


def test_upload_returns_ipfs_uri(monkeypatch):
    calls = []

    def fake_post(url, headers, data, timeout):
        calls.append({"url": url, "headers": headers, "data": data})
        return FakeResponse({"ok": True, "value": {"cid": "bafy123"}})

    monkeypatch.setattr(ipfs_service.settings, "nft_storage_token", "token-1")
    monkeypatch.setattr(ipfs_service.requests, "post", fake_post)

    uri = ipfs_service.upload_json_to_ipfs("credential-7", {"title": "B.Tech"})
    assert uri == "ipfs://bafy123"
    assert calls[0]["headers"]["Authorization"] == "Bearer token-1"
    assert calls[0]["headers"]["X-Name"] == "credential-7.json"
    assert json.loads(calls[0]["data"]) == {"title": "B.Tech"}


def test_upload_without_cid(monkeypatch):
    monkeypatch.setattr(ipfs_service.settings, "nft_storage_token", "token-1")
    monkeypatch.setattr(ipfs_service.requests, "post", lambda *args, **kwargs: FakeResponse({"ok": True}))
    assert ipfs_service.upload_json_to_ipfs("x.json", {}) is None


def test_http_errors_propagate(monkeypatch):
    monkeypatch.setattr(ipfs_service.settings, "nft_storage_token", "token-1")
    monkeypatch.setattr(ipfs_service.requests, "post", lambda *args, **kwargs: FakeResponse({}, status_code=502))
    with pytest.raises(requests.HTTPError):
        ipfs_service.upload_json_to_ipfs("x", {})
