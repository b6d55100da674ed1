from types import SimpleNamespace

import pytest
from web3 import Web3
from web3.exceptions import TransactionNotFound

from alumni_network.services.blockchain_service import (
    CREDENTIAL_ABI, CredentialRegistry, generate_credential_hash, verify_transaction_success
)

CONTRACT = "0x" + "ab" * 20
SIGNER = "0x" + "cd" * 20
TX_HASH = "0x" + "12" * 32


def fake_w3(receipt=None, missing=False):
    def get_transaction_receipt(tx_hash):
        if missing:
            raise TransactionNotFound(f"Transaction with hash {tx_hash} not found")
        return receipt

    return SimpleNamespace(eth=SimpleNamespace(get_transaction_receipt=get_transaction_receipt))


def test_successful_transaction():
    receipt = {"status": 1, "to": CONTRACT.upper().replace("0X", "0x"), "from": SIGNER}
    result = verify_transaction_success(TX_HASH, expected_to=CONTRACT, expected_from=SIGNER, w3=fake_w3(receipt))
    assert result["ok"] is True
    assert result["receipt"] is receipt


@pytest.mark.parametrize("receipt, missing", [(None, True), (None, False), ({"status": 0}, False)])
def test_missing_or_failed_transaction(receipt, missing):
    result = verify_transaction_success(TX_HASH, w3=fake_w3(receipt, missing))
    assert result == {"ok": False, "reason": "Transaction not found or failed"}


def test_address_mismatches():
    receipt = {"status": 1, "to": "0x" + "00" * 20, "from": SIGNER}
    result = verify_transaction_success(TX_HASH, expected_to=CONTRACT, w3=fake_w3(receipt))
    assert result["reason"] == "Mismatched recipient (to)"

    receipt = {"status": 1, "to": CONTRACT, "from": None}
    result = verify_transaction_success(TX_HASH, expected_to=CONTRACT, expected_from=SIGNER, w3=fake_w3(receipt))
    assert result["reason"] == "Mismatched sender (from)"


def test_expected_event_missing_from_logs():
    w3 = fake_w3({"status": 1, "to": CONTRACT, "from": SIGNER, "logs": []})
    w3.eth.contract = Web3(Web3.HTTPProvider("http://127.0.0.1:1")).eth.contract

    result = verify_transaction_success(TX_HASH, event=(CREDENTIAL_ABI, "CredentialIssued"), w3=w3)
    assert result == {"ok": False, "reason": "Expected event not found in logs"}


def test_credential_hash_ignores_key_order():
    first = generate_credential_hash({"title": "B.Tech", "year": 2020})
    second = generate_credential_hash({"year": 2020, "title": "B.Tech"})
    assert first == second
    assert first.startswith("0x") and len(first) == 66
    assert generate_credential_hash({"title": "M.Tech", "year": 2020}) != first


def test_registry_configuration():
    w3 = Web3(Web3.HTTPProvider("http://127.0.0.1:1"))
    configured = CredentialRegistry(w3=w3, contract_address="0x" + "11" * 20, private_key="0x" + "01" * 32)
    assert configured.is_configured() is True
    assert configured.account.address.startswith("0x")

    read_only = CredentialRegistry(w3=w3, contract_address="0x" + "11" * 20, private_key="")
    assert read_only.is_configured() is False

    empty = CredentialRegistry(w3=w3, contract_address="", private_key="")
    with pytest.raises(RuntimeError):
        empty.verify_credential("0x" + "00" * 32)
    with pytest.raises(RuntimeError):
        empty.revoke_credential("0x" + "00" * 32)
