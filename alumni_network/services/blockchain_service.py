"""
Blockchain Service - credential anchoring on Polygon (web3.py).

Two pieces:
- verify_transaction_success(): read-only receipt check used by
  POST /api/credentials/verify
- CredentialRegistry: issue / verify / read / revoke against the
  credential registry contract (needs a contract address and signing key)
"""

import json
import logging
from typing import Any, Optional, Tuple

from web3 import Web3
from web3.exceptions import TransactionNotFound
from web3.logs import DISCARD
from web3.middleware import ExtraDataToPOAMiddleware

from alumni_network.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)


CREDENTIAL_ABI = [
    {
        "inputs": [
            {"name": "studentId", "type": "string"},
            {"name": "universityId", "type": "string"},
            {"name": "credentialType", "type": "string"},
            {"name": "credentialHash", "type": "string"}
        ],
        "name": "issueCredential",
        "outputs": [{"name": "", "type": "bytes32"}],
        "stateMutability": "nonpayable",
        "type": "function"
    },
    {
        "inputs": [{"name": "credentialId", "type": "bytes32"}],
        "name": "verifyCredential",
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [{"name": "credentialId", "type": "bytes32"}],
        "name": "getCredential",
        "outputs": [
            {"name": "studentId", "type": "string"},
            {"name": "universityId", "type": "string"},
            {"name": "credentialType", "type": "string"},
            {"name": "credentialHash", "type": "string"},
            {"name": "timestamp", "type": "uint256"},
            {"name": "isValid", "type": "bool"}
        ],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [{"name": "credentialId", "type": "bytes32"}],
        "name": "revokeCredential",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function"
    },
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "name": "credentialId", "type": "bytes32"},
            {"indexed": False, "name": "studentId", "type": "string"},
            {"indexed": False, "name": "universityId", "type": "string"}
        ],
        "name": "CredentialIssued",
        "type": "event"
    },
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "name": "credentialId", "type": "bytes32"}
        ],
        "name": "CredentialRevoked",
        "type": "event"
    }
]


# Global client, created on first use
_w3: Web3 = None


def get_web3() -> Web3:
    """Get or create the JSON-RPC client (singleton pattern)"""
    global _w3
    if _w3 is None:
        _w3 = Web3(Web3.HTTPProvider(settings.blockchain_rpc_url, request_kwargs={"timeout": 15}))
        # Polygon blocks carry extra data that the default validator rejects
        _w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
    return _w3


def _same_address(actual: Optional[str], expected: str) -> bool:
    return bool(actual) and actual.lower() == expected.lower()


def _has_event(w3: Web3, receipt: Any, abi: list, event_name: str) -> bool:
    contract = w3.eth.contract(abi=abi)
    decoded = getattr(contract.events, event_name)().process_receipt(receipt, errors=DISCARD)
    return len(decoded) > 0


def verify_transaction_success(
    tx_hash: str,
    expected_to: Optional[str] = None,
    expected_from: Optional[str] = None,
    event: Optional[Tuple[list, str]] = None,
    w3: Optional[Web3] = None
) -> dict:
    """
    Check that a transaction was mined and succeeded.

    Args:
        tx_hash: 0x-prefixed transaction hash
        expected_to: contract address the transaction must target
        expected_from: address that must have signed it
        event: (abi, event_name) that at least one receipt log must decode to

    Returns:
        {"ok": True, "receipt": receipt} or {"ok": False, "reason": str}
    """
    w3 = w3 or get_web3()

    try:
        receipt = w3.eth.get_transaction_receipt(tx_hash)
    except TransactionNotFound:
        receipt = None

    if not receipt or receipt.get("status") != 1:
        return {"ok": False, "reason": "Transaction not found or failed"}

    if expected_to and not _same_address(receipt.get("to"), expected_to):
        return {"ok": False, "reason": "Mismatched recipient (to)"}

    if expected_from and not _same_address(receipt.get("from"), expected_from):
        return {"ok": False, "reason": "Mismatched sender (from)"}

    if event:
        abi, event_name = event
        if not _has_event(w3, receipt, abi, event_name):
            return {"ok": False, "reason": "Expected event not found in logs"}

    return {"ok": True, "receipt": receipt}


def generate_credential_hash(credential_data: dict) -> str:
    """Deterministic keccak256 of the credential fields (key order independent)."""
    payload = json.dumps(credential_data, sort_keys=True, separators=(",", ":"), default=str)
    return Web3.to_hex(Web3.keccak(text=payload))


class CredentialRegistry:
    """
    Wrapper for the credential registry contract.
    Read calls need only the contract address; writes also need the
    university signing key.
    """

    def __init__(self, w3: Optional[Web3] = None, contract_address: str = None, private_key: str = None):
        self.w3 = w3 or get_web3()
        self.contract_address = contract_address if contract_address is not None else settings.credential_contract_address
        self.private_key = private_key if private_key is not None else settings.university_private_key

        self.contract = None
        self.account = None
        if self.contract_address:
            self.contract = self.w3.eth.contract(
                address=Web3.to_checksum_address(self.contract_address),
                abi=CREDENTIAL_ABI
            )
        if self.private_key:
            self.account = self.w3.eth.account.from_key(self.private_key)

    def is_configured(self) -> bool:
        return bool(self.contract_address and self.private_key and self.contract is not None)

    def _require_contract(self):
        if self.contract is None:
            raise RuntimeError("Blockchain service not properly configured")

    def _require_signer(self):
        if not self.is_configured():
            raise RuntimeError("Blockchain service not properly configured")

    def _send(self, call) -> Tuple[str, Any]:
        """Sign, send and wait for a contract write. Returns (tx_hash, receipt)."""
        tx = call.build_transaction({
            "from": self.account.address,
            "nonce": self.w3.eth.get_transaction_count(self.account.address)
        })
        signed = self.account.sign_transaction(tx)
        tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
        receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash)
        return Web3.to_hex(tx_hash), receipt

    def issue_credential(self, student_id: str, university_id: str, credential_type: str,
                         credential_data: dict) -> dict:
        """
        Anchor a credential hash on chain.

        Returns:
            {"txHash": ..., "credentialId": bytes32 hex or "", "credentialHash": ...}
        """
        self._require_signer()
        credential_hash = generate_credential_hash(credential_data)
        tx_hash, receipt = self._send(
            self.contract.functions.issueCredential(student_id, university_id, credential_type, credential_hash)
        )

        credential_id = ""
        events = self.contract.events.CredentialIssued().process_receipt(receipt, errors=DISCARD)
        if events:
            credential_id = Web3.to_hex(events[0]["args"]["credentialId"])

        logger.info("Credential issued on chain: tx=%s", tx_hash)
        return {"txHash": tx_hash, "credentialId": credential_id, "credentialHash": credential_hash}

    def verify_credential(self, credential_id: str) -> bool:
        self._require_contract()
        return bool(self.contract.functions.verifyCredential(credential_id).call())

    def get_credential(self, credential_id: str) -> dict:
        self._require_contract()
        student_id, university_id, credential_type, credential_hash, timestamp, is_valid = (
            self.contract.functions.getCredential(credential_id).call()
        )
        return {
            "studentId": student_id,
            "universityId": university_id,
            "credentialType": credential_type,
            "credentialHash": credential_hash,
            "timestamp": int(timestamp),
            "isValid": bool(is_valid)
        }

    def revoke_credential(self, credential_id: str) -> str:
        self._require_signer()
        tx_hash, _ = self._send(self.contract.functions.revokeCredential(credential_id))
        logger.info("Credential revoked on chain: tx=%s", tx_hash)
        return tx_hash

    def network_info(self) -> dict:
        """Chain id and head block, or nulls when the RPC endpoint is unreachable."""
        try:
            return {
                "chainId": self.w3.eth.chain_id,
                "blockNumber": int(self.w3.eth.block_number),
                "contractAddress": self.contract_address or None,
                "isConfigured": self.is_configured()
            }
        except Exception as e:
            logger.warning("Blockchain RPC unreachable: %s", e)
            return {
                "chainId": None,
                "blockNumber": None,
                "contractAddress": self.contract_address or None,
                "isConfigured": False
            }
