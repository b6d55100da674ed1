"""
Credential Routes

GET /credentials - List credentials, or one by ?id=
POST /credentials - Add a credential for the current user
PUT /credentials?id= - Update own credential
DELETE /credentials?id= - Delete own credential
POST /credentials/verify - Mark a credential verified after checking its transaction on-chain
POST /credentials/issue?id= - Anchor an own credential on-chain with the university key
GET /credentials/chain - Network and contract status
"""

import logging
import time
from datetime import datetime
from typing import Optional

import requests
from fastapi import APIRouter, Depends, Query

from alumni_network.core.auth import get_current_user
from alumni_network.core.config import get_settings
from alumni_network.core.errors import APIError, bad_request, not_found
from alumni_network.db.models import Credential, University
from alumni_network.db.postgres import get_db_session
from alumni_network.schemas.schemas import (
    CredentialCreate, CredentialResponse, CredentialType, CredentialVerifyRequest, CredentialVerifyResponse
)
from alumni_network.services.blockchain_service import CredentialRegistry, verify_transaction_success
from alumni_network.services.ipfs_service import upload_json_to_ipfs
from alumni_network.services.notification_service import NotificationService, notify
from alumni_network.utils.validation import (
    choice_values, clamp_limit, contains, is_blank, parse_id, parse_iso_datetime,
    provided, query_flag, reject_body_fields
)

settings = get_settings()
logger = logging.getLogger(__name__)
router = APIRouter(prefix="/credentials", tags=["Credentials"])

INVALID_TYPE_MESSAGE = f"Invalid credential type. Must be one of: {', '.join(choice_values(CredentialType))}"


def _check_type(credential_type) -> str:
    if credential_type not in choice_values(CredentialType):
        raise bad_request(INVALID_TYPE_MESSAGE, "INVALID_CREDENTIAL_TYPE")
    return credential_type


def _check_metadata(metadata) -> None:
    if metadata is not None and not isinstance(metadata, dict):
        raise bad_request("Metadata must be a valid JSON object", "INVALID_METADATA")


def _university_or_400(db, university_id: int) -> University:
    university = db.query(University).filter(University.id == university_id).first()
    if not university:
        raise bad_request("University not found", "UNIVERSITY_NOT_FOUND")
    return university


def _owned_or_404(db, credential_id: int, user_id: str) -> Credential:
    credential = (
        db.query(Credential)
        .filter(Credential.id == credential_id, Credential.user_id == user_id)
        .first()
    )
    if not credential:
        raise not_found("Credential not found or unauthorized", "NOT_FOUND")
    return credential


def _pin_metadata(payload: CredentialCreate, issue_date, expiry_date) -> Optional[str]:
    """Upload credential metadata to IPFS. Failures are logged, never raised."""
    try:
        return upload_json_to_ipfs(f"credential-{int(time.time() * 1000)}.json", {
            "title": payload.title.strip(),
            "description": payload.description.strip() if payload.description else None,
            "universityId": payload.university_id,
            "credentialType": payload.credential_type,
            "issueDate": issue_date.isoformat(),
            "expiryDate": expiry_date.isoformat() if expiry_date else None,
            "metadata": payload.credential_metadata
        })
    except requests.RequestException as e:
        logger.warning("IPFS upload failed: %s", e)
        return None


@router.get("")
async def get_credentials(
    id: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None, alias="userId"),
    university_id: Optional[int] = Query(None, alias="universityId"),
    credential_type: Optional[str] = Query(None, alias="credentialType"),
    is_verified_on_chain: Optional[str] = Query(None, alias="isVerifiedOnChain"),
    search: Optional[str] = Query(None),
    limit: int = Query(10),
    offset: int = Query(0, ge=0)
):
    """Get one credential by id, or list credentials with filters."""
    with get_db_session() as db:
        if id is not None:
            credential = db.query(Credential).filter(Credential.id == parse_id(id)).first()
            if not credential:
                raise not_found("Credential not found", "NOT_FOUND")
            return CredentialResponse.model_validate(credential)

        query = db.query(Credential)
        if user_id:
            query = query.filter(Credential.user_id == user_id)
        if university_id is not None:
            query = query.filter(Credential.university_id == university_id)
        if credential_type:
            query = query.filter(Credential.credential_type == _check_type(credential_type))
        if is_verified_on_chain is not None:
            query = query.filter(Credential.is_verified_on_chain.is_(query_flag(is_verified_on_chain)))
        if search:
            query = query.filter(contains(Credential.title, search) | contains(Credential.issuer_name, search))

        rows = (
            query.order_by(Credential.created_at.desc())
            .offset(offset)
            .limit(clamp_limit(limit, 100))
            .all()
        )
        return [CredentialResponse.model_validate(c) for c in rows]


@router.post("", response_model=CredentialResponse, status_code=201)
async def create_credential(payload: CredentialCreate, user: dict = Depends(get_current_user)):
    """
    Add a credential owned by the current user.

    When metadata is sent without an ipfsHash, the metadata is pinned to IPFS
    and the resulting ipfs:// URI is stored.
    """
    reject_body_fields(
        payload, ("userId", "user_id"), "USER_ID_NOT_ALLOWED", "User ID cannot be provided in request body"
    )
    if payload.university_id is None:
        raise bad_request("University ID is required", "MISSING_UNIVERSITY_ID")
    if is_blank(payload.credential_type):
        raise bad_request("Credential type is required", "MISSING_CREDENTIAL_TYPE")
    _check_type(payload.credential_type)
    if is_blank(payload.title):
        raise bad_request("Title is required", "MISSING_TITLE")
    if is_blank(payload.issue_date):
        raise bad_request("Issue date is required", "MISSING_ISSUE_DATE")

    issue_date = parse_iso_datetime(payload.issue_date)
    if issue_date is None:
        raise bad_request("Issue date must be a valid ISO date string", "INVALID_ISSUE_DATE")

    expiry_date = None
    if payload.expiry_date:
        expiry_date = parse_iso_datetime(payload.expiry_date)
        if expiry_date is None:
            raise bad_request("Expiry date must be a valid ISO date string", "INVALID_EXPIRY_DATE")

    with get_db_session() as db:
        university = _university_or_400(db, payload.university_id)
        issuer_name = university.name

    _check_metadata(payload.credential_metadata)

    ipfs_hash = payload.ipfs_hash or None
    if not ipfs_hash and payload.credential_metadata:
        ipfs_hash = _pin_metadata(payload, issue_date, expiry_date)

    with get_db_session() as db:
        credential = Credential(
            user_id=user["id"],
            university_id=payload.university_id,
            credential_type=payload.credential_type,
            title=payload.title.strip(),
            description=payload.description.strip() if payload.description else None,
            issuer_name=issuer_name,
            issue_date=issue_date,
            expiry_date=expiry_date,
            blockchain_tx_hash=payload.blockchain_tx_hash or None,
            is_verified_on_chain=bool(payload.is_verified_on_chain),
            ipfs_hash=ipfs_hash,
            credential_metadata=payload.credential_metadata
        )
        db.add(credential)
        db.flush()
        return CredentialResponse.model_validate(credential)


@router.put("", response_model=CredentialResponse)
async def update_credential(
    payload: CredentialCreate,
    id: Optional[str] = Query(None),
    user: dict = Depends(get_current_user)
):
    """Update fields of a credential the current user owns."""
    credential_id = parse_id(id)
    with get_db_session() as db:
        credential = _owned_or_404(db, credential_id, user["id"])
        reject_body_fields(
            payload, ("userId", "user_id"), "USER_ID_NOT_ALLOWED", "User ID cannot be provided in request body"
        )

        if provided(payload, "university_id"):
            university = _university_or_400(db, payload.university_id)
            credential.university_id = university.id
            credential.issuer_name = university.name

        if provided(payload, "credential_type"):
            credential.credential_type = _check_type(payload.credential_type)

        if provided(payload, "title"):
            if not isinstance(payload.title, str) or is_blank(payload.title):
                raise bad_request("Title cannot be empty", "INVALID_TITLE")
            credential.title = payload.title.strip()

        if provided(payload, "description"):
            credential.description = payload.description

        if provided(payload, "issue_date"):
            issue_date = parse_iso_datetime(payload.issue_date)
            if issue_date is None:
                raise bad_request("Issue date must be a valid ISO date string", "INVALID_ISSUE_DATE")
            credential.issue_date = issue_date

        if provided(payload, "expiry_date"):
            expiry_date = None
            if payload.expiry_date:
                expiry_date = parse_iso_datetime(payload.expiry_date)
                if expiry_date is None:
                    raise bad_request("Expiry date must be a valid ISO date string", "INVALID_EXPIRY_DATE")
            credential.expiry_date = expiry_date

        if provided(payload, "blockchain_tx_hash"):
            credential.blockchain_tx_hash = payload.blockchain_tx_hash or None
        if provided(payload, "is_verified_on_chain"):
            credential.is_verified_on_chain = bool(payload.is_verified_on_chain)
        if provided(payload, "ipfs_hash"):
            credential.ipfs_hash = payload.ipfs_hash or None

        if provided(payload, "credential_metadata"):
            _check_metadata(payload.credential_metadata)
            credential.credential_metadata = payload.credential_metadata

        db.flush()
        return CredentialResponse.model_validate(credential)


@router.delete("")
async def delete_credential(id: Optional[str] = Query(None), user: dict = Depends(get_current_user)):
    """Delete a credential the current user owns."""
    credential_id = parse_id(id)
    with get_db_session() as db:
        credential = _owned_or_404(db, credential_id, user["id"])
        deleted = CredentialResponse.model_validate(credential)
        db.delete(credential)

    return {"message": "Credential deleted successfully", "credential": deleted}


@router.post("/verify", response_model=CredentialVerifyResponse)
async def verify_credential(payload: CredentialVerifyRequest, user: dict = Depends(get_current_user)):
    """
    Check a credential's issuing transaction on-chain, then mark it verified.

    The receipt must exist with status 1; when a contract address is
    configured the transaction must also target it.
    """
    if is_blank(payload.credential_id):
        raise bad_request("credentialId is required", "MISSING_CREDENTIAL_ID")
    if is_blank(payload.blockchain_tx_hash):
        raise bad_request("blockchainTxHash is required", "MISSING_BLOCKCHAIN_TX_HASH")

    credential_id = parse_id(
        payload.credential_id, code="INVALID_CREDENTIAL_ID", message="credentialId must be a valid integer"
    )
    tx_hash = str(payload.blockchain_tx_hash).strip()

    with get_db_session() as db:
        if not db.query(Credential.id).filter(Credential.id == credential_id).first():
            raise not_found("Credential not found", "CREDENTIAL_NOT_FOUND")

    result = verify_transaction_success(tx_hash, expected_to=settings.credential_contract_address or None)
    if not result["ok"]:
        raise bad_request(f"Blockchain verification failed: {result['reason']}", "BLOCKCHAIN_VERIFICATION_FAILED")

    with get_db_session() as db:
        credential = db.query(Credential).filter(Credential.id == credential_id).first()
        credential.blockchain_tx_hash = tx_hash
        credential.is_verified_on_chain = True
        db.flush()
        verified = CredentialResponse.model_validate(credential)

    notify(
        NotificationService.credential_issued,
        user_id=verified.user_id, credential_title=verified.title, credential_id=verified.id
    )

    return CredentialVerifyResponse(success=True, message="Credential verified on blockchain", credential=verified)


@router.post("/issue", response_model=CredentialVerifyResponse)
async def issue_credential(id: Optional[str] = Query(None), user: dict = Depends(get_current_user)):
    """
    Issue one of the caller's credentials on the registry contract.

    Stores the transaction hash and the on-chain credential id, marks the
    credential verified and notifies the owner.
    """
    credential_id = parse_id(id, message="Valid credential ID is required")
    registry = CredentialRegistry()
    if not registry.is_configured():
        raise APIError(503, "Blockchain service not properly configured", "BLOCKCHAIN_NOT_CONFIGURED")

    with get_db_session() as db:
        credential = _owned_or_404(db, credential_id, user["id"])
        if credential.is_verified_on_chain:
            raise bad_request("Credential is already verified on chain", "ALREADY_VERIFIED")
        credential_data = {
            "title": credential.title,
            "description": credential.description,
            "credentialType": credential.credential_type,
            "issueDate": credential.issue_date.isoformat(),
            "expiryDate": credential.expiry_date.isoformat() if credential.expiry_date else None,
            "metadata": credential.credential_metadata
        }
        university_id = str(credential.university_id)

    try:
        issued = registry.issue_credential(user["id"], university_id, credential_data["credentialType"], credential_data)
    except Exception as e:
        logger.error("On-chain issue failed for credential %s: %s", credential_id, e)
        raise APIError(502, "Failed to issue credential on blockchain", "BLOCKCHAIN_ISSUE_FAILED")

    with get_db_session() as db:
        credential = db.query(Credential).filter(Credential.id == credential_id).first()
        credential.blockchain_tx_hash = issued["txHash"]
        credential.is_verified_on_chain = True
        credential.credential_metadata = dict(
            credential_data,
            blockchainCredentialId=issued["credentialId"],
            verifiedAt=datetime.utcnow().isoformat()
        )
        db.flush()
        verified = CredentialResponse.model_validate(credential)

    notify(
        NotificationService.credential_issued,
        user_id=verified.user_id, credential_title=verified.title, credential_id=verified.id
    )
    return CredentialVerifyResponse(success=True, message="Credential issued on blockchain", credential=verified)


@router.get("/chain")
async def get_chain_status():
    """Chain id, head block and whether the registry can sign transactions."""
    return CredentialRegistry().network_info()
