"""
Document Mirror Routes (MongoDB)

Same contracts as the relational routes, with ObjectId string ids.

GET|POST|PUT|DELETE /mirror/universities
GET|POST|PUT|DELETE /mirror/connections
GET|PUT|DELETE /mirror/admin/users
"""

from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import APIRouter, Depends, Query

from alumni_network.api.routes.connection_routes import validate_connection_changes, validate_connection_request
from alumni_network.api.routes.university_routes import validate_new_university, validate_university_changes
from alumni_network.core.auth import get_current_admin, get_current_user
from alumni_network.core.errors import bad_request, not_found
from alumni_network.schemas.schemas import AdminUserUpdate, ConnectionCreate, ConnectionUpdate, UniversityCreate
from alumni_network.services.document_service import (
    DocumentService, UserDocumentService, camel_keys, regex_contains
)
from alumni_network.utils.validation import clamp_limit, is_blank, provided, query_flag

router = APIRouter(prefix="/mirror", tags=["Document Mirror"])


def object_id(value: Optional[str]) -> ObjectId:
    try:
        return ObjectId(str(value).strip())
    except (InvalidId, TypeError):
        raise bad_request("Valid ID is required", "INVALID_ID")


def _found(doc: Optional[dict], error: str, code: str) -> dict:
    if doc is None:
        raise not_found(error, code)
    return doc


# ============================================================
# UNIVERSITIES
# ============================================================

def _ensure_unique_university(universities: DocumentService, values: dict, exclude_id: ObjectId = None) -> None:
    if values.get("domain") and universities.exists({"domain": values["domain"]}, exclude_id):
        raise bad_request("Domain already exists", "DUPLICATE_DOMAIN")
    if values.get("tenantId") and universities.exists({"tenantId": values["tenantId"]}, exclude_id):
        raise bad_request("TenantId already exists", "DUPLICATE_TENANT_ID")


@router.get("/universities")
async def get_universities(
    id: Optional[str] = Query(None),
    domain: Optional[str] = Query(None),
    country: Optional[str] = Query(None),
    is_active: Optional[str] = Query(None, alias="isActive"),
    search: Optional[str] = Query(None),
    limit: int = Query(10),
    offset: int = Query(0, ge=0)
):
    universities = DocumentService("universities")
    if id is not None:
        return _found(universities.get(object_id(id)), "University not found", "UNIVERSITY_NOT_FOUND")
    if domain:
        doc = universities.find_one({"domain": domain.strip().lower()})
        return _found(doc, "University not found", "UNIVERSITY_NOT_FOUND")

    filters = {}
    if country:
        filters["country"] = country
    if is_active is not None:
        filters["isActive"] = query_flag(is_active)
    if search:
        filters["$or"] = [{"name": regex_contains(search)}, {"country": regex_contains(search)}]
    return universities.find(filters, limit=clamp_limit(limit, 100), offset=offset)


@router.post("/universities", status_code=201)
async def create_university(payload: UniversityCreate, user: dict = Depends(get_current_user)):
    universities = DocumentService("universities")
    values = camel_keys(validate_new_university(payload))
    _ensure_unique_university(universities, values)
    return universities.insert(values)


@router.put("/universities")
async def update_university(
    payload: UniversityCreate,
    id: Optional[str] = Query(None),
    user: dict = Depends(get_current_user)
):
    universities = DocumentService("universities")
    doc_id = object_id(id)
    _found(universities.get(doc_id), "University not found", "UNIVERSITY_NOT_FOUND")

    changes = camel_keys(validate_university_changes(payload))
    _ensure_unique_university(universities, changes, exclude_id=doc_id)
    return _found(universities.update(doc_id, changes), "University not found", "UNIVERSITY_NOT_FOUND")


@router.delete("/universities")
async def delete_university(id: Optional[str] = Query(None), user: dict = Depends(get_current_user)):
    deleted = DocumentService("universities").delete(object_id(id))
    _found(deleted, "University not found", "UNIVERSITY_NOT_FOUND")
    return {"message": "University deleted successfully", "university": deleted}


# ============================================================
# CONNECTIONS
# ============================================================

@router.get("/connections")
async def get_connections(
    id: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None, alias="userId"),
    requester_id: Optional[str] = Query(None, alias="requesterId"),
    recipient_id: Optional[str] = Query(None, alias="recipientId"),
    status: Optional[str] = Query(None),
    connection_type: Optional[str] = Query(None, alias="connectionType"),
    limit: int = Query(20),
    offset: int = Query(0, ge=0)
):
    connections = DocumentService("connections")
    if id is not None:
        return _found(connections.get(object_id(id)), "Connection not found", "CONNECTION_NOT_FOUND")

    filters = {}
    if user_id:
        filters["$or"] = [{"requesterId": user_id}, {"recipientId": user_id}]
    if requester_id:
        filters["requesterId"] = requester_id
    if recipient_id:
        filters["recipientId"] = recipient_id
    if status:
        filters["status"] = status
    if connection_type:
        filters["connectionType"] = connection_type
    return connections.find(filters, limit=clamp_limit(limit, 100), offset=offset)


@router.post("/connections", status_code=201)
async def create_connection(payload: ConnectionCreate, user: dict = Depends(get_current_user)):
    validate_connection_request(payload, user, "Cannot create connection request to yourself")
    connections = DocumentService("connections")
    pair = [
        {"requesterId": payload.requester_id, "recipientId": payload.recipient_id},
        {"requesterId": payload.recipient_id, "recipientId": payload.requester_id},
    ]
    if connections.exists({"$or": pair}):
        raise bad_request("Connection already exists", "CONNECTION_ALREADY_EXISTS")

    return connections.insert({
        "requesterId": payload.requester_id,
        "recipientId": payload.recipient_id,
        "connectionType": payload.connection_type,
        "message": payload.message.strip() if payload.message else None,
        "status": "pending",
        "respondedAt": None
    }, stamped=("requestedAt",))


@router.put("/connections")
async def update_connection(
    payload: ConnectionUpdate,
    id: Optional[str] = Query(None),
    user: dict = Depends(get_current_user)
):
    connections = DocumentService("connections")
    doc_id = object_id(id)
    _found(connections.get(doc_id), "Connection not found", "CONNECTION_NOT_FOUND")

    changes = camel_keys(validate_connection_changes(payload))
    return _found(connections.update(doc_id, changes), "Connection not found", "CONNECTION_NOT_FOUND")


@router.delete("/connections")
async def delete_connection(id: Optional[str] = Query(None), user: dict = Depends(get_current_user)):
    deleted = DocumentService("connections").delete(object_id(id))
    _found(deleted, "Connection not found", "CONNECTION_NOT_FOUND")
    return {"message": "Connection deleted successfully", "deleted": deleted}


# ============================================================
# ADMIN USERS
# ============================================================

def _require_user_oid(id: Optional[str]) -> ObjectId:
    if is_blank(id):
        raise bad_request("User ID is required", "MISSING_USER_ID")
    return object_id(id)


@router.get("/admin/users")
async def get_users(
    id: Optional[str] = Query(None),
    email: Optional[str] = Query(None),
    role: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    limit: int = Query(20),
    offset: int = Query(0, ge=0),
    admin: dict = Depends(get_current_admin)
):
    users = UserDocumentService()
    if id:
        return _found(users.with_profile(users.get(object_id(id))), "User not found", "USER_NOT_FOUND")
    if email:
        doc = users.with_profile(users.find_one({"email": email.strip().lower()}))
        return _found(doc, "User not found", "USER_NOT_FOUND")

    filters = {}
    if role:
        ids = users.user_ids_with_role(role)
        filters["_id"] = {"$in": [ObjectId(i) for i in ids if ObjectId.is_valid(i)]}
    if search:
        filters["$or"] = [{"name": regex_contains(search)}, {"email": regex_contains(search)}]

    docs = users.find(filters, limit=clamp_limit(limit, 100), offset=offset)
    return [users.with_profile(doc) for doc in docs]


@router.put("/admin/users")
async def update_user(
    payload: AdminUserUpdate,
    id: Optional[str] = Query(None),
    admin: dict = Depends(get_current_admin)
):
    users = UserDocumentService()
    doc_id = _require_user_oid(id)
    _found(users.get(doc_id), "User not found", "USER_NOT_FOUND")

    changes = {}
    if provided(payload, "name"):
        if not isinstance(payload.name, str) or is_blank(payload.name):
            raise bad_request("Name must be a non-empty string", "INVALID_NAME")
        changes["name"] = payload.name.strip()
    if provided(payload, "email"):
        if not isinstance(payload.email, str) or "@" not in payload.email:
            raise bad_request("Valid email is required", "INVALID_EMAIL")
        changes["email"] = payload.email.strip().lower()
        if users.exists({"email": changes["email"]}, exclude_id=doc_id):
            raise bad_request("Email already in use", "EMAIL_EXISTS")
    if provided(payload, "email_verified"):
        if not isinstance(payload.email_verified, bool):
            raise bad_request("emailVerified must be a boolean", "INVALID_EMAIL_VERIFIED")
        changes["emailVerified"] = payload.email_verified

    updated = _found(users.update(doc_id, changes), "User not found", "USER_NOT_FOUND")
    return users.with_profile(updated)


@router.delete("/admin/users")
async def delete_user(id: Optional[str] = Query(None), admin: dict = Depends(get_current_admin)):
    deleted = UserDocumentService().delete_with_profile(_require_user_oid(id))
    _found(deleted, "User not found", "USER_NOT_FOUND")
    return {"message": "User deleted successfully", "deletedUser": deleted}
