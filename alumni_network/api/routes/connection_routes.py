"""
Connection Routes

GET /connections - List connections, or one by ?id=
POST /connections - Create a connection row (status pending)
PUT /connections?id= - Accept / reject / edit message
DELETE /connections?id= - Delete connection
POST /connections/request - Send a connection request (deduplicated, notifies recipient)
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import and_, or_

from alumni_network.core.auth import get_current_user
from alumni_network.core.errors import bad_request, forbidden, not_found
from alumni_network.db.models import Connection
from alumni_network.db.postgres import get_db_session
from alumni_network.schemas.schemas import (
    ConnectionCreate, ConnectionRequestResponse, ConnectionResponse, ConnectionStatus,
    ConnectionType, ConnectionUpdate
)
from alumni_network.services.notification_service import NotificationService, notify
from alumni_network.utils.validation import clamp_limit, is_blank, parse_id, provided, require_choice

router = APIRouter(prefix="/connections", tags=["Connections"])


def validate_connection_request(payload: ConnectionCreate, user: dict, self_message: str) -> None:
    """Checks shared by POST /connections, POST /connections/request and the document mirror."""
    if is_blank(payload.requester_id):
        raise bad_request("requesterId is required", "MISSING_REQUESTER_ID")
    if is_blank(payload.recipient_id):
        raise bad_request("recipientId is required", "MISSING_RECIPIENT_ID")
    if is_blank(payload.connection_type):
        raise bad_request("connectionType is required", "MISSING_CONNECTION_TYPE")
    require_choice(payload.connection_type, ConnectionType, "INVALID_CONNECTION_TYPE", "connectionType")
    if payload.requester_id == payload.recipient_id:
        raise bad_request(self_message, "SELF_CONNECTION_NOT_ALLOWED")
    if payload.requester_id != user["id"]:
        raise forbidden("Requester must be the authenticated user", "UNAUTHORIZED_REQUESTER")


def validate_connection_changes(payload: ConnectionUpdate) -> dict:
    changes = {}
    if payload.status:
        changes["status"] = require_choice(payload.status, ConnectionStatus, "INVALID_STATUS", "status")
        if payload.status in ("accepted", "rejected"):
            changes["responded_at"] = datetime.utcnow()
    if provided(payload, "message"):
        changes["message"] = payload.message.strip() if payload.message else None
    return changes


def _new_connection(payload: ConnectionCreate) -> Connection:
    return Connection(
        requester_id=payload.requester_id,
        recipient_id=payload.recipient_id,
        connection_type=payload.connection_type,
        message=payload.message.strip() if payload.message else None,
        status="pending"
    )


def _get_or_404(db, connection_id: int) -> Connection:
    connection = db.query(Connection).filter(Connection.id == connection_id).first()
    if not connection:
        raise not_found("Connection not found", "CONNECTION_NOT_FOUND")
    return connection


@router.get("")
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
    """Get one connection by id, or list connections with filters."""
    with get_db_session() as db:
        if id is not None:
            return ConnectionResponse.model_validate(_get_or_404(db, parse_id(id)))

        query = db.query(Connection)
        if user_id:
            query = query.filter(or_(Connection.requester_id == user_id, Connection.recipient_id == user_id))
        if requester_id:
            query = query.filter(Connection.requester_id == requester_id)
        if recipient_id:
            query = query.filter(Connection.recipient_id == recipient_id)
        if status:
            query = query.filter(Connection.status == status)
        if connection_type:
            query = query.filter(Connection.connection_type == connection_type)

        rows = (
            query.order_by(Connection.created_at.desc())
            .offset(offset)
            .limit(clamp_limit(limit, 100))
            .all()
        )
        return [ConnectionResponse.model_validate(c) for c in rows]


@router.post("", response_model=ConnectionResponse, status_code=201)
async def create_connection(payload: ConnectionCreate, user: dict = Depends(get_current_user)):
    """Create a pending connection between the caller and recipientId."""
    validate_connection_request(payload, user, "Cannot create connection request to yourself")
    with get_db_session() as db:
        connection = _new_connection(payload)
        db.add(connection)
        db.flush()
        return ConnectionResponse.model_validate(connection)


@router.put("", response_model=ConnectionResponse)
async def update_connection(
    payload: ConnectionUpdate,
    id: Optional[str] = Query(None),
    user: dict = Depends(get_current_user)
):
    """Update status and/or message. Accepting notifies the requester."""
    connection_id = parse_id(id)
    with get_db_session() as db:
        connection = _get_or_404(db, connection_id)
        changes = validate_connection_changes(payload)
        for field, value in changes.items():
            setattr(connection, field, value)
        db.flush()
        updated = ConnectionResponse.model_validate(connection)

    if changes.get("status") == "accepted":
        notify(
            NotificationService.connection_accepted,
            requester_id=updated.requester_id, accepter_name=user["name"], accepter_id=user["id"]
        )
    return updated


@router.delete("")
async def delete_connection(id: Optional[str] = Query(None), user: dict = Depends(get_current_user)):
    """Delete a connection and return it."""
    connection_id = parse_id(id)
    with get_db_session() as db:
        connection = _get_or_404(db, connection_id)
        deleted = ConnectionResponse.model_validate(connection)
        db.delete(connection)

    return {"message": "Connection deleted successfully", "deleted": deleted}


@router.post("/request", response_model=ConnectionRequestResponse, status_code=201)
async def send_connection_request(payload: ConnectionCreate, user: dict = Depends(get_current_user)):
    """Send a connection request unless the pair is already connected in either direction."""
    validate_connection_request(payload, user, "Cannot send connection request to yourself")

    with get_db_session() as db:
        existing = db.query(Connection).filter(
            or_(
                and_(Connection.requester_id == payload.requester_id, Connection.recipient_id == payload.recipient_id),
                and_(Connection.requester_id == payload.recipient_id, Connection.recipient_id == payload.requester_id)
            )
        ).first()
        if existing:
            raise bad_request("Connection already exists", "CONNECTION_ALREADY_EXISTS")

        connection = _new_connection(payload)
        db.add(connection)
        db.flush()
        created = ConnectionResponse.model_validate(connection)

    if created.connection_type == "mentorship":
        notify(
            NotificationService.mentorship_request,
            mentor_id=created.recipient_id, mentee_name=user["name"], mentee_id=user["id"]
        )
    else:
        notify(
            NotificationService.connection_request,
            recipient_id=created.recipient_id, requester_name=user["name"], requester_id=user["id"]
        )
    return ConnectionRequestResponse(
        success=True, message="Connection request sent successfully", connection=created
    )
