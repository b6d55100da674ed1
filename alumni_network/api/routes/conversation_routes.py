"""
Conversation Routes

GET /messages/conversations - List conversations, or one by ?id=
POST /messages/conversations - Start a direct or group conversation
PUT /messages/conversations?id= - Update preview, group name or public keys
DELETE /messages/conversations?id= - Delete conversation and its messages
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from alumni_network.core.auth import get_current_user
from alumni_network.core.errors import bad_request, not_found
from alumni_network.db.models import Conversation
from alumni_network.db.postgres import get_db_session
from alumni_network.schemas.schemas import ConversationCreate, ConversationResponse, ConversationUpdate
from alumni_network.utils.validation import clamp_limit, parse_id, parse_iso_datetime, provided, query_flag

router = APIRouter(prefix="/messages/conversations", tags=["Messages"])


def _conversation_or_404(db, conversation_id: int) -> Conversation:
    conversation = db.query(Conversation).filter(Conversation.id == conversation_id).first()
    if not conversation:
        raise not_found("Conversation not found", "CONVERSATION_NOT_FOUND")
    return conversation


@router.get("")
async def get_conversations(
    id: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None, alias="userId"),
    is_group_chat: Optional[str] = Query(None, alias="isGroupChat"),
    limit: int = Query(20),
    offset: int = Query(0, ge=0)
):
    """Get one conversation by id, or list conversations by most recent message."""
    with get_db_session() as db:
        if id is not None:
            return ConversationResponse.model_validate(_conversation_or_404(db, parse_id(id)))

        query = db.query(Conversation)
        if is_group_chat is not None:
            query = query.filter(Conversation.is_group_chat.is_(query_flag(is_group_chat)))
        query = query.order_by(Conversation.last_message_at.desc().nullslast(), Conversation.created_at.desc())

        # participants is a JSON array; membership is checked in Python
        rows = query.all()
        if user_id:
            rows = [c for c in rows if user_id in (c.participants or [])]

        page = rows[offset:offset + clamp_limit(limit, 100)]
        return [ConversationResponse.model_validate(c) for c in page]


@router.post("", response_model=ConversationResponse, status_code=201)
async def create_conversation(payload: ConversationCreate, user: dict = Depends(get_current_user)):
    """More than two participants makes a group chat, which needs a groupName."""
    if payload.participants is None:
        raise bad_request("participants field is required", "MISSING_PARTICIPANTS")
    if not isinstance(payload.participants, list):
        raise bad_request("participants must be an array", "INVALID_PARTICIPANTS_TYPE")
    if len(payload.participants) < 2:
        raise bad_request("participants must contain at least 2 user ids", "INSUFFICIENT_PARTICIPANTS")

    is_group_chat = len(payload.participants) > 2
    if is_group_chat and not payload.group_name:
        raise bad_request("groupName is required for group chats", "MISSING_GROUP_NAME")

    with get_db_session() as db:
        conversation = Conversation(
            participants=[str(p) for p in payload.participants],
            is_group_chat=is_group_chat,
            group_name=payload.group_name or None,
            encryption_public_keys=payload.encryption_public_keys or None
        )
        db.add(conversation)
        db.flush()
        return ConversationResponse.model_validate(conversation)


@router.put("", response_model=ConversationResponse)
async def update_conversation(
    payload: ConversationUpdate,
    id: Optional[str] = Query(None),
    user: dict = Depends(get_current_user)
):
    """Update only the fields sent in the body."""
    conversation_id = parse_id(id)
    with get_db_session() as db:
        conversation = _conversation_or_404(db, conversation_id)
        if provided(payload, "last_message"):
            conversation.last_message = payload.last_message
        if provided(payload, "last_message_at"):
            conversation.last_message_at = parse_iso_datetime(payload.last_message_at)
        if provided(payload, "group_name"):
            conversation.group_name = payload.group_name
        if provided(payload, "encryption_public_keys"):
            conversation.encryption_public_keys = payload.encryption_public_keys
        db.flush()
        return ConversationResponse.model_validate(conversation)


@router.delete("")
async def delete_conversation(id: Optional[str] = Query(None), user: dict = Depends(get_current_user)):
    """Delete a conversation; its messages cascade."""
    conversation_id = parse_id(id)
    with get_db_session() as db:
        conversation = _conversation_or_404(db, conversation_id)
        deleted = ConversationResponse.model_validate(conversation)
        db.delete(conversation)

    return {"message": "Conversation deleted successfully", "conversation": deleted}
