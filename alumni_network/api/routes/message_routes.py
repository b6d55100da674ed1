"""
Message Routes (end-to-end encrypted payloads are stored as sent)

GET /messages - List messages, or one by ?id=
POST /messages - Send a message into a conversation
PUT /messages?id= - Mark as read (receiver only)
DELETE /messages?id= - Delete (sender or receiver)
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from alumni_network.core.auth import get_current_user
from alumni_network.core.errors import bad_request, forbidden, not_found
from alumni_network.db.models import Conversation, Message, User
from alumni_network.db.postgres import get_db_session
from alumni_network.schemas.schemas import ChatMessageResponse, MessageCreate, MessageType
from alumni_network.services.notification_service import NotificationService, notify
from alumni_network.utils.validation import (
    choice_values, clamp_limit, is_blank, parse_id, query_flag
)

router = APIRouter(prefix="/messages", tags=["Messages"])

LAST_MESSAGE_LABELS = {"text": "Message", "image": "Image", "file": "File"}


def _message_or_404(db, message_id: int) -> Message:
    message = db.query(Message).filter(Message.id == message_id).first()
    if not message:
        raise not_found("Message not found", "MESSAGE_NOT_FOUND")
    return message


@router.get("")
async def get_messages(
    id: Optional[str] = Query(None),
    conversation_id: Optional[int] = Query(None, alias="conversationId"),
    sender_id: Optional[str] = Query(None, alias="senderId"),
    receiver_id: Optional[str] = Query(None, alias="receiverId"),
    is_read: Optional[str] = Query(None, alias="isRead"),
    limit: int = Query(50),
    offset: int = Query(0, ge=0)
):
    """Get one message by id, or list messages newest first."""
    with get_db_session() as db:
        if id is not None:
            return ChatMessageResponse.model_validate(_message_or_404(db, parse_id(id)))

        query = db.query(Message)
        if conversation_id is not None:
            query = query.filter(Message.conversation_id == conversation_id)
        if sender_id:
            query = query.filter(Message.sender_id == sender_id)
        if receiver_id:
            query = query.filter(Message.receiver_id == receiver_id)
        if is_read is not None:
            query = query.filter(Message.is_read.is_(query_flag(is_read)))

        rows = (
            query.order_by(Message.created_at.desc())
            .offset(offset)
            .limit(clamp_limit(limit, 200))
            .all()
        )
        return [ChatMessageResponse.model_validate(m) for m in rows]


@router.post("", response_model=ChatMessageResponse, status_code=201)
async def send_message(payload: MessageCreate, user: dict = Depends(get_current_user)):
    """
    Store an encrypted message between two participants of a conversation.

    Updates the conversation preview and notifies the receiver.
    """
    if is_blank(payload.sender_id):
        raise bad_request("Sender ID is required", "MISSING_SENDER_ID")
    if is_blank(payload.receiver_id):
        raise bad_request("Receiver ID is required", "MISSING_RECEIVER_ID")
    if is_blank(payload.conversation_id):
        raise bad_request("Conversation ID is required", "MISSING_CONVERSATION_ID")
    if is_blank(payload.encrypted_content):
        raise bad_request("Encrypted content is required", "MISSING_ENCRYPTED_CONTENT")
    if is_blank(payload.encrypted_key):
        raise bad_request("Encrypted key is required", "MISSING_ENCRYPTED_KEY")

    sender_id = payload.sender_id.strip()
    receiver_id = payload.receiver_id.strip()
    if sender_id != user["id"]:
        raise forbidden("You can only send messages as yourself", "UNAUTHORIZED_SENDER")

    message_type = (payload.message_type or "text").strip()
    if message_type not in choice_values(MessageType):
        raise bad_request(
            f"Invalid message type. Must be one of: {', '.join(choice_values(MessageType))}", "INVALID_MESSAGE_TYPE"
        )

    conversation_id = parse_id(
        payload.conversation_id, code="INVALID_CONVERSATION_ID", message="Valid conversation ID is required"
    )

    with get_db_session() as db:
        conversation = db.query(Conversation).filter(Conversation.id == conversation_id).first()
        if not conversation:
            raise not_found("Conversation not found", "CONVERSATION_NOT_FOUND")

        participants = conversation.participants or []
        if sender_id not in participants:
            raise forbidden("You are not a participant in this conversation", "NOT_PARTICIPANT")
        if receiver_id not in participants:
            raise bad_request("Receiver is not a participant in this conversation", "INVALID_RECEIVER")
        if not db.query(User.id).filter(User.id == receiver_id).first():
            raise not_found("Receiver user not found", "RECEIVER_NOT_FOUND")

        message = Message(
            sender_id=sender_id,
            receiver_id=receiver_id,
            conversation_id=conversation_id,
            encrypted_content=payload.encrypted_content.strip(),
            encrypted_key=payload.encrypted_key.strip(),
            message_type=message_type,
            is_read=False
        )
        db.add(message)

        conversation.last_message = LAST_MESSAGE_LABELS[message_type]
        conversation.last_message_at = datetime.utcnow()
        db.flush()
        created = ChatMessageResponse.model_validate(message)

    notify(
        NotificationService.new_message,
        recipient_id=receiver_id, sender_name=user["name"], sender_id=sender_id, conversation_id=conversation_id
    )
    return created


@router.put("", response_model=ChatMessageResponse)
async def mark_message_read(id: Optional[str] = Query(None), user: dict = Depends(get_current_user)):
    """Mark a message as read. Receiver only."""
    message_id = parse_id(id)
    with get_db_session() as db:
        message = (
            db.query(Message)
            .filter(Message.id == message_id, Message.receiver_id == user["id"])
            .first()
        )
        if not message:
            raise not_found("Message not found or you are not authorized to mark it as read", "MESSAGE_NOT_FOUND")

        if not message.is_read:
            message.is_read = True
            message.read_at = datetime.utcnow()
        db.flush()
        return ChatMessageResponse.model_validate(message)


@router.delete("")
async def delete_message(id: Optional[str] = Query(None), user: dict = Depends(get_current_user)):
    """Delete a message. Sender or receiver only."""
    message_id = parse_id(id)
    with get_db_session() as db:
        message = _message_or_404(db, message_id)
        if user["id"] not in (message.sender_id, message.receiver_id):
            raise forbidden("You are not authorized to delete this message", "UNAUTHORIZED_DELETE")

        deleted = ChatMessageResponse.model_validate(message)
        db.delete(message)

    return {"message": "Message deleted successfully", "deletedMessage": deleted}
