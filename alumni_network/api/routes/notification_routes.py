"""
Notification Routes

GET /notifications - Caller's notifications with unread count
POST /notifications - Create a notification for a user
PUT /notifications?action=mark-read|mark-unread|mark-all-read[&id=] - Read state
DELETE /notifications?id= - Delete one of the caller's notifications
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from alumni_network.core.auth import get_current_user
from alumni_network.core.errors import bad_request, not_found
from alumni_network.db.models import Notification
from alumni_network.db.postgres import get_db_session
from alumni_network.schemas.schemas import (
    NotificationCreate, NotificationListResponse, NotificationResponse, NotificationType
)
from alumni_network.services.notification_service import NotificationService
from alumni_network.utils.validation import (
    choice_values, clamp_limit, is_blank, parse_id, query_flag, require_choice
)

router = APIRouter(prefix="/notifications", tags=["Notifications"])

ACTIONS = ("mark-read", "mark-unread", "mark-all-read")
INVALID_ID_MESSAGE = "Valid notification ID is required"


def _own_notification(db, notification_id: int, user_id: str) -> Notification:
    notification = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == user_id)
        .first()
    )
    if not notification:
        raise not_found("Notification not found", "NOTIFICATION_NOT_FOUND")
    return notification


@router.get("", response_model=NotificationListResponse)
async def get_notifications(
    is_read: Optional[str] = Query(None, alias="isRead"),
    type: Optional[str] = Query(None),
    limit: int = Query(20),
    offset: int = Query(0, ge=0),
    user: dict = Depends(get_current_user)
):
    """List the caller's notifications, newest first."""
    with get_db_session() as db:
        query = db.query(Notification).filter(Notification.user_id == user["id"])
        if is_read is not None:
            query = query.filter(Notification.is_read.is_(query_flag(is_read)))
        if type in choice_values(NotificationType):
            query = query.filter(Notification.type == type)

        rows = (
            query.order_by(Notification.created_at.desc(), Notification.id.desc())
            .offset(offset)
            .limit(clamp_limit(limit, 100))
            .all()
        )
        return NotificationListResponse(
            notifications=[NotificationResponse.model_validate(n) for n in rows],
            unread_count=NotificationService(db).get_unread_count(user["id"])
        )


@router.post("", response_model=NotificationResponse, status_code=201)
async def create_notification(payload: NotificationCreate, user: dict = Depends(get_current_user)):
    if any(is_blank(value) for value in (payload.user_id, payload.type, payload.title, payload.message)):
        raise bad_request("Missing required fields: userId, type, title, message", "MISSING_REQUIRED_FIELDS")
    require_choice(payload.type, NotificationType, "INVALID_TYPE", "type")

    with get_db_session() as db:
        notification = NotificationService(db).create(
            user_id=payload.user_id,
            type=payload.type,
            title=payload.title.strip(),
            message=payload.message.strip(),
            action_url=payload.action_url,
            metadata=payload.notification_metadata
        )
        return NotificationResponse.model_validate(notification)


@router.put("")
async def update_notifications(
    action: Optional[str] = Query(None),
    id: Optional[str] = Query(None),
    user: dict = Depends(get_current_user)
):
    """
    Change read state.

    mark-all-read touches every unread notification of the caller; the other
    two actions need an id.
    """
    if action not in ACTIONS:
        raise bad_request(f"action must be one of: {', '.join(ACTIONS)}", "INVALID_ACTION")

    with get_db_session() as db:
        if action == "mark-all-read":
            now = datetime.utcnow()
            (
                db.query(Notification)
                .filter(Notification.user_id == user["id"], Notification.is_read.is_(False))
                .update({Notification.is_read: True, Notification.read_at: now}, synchronize_session=False)
            )
            return {"message": "All notifications marked as read"}

        notification = _own_notification(db, parse_id(id, message=INVALID_ID_MESSAGE), user["id"])
        if action == "mark-read":
            notification.is_read = True
            notification.read_at = datetime.utcnow()
        else:
            notification.is_read = False
            notification.read_at = None
        db.flush()
        return NotificationResponse.model_validate(notification)


@router.delete("")
async def delete_notification(id: Optional[str] = Query(None), user: dict = Depends(get_current_user)):
    notification_id = parse_id(id, message=INVALID_ID_MESSAGE)
    with get_db_session() as db:
        notification = _own_notification(db, notification_id, user["id"])
        deleted = NotificationResponse.model_validate(notification)
        db.delete(notification)

    return {"message": "Notification deleted successfully", "notification": deleted}
