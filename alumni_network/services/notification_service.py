"""
Notification Service - in-app notification rows.

Every template below writes one `notifications` row for the user who
should see it. Routes call `notify()` after their own transaction has
committed, so a failed notification never fails the triggering request.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from alumni_network.db.models import Notification
from alumni_network.db.postgres import get_db_session

logger = logging.getLogger(__name__)


APPLICATION_STATUS_MESSAGES = {
    "reviewed": "Your application has been reviewed",
    "shortlisted": "Congratulations! You have been shortlisted",
    "rejected": "Your application was not selected this time",
    "hired": "Congratulations! You have been selected for the position",
}
DEFAULT_STATUS_MESSAGE = "Your application status has been updated"


class NotificationService:
    """
    Creates notification rows inside the caller's session.

    Usage:
        with get_db_session() as db:
            NotificationService(db).connection_request(recipient_id, "Asha", requester_id)
    """

    def __init__(self, db):
        self.db = db

    def create(
        self,
        user_id: str,
        type: str,
        title: str,
        message: str,
        action_url: Optional[str] = None,
        metadata: Optional[dict] = None
    ) -> Notification:
        notification = Notification(
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            action_url=action_url,
            notification_metadata=metadata,
            is_read=False,
            created_at=datetime.utcnow()
        )
        self.db.add(notification)
        self.db.flush()
        return notification

    def get_unread_count(self, user_id: str) -> int:
        return (
            self.db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
            .count()
        )

    # ============================================================
    # TEMPLATES
    # ============================================================

    def connection_request(self, recipient_id: str, requester_name: str, requester_id: str) -> Notification:
        return self.create(
            recipient_id, "connection", "New Connection Request",
            f"{requester_name} wants to connect with you",
            "/dashboard/connections?tab=requests",
            {"requesterId": requester_id, "requesterName": requester_name}
        )

    def connection_accepted(self, requester_id: str, accepter_name: str, accepter_id: str) -> Notification:
        return self.create(
            requester_id, "connection", "Connection Request Accepted",
            f"{accepter_name} accepted your connection request",
            f"/dashboard/profile/{accepter_id}",
            {"accepterId": accepter_id, "accepterName": accepter_name}
        )

    def new_message(self, recipient_id: str, sender_name: str, sender_id: str, conversation_id: int) -> Notification:
        return self.create(
            recipient_id, "message", "New Message",
            f"{sender_name} sent you a message",
            f"/dashboard/messages?conversation={conversation_id}",
            {"senderId": sender_id, "senderName": sender_name, "conversationId": conversation_id}
        )

    def job_application(self, poster_id: str, applicant_name: str, applicant_id: str,
                        job_id: int, job_title: str) -> Notification:
        return self.create(
            poster_id, "application", "New Job Application",
            f"{applicant_name} applied for {job_title}",
            f"/dashboard/jobs/{job_id}/applications",
            {"applicantId": applicant_id, "applicantName": applicant_name, "jobId": job_id, "jobTitle": job_title}
        )

    def application_status(self, applicant_id: str, job_title: str, status: str, job_id: int) -> Notification:
        status_message = APPLICATION_STATUS_MESSAGES.get(status, DEFAULT_STATUS_MESSAGE)
        return self.create(
            applicant_id, "application", "Application Status Update",
            f"{status_message} for {job_title}",
            f"/dashboard/jobs/{job_id}",
            {"jobId": job_id, "jobTitle": job_title, "status": status}
        )

    def event_registration(self, organizer_id: str, attendee_name: str, attendee_id: str,
                           event_id: int, event_title: str) -> Notification:
        return self.create(
            organizer_id, "event", "New Event Registration",
            f"{attendee_name} registered for {event_title}",
            f"/dashboard/events/{event_id}",
            {"attendeeId": attendee_id, "attendeeName": attendee_name, "eventId": event_id, "eventTitle": event_title}
        )

    def credential_issued(self, user_id: str, credential_title: str, credential_id: int) -> Notification:
        return self.create(
            user_id, "credential", "New Credential Issued",
            f"Your {credential_title} credential has been verified on the blockchain",
            f"/dashboard/credentials/{credential_id}",
            {"credentialId": credential_id, "credentialTitle": credential_title}
        )

    def mentorship_request(self, mentor_id: str, mentee_name: str, mentee_id: str) -> Notification:
        return self.create(
            mentor_id, "connection", "New Mentorship Request",
            f"{mentee_name} requested mentorship from you",
            "/dashboard/connections?tab=requests",
            {"menteeId": mentee_id, "menteeName": mentee_name}
        )


def notify(template: Callable, **kwargs) -> None:
    """
    Run one NotificationService template in its own session.

    Usage:
        notify(NotificationService.connection_accepted, requester_id=..., accepter_name=..., accepter_id=...)
    """
    try:
        with get_db_session() as db:
            template(NotificationService(db), **kwargs)
    except Exception as e:
        logger.warning("Notification %s failed: %s", template.__name__, e)
