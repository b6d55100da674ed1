"""
Event Routes

GET /events - List events, or one by ?id= (with registration count)
POST /events - Create event (organizer is the current user)
PUT /events?id= - Update event (organizer only)
DELETE /events?id= - Delete event (organizer only)
GET /events/{event_id} - Get one event with registration count
POST /events/{event_id}/register - Register the current user
DELETE /events/{event_id}/register - Cancel the current user's registration
GET /events/{event_id}/registrations - Attendee list (organizer only)
"""

from datetime import date, datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func

from alumni_network.core.auth import get_current_user
from alumni_network.core.errors import bad_request, forbidden, not_found
from alumni_network.db.models import Event, EventRegistration, User
from alumni_network.db.postgres import get_db_session
from alumni_network.schemas.schemas import (
    AttendanceStatus, EventCreate, EventDetail, EventRegistrationResponse, EventResponse, EventStatus,
    RegistrationWithUser, UserContact
)
from alumni_network.services.notification_service import NotificationService, notify
from alumni_network.utils.validation import (
    as_positive_int, clamp_limit, contains, is_blank, parse_calendar_date, parse_id,
    parse_iso_datetime, provided, query_flag, reject_body_fields, require_choice
)

router = APIRouter(prefix="/events", tags=["Events"])

EVENT_ID_MESSAGE = "Valid event ID is required"


def _event_date(value: Any, required: bool) -> date:
    if not isinstance(value, str) or is_blank(value):
        qualifier = "is required and must be" if required else "must be"
        raise bad_request(f"Event date {qualifier} a valid ISO date string", "INVALID_EVENT_DATE")
    parsed = parse_calendar_date(value)
    if parsed is None:
        as_datetime = parse_iso_datetime(value)
        if as_datetime is None:
            raise bad_request("Event date must be a valid ISO date string", "INVALID_EVENT_DATE_FORMAT")
        parsed = as_datetime.date()
    return parsed


def _registration_deadline(value: Any, event_date: date) -> Optional[date]:
    if value is None or value == "":
        return None
    parsed = parse_calendar_date(value) if isinstance(value, str) else None
    if parsed is None:
        as_datetime = parse_iso_datetime(value)
        if as_datetime is None:
            raise bad_request("Registration deadline must be a valid ISO date string", "INVALID_REGISTRATION_DEADLINE")
        parsed = as_datetime.date()
    if parsed >= event_date:
        raise bad_request("Registration deadline must be before the event date", "INVALID_REGISTRATION_DEADLINE_DATE")
    return parsed


def _required_text(value: Any, label: str, code: str, required: bool) -> str:
    if not isinstance(value, str) or is_blank(value):
        qualifier = "is required and must be" if required else "must be"
        raise bad_request(f"{label} {qualifier} a non-empty string", code)
    return value.strip()


def _max_attendees(value: Any) -> Optional[int]:
    if value is None:
        return None
    parsed = as_positive_int(value)
    if parsed is None:
        raise bad_request("Max attendees must be a positive integer", "INVALID_MAX_ATTENDEES")
    return parsed


def _tags(value: Any) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise bad_request("Tags must be an array", "INVALID_TAGS")
    return [str(tag) for tag in value]


def _reject_organizer(payload: EventCreate) -> None:
    reject_body_fields(
        payload, ("organizerId", "organizer_id"), "ORGANIZER_ID_NOT_ALLOWED",
        "Organizer ID cannot be provided in request body"
    )


def _event_or_404(db, event_id: int) -> Event:
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        raise not_found("Event not found", "EVENT_NOT_FOUND")
    return event


def _organized_event(db, event_id: int, user_id: str) -> Event:
    event = _event_or_404(db, event_id)
    if event.organizer_id != user_id:
        raise forbidden("Forbidden: You are not the organizer of this event", "FORBIDDEN_NOT_ORGANIZER")
    return event


def _event_detail(db, event: Event) -> EventDetail:
    detail = EventDetail.model_validate(event)
    detail.registration_count = (
        db.query(func.count(EventRegistration.id)).filter(EventRegistration.event_id == event.id).scalar()
    )
    return detail


@router.get("")
async def get_events(
    id: Optional[str] = Query(None),
    university_id: Optional[str] = Query(None, alias="universityId"),
    status: Optional[str] = Query(None),
    organizer_id: Optional[str] = Query(None, alias="organizerId"),
    is_public: Optional[str] = Query(None, alias="isPublic"),
    upcoming: Optional[str] = Query(None),
    past: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    limit: int = Query(20),
    offset: int = Query(0, ge=0)
):
    """Get one event by id, or list events with filters."""
    with get_db_session() as db:
        if id is not None:
            return _event_detail(db, _event_or_404(db, parse_id(id)))

        query = db.query(Event)
        if university_id and university_id.strip().isdigit():
            query = query.filter(Event.university_id == int(university_id))
        if status:
            query = query.filter(Event.status == status)
        if organizer_id:
            query = query.filter(Event.organizer_id == organizer_id)
        if is_public is not None:
            query = query.filter(Event.is_public.is_(query_flag(is_public)))

        today = datetime.utcnow().date()
        if query_flag(upcoming):
            query = query.filter(Event.event_date >= today)
        if query_flag(past):
            query = query.filter(Event.event_date < today)
        if search:
            query = query.filter(contains(Event.title, search) | contains(Event.description, search))

        rows = (
            query.order_by(Event.created_at.desc())
            .offset(offset)
            .limit(clamp_limit(limit, 100))
            .all()
        )
        return [EventResponse.model_validate(e) for e in rows]


@router.post("", response_model=EventResponse, status_code=201)
async def create_event(payload: EventCreate, user: dict = Depends(get_current_user)):
    """Create an event organized by the current user. Status starts as upcoming."""
    _reject_organizer(payload)

    title = _required_text(payload.title, "Title", "INVALID_TITLE", True)
    description = _required_text(payload.description, "Description", "INVALID_DESCRIPTION", True)
    event_date = _event_date(payload.event_date, True)
    event_time = _required_text(payload.event_time, "Event time", "INVALID_EVENT_TIME", True)
    location = _required_text(payload.location, "Location", "INVALID_LOCATION", True)
    max_attendees = _max_attendees(payload.max_attendees)
    tags = _tags(payload.tags)
    registration_deadline = _registration_deadline(payload.registration_deadline, event_date)

    with get_db_session() as db:
        event = Event(
            title=title,
            description=description,
            event_date=event_date,
            event_time=event_time,
            location=location,
            university_id=payload.university_id,
            organizer_id=user["id"],
            max_attendees=max_attendees,
            current_attendees=0,
            image_url=payload.image_url,
            status="upcoming",
            tags=tags,
            registration_deadline=registration_deadline,
            is_public=True if payload.is_public is None else payload.is_public
        )
        db.add(event)
        db.flush()
        return EventResponse.model_validate(event)


@router.put("", response_model=EventResponse)
async def update_event(payload: EventCreate, id: Optional[str] = Query(None), user: dict = Depends(get_current_user)):
    """Update only the fields sent. Organizer only."""
    event_id = parse_id(id)
    with get_db_session() as db:
        event = _organized_event(db, event_id, user["id"])
        _reject_organizer(payload)

        if provided(payload, "title"):
            event.title = _required_text(payload.title, "Title", "INVALID_TITLE", False)
        if provided(payload, "description"):
            event.description = _required_text(payload.description, "Description", "INVALID_DESCRIPTION", False)
        if provided(payload, "event_date"):
            event.event_date = _event_date(payload.event_date, False)
        if provided(payload, "event_time"):
            event.event_time = _required_text(payload.event_time, "Event time", "INVALID_EVENT_TIME", False)
        if provided(payload, "location"):
            event.location = _required_text(payload.location, "Location", "INVALID_LOCATION", False)

        if provided(payload, "max_attendees"):
            max_attendees = _max_attendees(payload.max_attendees)
            if max_attendees is not None and max_attendees < event.current_attendees:
                raise bad_request("Max attendees cannot be less than current attendees", "MAX_ATTENDEES_TOO_LOW")
            event.max_attendees = max_attendees

        if provided(payload, "university_id"):
            event.university_id = payload.university_id
        if provided(payload, "image_url"):
            event.image_url = payload.image_url
        if provided(payload, "status"):
            event.status = require_choice(payload.status, EventStatus, "INVALID_STATUS", "status")
        if provided(payload, "tags"):
            event.tags = _tags(payload.tags)
        if provided(payload, "is_public") and payload.is_public is not None:
            event.is_public = payload.is_public

        if provided(payload, "registration_deadline"):
            event.registration_deadline = _registration_deadline(payload.registration_deadline, event.event_date)
        elif event.registration_deadline and event.registration_deadline >= event.event_date:
            raise bad_request("Registration deadline must be before the event date", "INVALID_REGISTRATION_DEADLINE_DATE")

        db.flush()
        return EventResponse.model_validate(event)


@router.delete("")
async def delete_event(id: Optional[str] = Query(None), user: dict = Depends(get_current_user)):
    """Delete an event and its registrations. Organizer only."""
    event_id = parse_id(id)
    with get_db_session() as db:
        event = _organized_event(db, event_id, user["id"])
        deleted = EventResponse.model_validate(event)
        db.delete(event)

    return {"message": "Event deleted successfully", "event": deleted}


@router.get("/{event_id}", response_model=EventDetail)
async def get_event(event_id: str):
    """Get one event with its registration count."""
    with get_db_session() as db:
        return _event_detail(db, _event_or_404(db, parse_id(event_id, message=EVENT_ID_MESSAGE)))


@router.post("/{event_id}/register", response_model=EventRegistrationResponse, status_code=201)
async def register_for_event(event_id: str, user: dict = Depends(get_current_user)):
    """Register the current user for an upcoming event. Notifies the organizer."""
    parsed_id = parse_id(event_id, message=EVENT_ID_MESSAGE)
    with get_db_session() as db:
        event = _event_or_404(db, parsed_id)
        if event.status != "upcoming":
            raise bad_request("Cannot register for non-upcoming events", "INVALID_EVENT_STATUS")

        existing = (
            db.query(EventRegistration.id)
            .filter(EventRegistration.event_id == parsed_id, EventRegistration.user_id == user["id"])
            .first()
        )
        if existing:
            raise bad_request("Already registered for this event", "ALREADY_REGISTERED")
        if event.max_attendees is not None and event.current_attendees >= event.max_attendees:
            raise bad_request("Event is full", "EVENT_FULL")
        if event.registration_deadline and event.registration_deadline < datetime.utcnow().date():
            raise bad_request("Registration deadline has passed", "DEADLINE_PASSED")

        registration = EventRegistration(event_id=parsed_id, user_id=user["id"], attendance_status="registered")
        db.add(registration)
        event.current_attendees = (event.current_attendees or 0) + 1
        db.flush()

        created = EventRegistrationResponse.model_validate(registration)
        organizer_id, event_title = event.organizer_id, event.title

    notify(
        NotificationService.event_registration,
        organizer_id=organizer_id, attendee_name=user["name"], attendee_id=user["id"],
        event_id=parsed_id, event_title=event_title
    )
    return created


@router.delete("/{event_id}/register")
async def cancel_registration(event_id: str, user: dict = Depends(get_current_user)):
    """Cancel the current user's registration for an upcoming event."""
    parsed_id = parse_id(event_id, message=EVENT_ID_MESSAGE)
    with get_db_session() as db:
        registration = (
            db.query(EventRegistration)
            .filter(EventRegistration.event_id == parsed_id, EventRegistration.user_id == user["id"])
            .first()
        )
        if not registration:
            raise not_found("Registration not found", "REGISTRATION_NOT_FOUND")

        event = _event_or_404(db, parsed_id)
        if event.status != "upcoming":
            raise bad_request("Cannot cancel registration for non-upcoming events", "INVALID_EVENT_STATUS")

        cancelled = EventRegistrationResponse.model_validate(registration)
        db.delete(registration)
        event.current_attendees = max((event.current_attendees or 0) - 1, 0)

    return {"message": "Registration cancelled successfully", "registration": cancelled}


@router.get("/{event_id}/registrations")
async def get_event_registrations(
    event_id: str,
    attendance_status: Optional[str] = Query(None, alias="attendanceStatus"),
    limit: int = Query(50),
    offset: int = Query(0, ge=0),
    user: dict = Depends(get_current_user)
):
    """Registrations with attendee contact details. Organizer only."""
    parsed_id = parse_id(event_id, message=EVENT_ID_MESSAGE)
    with get_db_session() as db:
        event = _event_or_404(db, parsed_id)
        if event.organizer_id != user["id"]:
            raise forbidden("Only event organizer can view registrations", "FORBIDDEN")

        query = (
            db.query(EventRegistration, User)
            .outerjoin(User, User.id == EventRegistration.user_id)
            .filter(EventRegistration.event_id == parsed_id)
        )
        if attendance_status:
            if attendance_status not in [s.value for s in AttendanceStatus]:
                raise bad_request(
                    "Invalid attendance status. Must be one of: registered, attended, no_show, cancelled",
                    "INVALID_STATUS"
                )
            query = query.filter(EventRegistration.attendance_status == attendance_status)

        rows = (
            query.order_by(EventRegistration.registered_at.desc())
            .offset(offset)
            .limit(clamp_limit(limit, 200))
            .all()
        )

        registrations = []
        for registration, attendee in rows:
            entry = RegistrationWithUser.model_validate(registration)
            entry.user = UserContact.model_validate(attendee) if attendee else None
            registrations.append(entry)
        return registrations
