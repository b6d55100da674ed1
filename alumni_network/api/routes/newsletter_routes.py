"""
Newsletter Routes

GET /newsletters - List newsletters, or one by ?id=
POST /newsletters - Create a newsletter
PUT /newsletters?id= - Partial update
DELETE /newsletters?id= - Delete
POST /newsletters/generate - Draft a newsletter from a prompt
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query

from alumni_network.core.auth import get_current_user
from alumni_network.core.errors import bad_request, not_found
from alumni_network.db.models import Newsletter
from alumni_network.db.postgres import get_db_session
from alumni_network.schemas.schemas import (
    NewsletterCreate, NewsletterGenerate, NewsletterGenerateResponse, NewsletterResponse, NewsletterStatus
)
from alumni_network.services.newsletter_service import compose_newsletter, default_title
from alumni_network.utils.validation import (
    choice_values, clamp_limit, contains, is_blank, parse_id, parse_iso_datetime, provided,
    reject_body_fields, require_choice
)

router = APIRouter(prefix="/newsletters", tags=["Newsletters"])


def _university_id(value: Any) -> int:
    return parse_id(value, code="INVALID_UNIVERSITY_ID", message="universityId must be a valid integer")


def _recipient_count(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise bad_request("recipientCount must be a non-negative integer", "INVALID_RECIPIENT_COUNT")
    return value


def _open_rate(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0 <= value <= 100:
        raise bad_request("openRate must be a number between 0 and 100", "INVALID_OPEN_RATE")
    return float(value)


def _publish_date(value: Any):
    if not value:
        return None
    parsed = parse_iso_datetime(value)
    if parsed is None:
        raise bad_request("publishDate must be a valid ISO date string", "INVALID_PUBLISH_DATE")
    return parsed


def _reject_user_id(payload) -> None:
    reject_body_fields(
        payload, ("userId", "user_id"), "USER_ID_NOT_ALLOWED", "User ID cannot be provided in request body"
    )


def _get_or_404(db, newsletter_id: int) -> Newsletter:
    newsletter = db.query(Newsletter).filter(Newsletter.id == newsletter_id).first()
    if not newsletter:
        raise not_found("Newsletter not found", "NEWSLETTER_NOT_FOUND")
    return newsletter


@router.get("")
async def get_newsletters(
    id: Optional[str] = Query(None),
    university_id: Optional[int] = Query(None, alias="universityId"),
    status: Optional[str] = Query(None),
    created_by: Optional[str] = Query(None, alias="createdBy"),
    search: Optional[str] = Query(None),
    limit: int = Query(20),
    offset: int = Query(0, ge=0)
):
    """Get one newsletter by id, or list newsletters with filters."""
    with get_db_session() as db:
        if id is not None:
            return NewsletterResponse.model_validate(_get_or_404(db, parse_id(id)))

        query = db.query(Newsletter)
        if university_id is not None:
            query = query.filter(Newsletter.university_id == university_id)
        if status in choice_values(NewsletterStatus):
            query = query.filter(Newsletter.status == status)
        if created_by:
            query = query.filter(Newsletter.created_by == created_by)
        if search:
            query = query.filter(contains(Newsletter.title, search) | contains(Newsletter.content, search))

        rows = (
            query.order_by(Newsletter.created_at.desc())
            .offset(offset)
            .limit(clamp_limit(limit, 100))
            .all()
        )
        return [NewsletterResponse.model_validate(n) for n in rows]


@router.post("", response_model=NewsletterResponse, status_code=201)
async def create_newsletter(payload: NewsletterCreate, user: dict = Depends(get_current_user)):
    """Create a newsletter. Status defaults to draft; scheduled needs a publishDate."""
    _reject_user_id(payload)

    if is_blank(payload.university_id):
        raise bad_request("universityId is required", "MISSING_REQUIRED_FIELD")
    if not isinstance(payload.title, str) or is_blank(payload.title):
        raise bad_request("title is required and must be a non-empty string", "MISSING_REQUIRED_FIELD")
    if not isinstance(payload.content, str) or is_blank(payload.content):
        raise bad_request("content is required and must be a non-empty string", "MISSING_REQUIRED_FIELD")
    if is_blank(payload.created_by):
        raise bad_request("createdBy is required", "MISSING_REQUIRED_FIELD")

    university_id = _university_id(payload.university_id)
    status = payload.status or "draft"
    require_choice(status, NewsletterStatus, "INVALID_STATUS", "status")
    if status == "scheduled" and not payload.publish_date:
        raise bad_request("publishDate is required when status is scheduled", "MISSING_PUBLISH_DATE")

    recipient_count = 0 if payload.recipient_count is None else _recipient_count(payload.recipient_count)
    open_rate = 0.0 if payload.open_rate is None else _open_rate(payload.open_rate)

    with get_db_session() as db:
        newsletter = Newsletter(
            university_id=university_id,
            title=payload.title.strip(),
            content=payload.content.strip(),
            html_content=payload.html_content,
            status=status,
            publish_date=_publish_date(payload.publish_date),
            recipient_count=recipient_count,
            open_rate=open_rate,
            ai_prompt=payload.ai_prompt,
            created_by=str(payload.created_by).strip()
        )
        db.add(newsletter)
        db.flush()
        return NewsletterResponse.model_validate(newsletter)


@router.put("", response_model=NewsletterResponse)
async def update_newsletter(
    payload: NewsletterCreate,
    id: Optional[str] = Query(None),
    user: dict = Depends(get_current_user)
):
    """Update only the fields sent in the body."""
    newsletter_id = parse_id(id)
    _reject_user_id(payload)

    with get_db_session() as db:
        newsletter = _get_or_404(db, newsletter_id)

        if provided(payload, "university_id"):
            newsletter.university_id = _university_id(payload.university_id)
        if provided(payload, "title"):
            if not isinstance(payload.title, str) or is_blank(payload.title):
                raise bad_request("title must be a non-empty string", "INVALID_TITLE")
            newsletter.title = payload.title.strip()
        if provided(payload, "content"):
            if not isinstance(payload.content, str) or is_blank(payload.content):
                raise bad_request("content must be a non-empty string", "INVALID_CONTENT")
            newsletter.content = payload.content.strip()
        if provided(payload, "html_content"):
            newsletter.html_content = payload.html_content

        if provided(payload, "status"):
            require_choice(payload.status, NewsletterStatus, "INVALID_STATUS", "status")
            if payload.status == "scheduled" and not payload.publish_date and not newsletter.publish_date:
                raise bad_request("publishDate is required when status is scheduled", "MISSING_PUBLISH_DATE")
            newsletter.status = payload.status

        if provided(payload, "publish_date"):
            newsletter.publish_date = _publish_date(payload.publish_date)
        if provided(payload, "recipient_count"):
            newsletter.recipient_count = _recipient_count(payload.recipient_count)
        if provided(payload, "open_rate"):
            newsletter.open_rate = _open_rate(payload.open_rate)
        if provided(payload, "ai_prompt"):
            newsletter.ai_prompt = payload.ai_prompt
        if provided(payload, "created_by"):
            if not isinstance(payload.created_by, str) or is_blank(payload.created_by):
                raise bad_request("createdBy must be a non-empty string", "INVALID_CREATED_BY")
            newsletter.created_by = payload.created_by.strip()

        db.flush()
        return NewsletterResponse.model_validate(newsletter)


@router.delete("")
async def delete_newsletter(id: Optional[str] = Query(None), user: dict = Depends(get_current_user)):
    """Delete a newsletter and return it."""
    newsletter_id = parse_id(id)
    with get_db_session() as db:
        newsletter = _get_or_404(db, newsletter_id)
        deleted = NewsletterResponse.model_validate(newsletter)
        db.delete(newsletter)

    return {"message": "Newsletter deleted successfully", "deleted": deleted}


@router.post("/generate", response_model=NewsletterGenerateResponse, status_code=201)
async def generate_newsletter(payload: NewsletterGenerate, user: dict = Depends(get_current_user)):
    """
    Draft a newsletter from an AI prompt.

    The body comes from DeepSeek when an API key is configured, otherwise from
    the fixed alumni template. Saved as a draft with no recipients yet.
    """
    if is_blank(payload.university_id):
        raise bad_request("universityId is required", "MISSING_UNIVERSITY_ID")
    if is_blank(payload.created_by):
        raise bad_request("createdBy is required", "MISSING_CREATED_BY")
    if not isinstance(payload.ai_prompt, str) or is_blank(payload.ai_prompt):
        raise bad_request("aiPrompt is required", "MISSING_AI_PROMPT")

    university_id = _university_id(payload.university_id)
    ai_prompt = payload.ai_prompt.strip()
    content, html_content = compose_newsletter(ai_prompt)

    with get_db_session() as db:
        newsletter = Newsletter(
            university_id=university_id,
            title=payload.title.strip() if payload.title and payload.title.strip() else default_title(),
            content=content,
            html_content=html_content,
            status="draft",
            recipient_count=0,
            open_rate=0,
            ai_prompt=ai_prompt,
            created_by=str(payload.created_by).strip()
        )
        db.add(newsletter)
        db.flush()
        created = NewsletterResponse.model_validate(newsletter)

    return NewsletterGenerateResponse(success=True, message="Newsletter generated successfully", newsletter=created)
