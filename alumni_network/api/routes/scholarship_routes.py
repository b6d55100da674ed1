"""
Scholarship Routes

GET /scholarships - List scholarships (active by default), or one by ?id=
POST /scholarships - Fund a scholarship
PUT /scholarships?id= - Update (funder only)
DELETE /scholarships?id= - Delete (funder only)
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from alumni_network.core.auth import get_current_user
from alumni_network.core.errors import bad_request, forbidden, not_found
from alumni_network.db.models import Scholarship, University, User, UserProfile
from alumni_network.db.postgres import get_db_session
from alumni_network.schemas.schemas import (
    FunderProfile, ScholarshipCategory, ScholarshipCreate, ScholarshipDetail, ScholarshipResponse,
    ScholarshipStatus, UniversityBrief, UserSummary
)
from alumni_network.utils.validation import (
    as_number, as_positive_int, as_string_list, choice_values, clamp_limit, contains, is_blank,
    ordered, parse_id, parse_iso_datetime, provided, require_choice, sort_column
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/scholarships", tags=["Scholarships"])

REQUIRED_FIELDS = (
    "title", "description", "amount", "eligibility_criteria", "application_deadline", "category"
)

SORTABLE = {
    "title": "title",
    "amount": "amount",
    "applicationDeadline": "application_deadline",
    "createdAt": "created_at",
}

PLAIN_FIELDS = (
    "title", "description", "currency", "eligibility_criteria",
    "academic_year", "is_recurring", "recurring_frequency", "university_id"
)

INVALID_ID_MESSAGE = "Valid scholarship ID is required"


def _validated_changes(payload: ScholarshipCreate) -> dict:
    changes = {}
    if provided(payload, "category"):
        changes["category"] = require_choice(payload.category, ScholarshipCategory, "INVALID_CATEGORY", "category")
    if provided(payload, "status") and payload.status is not None:
        changes["status"] = require_choice(payload.status, ScholarshipStatus, "INVALID_STATUS", "status")

    if provided(payload, "amount"):
        amount = as_number(payload.amount)
        if amount is None or amount <= 0:
            raise bad_request("Amount must be a positive number", "INVALID_AMOUNT")
        changes["amount"] = amount

    if provided(payload, "max_recipients"):
        max_recipients = as_positive_int(payload.max_recipients)
        if max_recipients is None:
            raise bad_request("Max recipients must be a positive integer", "INVALID_MAX_RECIPIENTS")
        changes["max_recipients"] = max_recipients

    if provided(payload, "application_deadline"):
        deadline = parse_iso_datetime(payload.application_deadline)
        if deadline is None or deadline <= datetime.utcnow():
            raise bad_request("Application deadline must be a valid future date", "INVALID_DEADLINE")
        changes["application_deadline"] = deadline

    for field in ("requirements", "tags"):
        if provided(payload, field):
            value = getattr(payload, field)
            parsed = [] if value is None else as_string_list(value)
            if parsed is None:
                raise bad_request(f"{field} must be an array of strings", f"INVALID_{field.upper()}")
            changes[field] = parsed

    for field in PLAIN_FIELDS:
        if provided(payload, field):
            value = getattr(payload, field)
            changes[field] = value.strip() if isinstance(value, str) else value
    return changes


def scholarship_detail(scholarship, funder, profile, university) -> ScholarshipDetail:
    detail = ScholarshipDetail.model_validate(scholarship)
    detail.funder = UserSummary.model_validate(funder) if funder else None
    detail.funder_profile = FunderProfile.model_validate(profile) if profile else None
    detail.university = UniversityBrief.model_validate(university) if university else None
    return detail


def _funded_scholarship(db, scholarship_id: int, user_id: str, action: str) -> Scholarship:
    scholarship = db.query(Scholarship).filter(Scholarship.id == scholarship_id).first()
    if not scholarship:
        raise not_found("Scholarship not found", "SCHOLARSHIP_NOT_FOUND")
    if scholarship.funded_by_id != user_id:
        raise forbidden(f"Unauthorized to {action} this scholarship", "UNAUTHORIZED")
    return scholarship


@router.get("")
async def get_scholarships(
    id: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    funded_by_id: Optional[str] = Query(None, alias="fundedById"),
    university_id: Optional[int] = Query(None, alias="universityId"),
    academic_year: Optional[str] = Query(None, alias="academicYear"),
    status: Optional[str] = Query("active"),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query("desc", alias="sortOrder"),
    limit: int = Query(20),
    offset: int = Query(0, ge=0)
):
    """
    Get one scholarship by id, or list scholarships.

    Each entry carries the funder, the funder's profile summary and the university.
    """
    with get_db_session() as db:
        query = (
            db.query(Scholarship, User, UserProfile, University)
            .outerjoin(User, User.id == Scholarship.funded_by_id)
            .outerjoin(UserProfile, UserProfile.user_id == Scholarship.funded_by_id)
            .outerjoin(University, University.id == Scholarship.university_id)
        )

        if id is not None:
            row = query.filter(Scholarship.id == parse_id(id, message=INVALID_ID_MESSAGE)).first()
            if not row:
                raise not_found("Scholarship not found", "SCHOLARSHIP_NOT_FOUND")
            return scholarship_detail(*row)

        if status in choice_values(ScholarshipStatus):
            query = query.filter(Scholarship.status == status)
        if search:
            query = query.filter(
                contains(Scholarship.title, search)
                | contains(Scholarship.description, search)
                | contains(Scholarship.eligibility_criteria, search)
            )
        if category in choice_values(ScholarshipCategory):
            query = query.filter(Scholarship.category == category)
        if funded_by_id:
            query = query.filter(Scholarship.funded_by_id == funded_by_id)
        if university_id is not None:
            query = query.filter(Scholarship.university_id == university_id)
        if academic_year:
            query = query.filter(Scholarship.academic_year == academic_year)

        query = ordered(query, sort_column(Scholarship, sort_by, SORTABLE), sort_order)
        rows = query.offset(offset).limit(clamp_limit(limit, 100)).all()
        return [scholarship_detail(*row) for row in rows]


@router.post("", response_model=ScholarshipResponse, status_code=201)
async def create_scholarship(payload: ScholarshipCreate, user: dict = Depends(get_current_user)):
    """Fund a scholarship. The funder is the current user."""
    if any(is_blank(getattr(payload, field)) for field in REQUIRED_FIELDS):
        raise bad_request(
            "Missing required fields: title, description, amount, eligibilityCriteria, applicationDeadline, category",
            "MISSING_REQUIRED_FIELDS"
        )

    changes = _validated_changes(payload)
    if not changes.get("is_recurring"):
        changes["recurring_frequency"] = None

    with get_db_session() as db:
        scholarship = Scholarship(funded_by_id=user["id"], **changes)
        db.add(scholarship)
        db.flush()
        created = ScholarshipResponse.model_validate(scholarship)

    logger.info("New scholarship created: %s by %s", created.title, user["name"])
    return created


@router.put("", response_model=ScholarshipResponse)
async def update_scholarship(
    payload: ScholarshipCreate,
    id: Optional[str] = Query(None),
    user: dict = Depends(get_current_user)
):
    """Update only the fields sent. Funder only."""
    scholarship_id = parse_id(id, message=INVALID_ID_MESSAGE)
    with get_db_session() as db:
        scholarship = _funded_scholarship(db, scholarship_id, user["id"], "update")
        changes = _validated_changes(payload)
        if changes.get("max_recipients", scholarship.current_recipients) < scholarship.current_recipients:
            raise bad_request("Max recipients cannot be less than current recipients", "MAX_RECIPIENTS_TOO_LOW")
        for field, value in changes.items():
            setattr(scholarship, field, value)
        db.flush()
        return ScholarshipResponse.model_validate(scholarship)


@router.delete("")
async def delete_scholarship(id: Optional[str] = Query(None), user: dict = Depends(get_current_user)):
    """Delete a scholarship. Funder only."""
    scholarship_id = parse_id(id, message=INVALID_ID_MESSAGE)
    with get_db_session() as db:
        scholarship = _funded_scholarship(db, scholarship_id, user["id"], "delete")
        deleted = ScholarshipResponse.model_validate(scholarship)
        db.delete(scholarship)

    return {"message": "Scholarship deleted successfully", "scholarship": deleted}
