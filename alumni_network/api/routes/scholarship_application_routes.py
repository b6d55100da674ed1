"""
Scholarship Application Routes

GET /scholarships/applications - List applications, or one by ?id=
POST /scholarships/applications - Apply to an active scholarship
PUT /scholarships/applications?id= - Applicant edits; funder reviews
DELETE /scholarships/applications?id= - Withdraw (applicant only)
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from alumni_network.core.auth import get_current_user
from alumni_network.core.errors import bad_request, forbidden, not_found
from alumni_network.db.models import Scholarship, ScholarshipApplication
from alumni_network.db.postgres import get_db_session
from alumni_network.schemas.schemas import (
    ScholarshipApplicationCreate, ScholarshipApplicationResponse, ScholarshipApplicationStatus,
    ScholarshipApplicationUpdate
)
from alumni_network.utils.validation import (
    choice_values, clamp_limit, is_blank, parse_id, provided, require_choice
)

router = APIRouter(prefix="/scholarships/applications", tags=["Scholarship Applications"])

APPLICANT_FIELDS = ("application_essay", "academic_records", "financial_need_statement")
INVALID_ID_MESSAGE = "Valid application ID is required"


def _letters(value) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise bad_request("recommendationLetters must be an array", "INVALID_RECOMMENDATION_LETTERS")
    return value


def _application_or_404(db, application_id: int):
    row = (
        db.query(ScholarshipApplication, Scholarship)
        .join(Scholarship, Scholarship.id == ScholarshipApplication.scholarship_id)
        .filter(ScholarshipApplication.id == application_id)
        .first()
    )
    if not row:
        raise not_found("Application not found", "APPLICATION_NOT_FOUND")
    return row


def _apply_review_status(application: ScholarshipApplication, scholarship: Scholarship, status: str) -> None:
    """Keep currentRecipients in step with approvals."""
    was_approved = application.status == "approved"
    if status == "approved" and not was_approved:
        if scholarship.current_recipients + 1 > scholarship.max_recipients:
            raise bad_request("Scholarship has reached its maximum number of recipients", "SCHOLARSHIP_FULL")
        scholarship.current_recipients += 1
    elif was_approved and status != "approved":
        scholarship.current_recipients = max(0, scholarship.current_recipients - 1)
    application.status = status


@router.get("")
async def get_scholarship_applications(
    id: Optional[str] = Query(None),
    scholarship_id: Optional[str] = Query(None, alias="scholarshipId"),
    applicant_id: Optional[str] = Query(None, alias="applicantId"),
    status: Optional[str] = Query(None),
    limit: int = Query(20),
    offset: int = Query(0, ge=0)
):
    """Get one application by id, or list applications newest first."""
    with get_db_session() as db:
        if id is not None:
            application, _ = _application_or_404(db, parse_id(id, message=INVALID_ID_MESSAGE))
            return ScholarshipApplicationResponse.model_validate(application)

        query = db.query(ScholarshipApplication)
        if scholarship_id and scholarship_id.strip().isdigit():
            query = query.filter(ScholarshipApplication.scholarship_id == int(scholarship_id))
        if applicant_id:
            query = query.filter(ScholarshipApplication.applicant_id == applicant_id)
        if status in choice_values(ScholarshipApplicationStatus):
            query = query.filter(ScholarshipApplication.status == status)

        rows = (
            query.order_by(ScholarshipApplication.applied_at.desc())
            .offset(offset)
            .limit(clamp_limit(limit, 100))
            .all()
        )
        return [ScholarshipApplicationResponse.model_validate(a) for a in rows]


@router.post("", response_model=ScholarshipApplicationResponse, status_code=201)
async def apply_to_scholarship(payload: ScholarshipApplicationCreate, user: dict = Depends(get_current_user)):
    """Apply to an active scholarship before its deadline."""
    if is_blank(payload.scholarship_id):
        raise bad_request("scholarshipId is required", "MISSING_SCHOLARSHIP_ID")
    scholarship_id = parse_id(payload.scholarship_id, message="scholarshipId must be a valid integer")
    if is_blank(payload.application_essay):
        raise bad_request("applicationEssay is required", "MISSING_APPLICATION_ESSAY")
    letters = _letters(payload.recommendation_letters)

    with get_db_session() as db:
        scholarship = db.query(Scholarship).filter(Scholarship.id == scholarship_id).first()
        if not scholarship:
            raise not_found("Scholarship not found", "SCHOLARSHIP_NOT_FOUND")
        if scholarship.status != "active":
            raise bad_request("Scholarship is no longer accepting applications", "SCHOLARSHIP_CLOSED")
        if scholarship.application_deadline < datetime.utcnow():
            raise bad_request("Application deadline has passed", "DEADLINE_PASSED")

        already = (
            db.query(ScholarshipApplication.id)
            .filter(
                ScholarshipApplication.scholarship_id == scholarship_id,
                ScholarshipApplication.applicant_id == user["id"]
            )
            .first()
        )
        if already:
            raise bad_request("You have already applied to this scholarship", "ALREADY_APPLIED")

        application = ScholarshipApplication(
            scholarship_id=scholarship_id,
            applicant_id=user["id"],
            application_essay=payload.application_essay.strip(),
            academic_records=payload.academic_records or None,
            recommendation_letters=letters,
            financial_need_statement=payload.financial_need_statement or None
        )
        db.add(application)
        db.flush()
        return ScholarshipApplicationResponse.model_validate(application)


@router.put("", response_model=ScholarshipApplicationResponse)
async def update_scholarship_application(
    payload: ScholarshipApplicationUpdate,
    id: Optional[str] = Query(None),
    user: dict = Depends(get_current_user)
):
    """
    The applicant may edit the essay and supporting material; the funder may
    set status, reviewScore and reviewNotes. Approving counts a recipient.
    """
    application_id = parse_id(id, message=INVALID_ID_MESSAGE)
    with get_db_session() as db:
        application, scholarship = _application_or_404(db, application_id)
        is_applicant = application.applicant_id == user["id"]
        is_funder = scholarship.funded_by_id == user["id"]
        if not (is_applicant or is_funder):
            raise forbidden("Unauthorized to update this application", "UNAUTHORIZED")

        if is_applicant:
            for field in APPLICANT_FIELDS:
                if provided(payload, field):
                    setattr(application, field, getattr(payload, field))
            if provided(payload, "recommendation_letters"):
                application.recommendation_letters = _letters(payload.recommendation_letters)

        if is_funder:
            if provided(payload, "status"):
                status = require_choice(payload.status, ScholarshipApplicationStatus, "INVALID_STATUS", "status")
                _apply_review_status(application, scholarship, status)
                application.reviewed_at = datetime.utcnow()
                application.reviewed_by_id = user["id"]
            if provided(payload, "review_score"):
                application.review_score = payload.review_score
            if provided(payload, "review_notes"):
                application.review_notes = payload.review_notes

        db.flush()
        return ScholarshipApplicationResponse.model_validate(application)


@router.delete("")
async def delete_scholarship_application(id: Optional[str] = Query(None), user: dict = Depends(get_current_user)):
    """Withdraw an application. Applicant only."""
    application_id = parse_id(id, message=INVALID_ID_MESSAGE)
    with get_db_session() as db:
        application, scholarship = _application_or_404(db, application_id)
        if application.applicant_id != user["id"]:
            raise forbidden("Unauthorized to delete this application", "UNAUTHORIZED")

        if application.status == "approved":
            scholarship.current_recipients = max(0, scholarship.current_recipients - 1)
        deleted = ScholarshipApplicationResponse.model_validate(application)
        db.delete(application)

    return {"message": "Application deleted successfully", "application": deleted}
