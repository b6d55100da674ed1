"""
Curriculum Feedback Routes

GET /curriculum-feedback - List feedback, or one by ?id=
POST /curriculum-feedback - Submit feedback to a university
PUT /curriculum-feedback?id= - Update / review (submitter only)
DELETE /curriculum-feedback?id= - Delete (submitter only)
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from alumni_network.core.auth import get_current_user
from alumni_network.core.errors import bad_request, forbidden, not_found
from alumni_network.db.models import CurriculumFeedback, University, User, UserProfile
from alumni_network.db.postgres import get_db_session
from alumni_network.schemas.schemas import (
    FeedbackCreate, FeedbackDetail, FeedbackPriority, FeedbackResponse, FeedbackStatus, FeedbackType,
    FeedbackUpdate, FunderProfile, UniversityBrief, UserSummary
)
from alumni_network.utils.validation import (
    choice_values, clamp_limit, contains, is_blank, ordered, parse_id, provided, require_choice, sort_column
)

router = APIRouter(prefix="/curriculum-feedback", tags=["Curriculum Feedback"])

REQUIRED_FIELDS = (
    "university_id", "department", "feedback_type", "current_industry_trends", "suggested_changes"
)

SORTABLE = {"priority": "priority", "status": "status", "department": "department", "createdAt": "created_at"}

TEXT_FIELDS = (
    "department", "course_code", "course_name", "current_industry_trends", "suggested_changes",
    "implementation_complexity", "potential_impact", "supporting_evidence"
)
LIST_FIELDS = ("skills_in_demand", "tools_and_technologies", "industry_projects")

INVALID_ID_MESSAGE = "Valid feedback ID is required"


def _validated_changes(payload: FeedbackCreate) -> dict:
    changes = {}
    if provided(payload, "feedback_type"):
        changes["feedback_type"] = require_choice(
            payload.feedback_type, FeedbackType, "INVALID_FEEDBACK_TYPE", "feedbackType"
        )
    if provided(payload, "priority") and payload.priority is not None:
        changes["priority"] = require_choice(payload.priority, FeedbackPriority, "INVALID_PRIORITY", "priority")

    for field in LIST_FIELDS:
        if provided(payload, field):
            value = getattr(payload, field)
            if value is not None and not isinstance(value, list):
                raise bad_request(f"{field} must be an array", "VALIDATION_ERROR")
            changes[field] = value or []

    for field in TEXT_FIELDS:
        if provided(payload, field):
            value = getattr(payload, field)
            changes[field] = value.strip() if isinstance(value, str) else value
    return changes


def feedback_detail(feedback, submitter, profile, university) -> FeedbackDetail:
    detail = FeedbackDetail.model_validate(feedback)
    detail.submitter = UserSummary.model_validate(submitter) if submitter else None
    detail.submitter_profile = FunderProfile.model_validate(profile) if profile else None
    detail.university = UniversityBrief.model_validate(university) if university else None
    return detail


def _submitted_feedback(db, feedback_id: int, user_id: str, action: str) -> CurriculumFeedback:
    feedback = db.query(CurriculumFeedback).filter(CurriculumFeedback.id == feedback_id).first()
    if not feedback:
        raise not_found("Feedback not found", "FEEDBACK_NOT_FOUND")
    if feedback.submitted_by_id != user_id:
        raise forbidden(f"Unauthorized to {action} this feedback", "UNAUTHORIZED")
    return feedback


@router.get("")
async def get_curriculum_feedback(
    id: Optional[str] = Query(None),
    submitted_by_id: Optional[str] = Query(None, alias="submittedById"),
    university_id: Optional[int] = Query(None, alias="universityId"),
    department: Optional[str] = Query(None),
    feedback_type: Optional[str] = Query(None, alias="feedbackType"),
    status: Optional[str] = Query(None),
    priority: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query("desc", alias="sortOrder"),
    limit: int = Query(20),
    offset: int = Query(0, ge=0)
):
    """Get one feedback entry by id, or list feedback with filters."""
    with get_db_session() as db:
        query = (
            db.query(CurriculumFeedback, User, UserProfile, University)
            .outerjoin(User, User.id == CurriculumFeedback.submitted_by_id)
            .outerjoin(UserProfile, UserProfile.user_id == CurriculumFeedback.submitted_by_id)
            .outerjoin(University, University.id == CurriculumFeedback.university_id)
        )

        if id is not None:
            row = query.filter(CurriculumFeedback.id == parse_id(id, message=INVALID_ID_MESSAGE)).first()
            if not row:
                raise not_found("Feedback not found", "FEEDBACK_NOT_FOUND")
            return feedback_detail(*row)

        if submitted_by_id:
            query = query.filter(CurriculumFeedback.submitted_by_id == submitted_by_id)
        if university_id is not None:
            query = query.filter(CurriculumFeedback.university_id == university_id)
        if department:
            query = query.filter(CurriculumFeedback.department == department)
        if feedback_type in choice_values(FeedbackType):
            query = query.filter(CurriculumFeedback.feedback_type == feedback_type)
        if status in choice_values(FeedbackStatus):
            query = query.filter(CurriculumFeedback.status == status)
        if priority in choice_values(FeedbackPriority):
            query = query.filter(CurriculumFeedback.priority == priority)
        if search:
            query = query.filter(
                contains(CurriculumFeedback.course_name, search)
                | contains(CurriculumFeedback.current_industry_trends, search)
                | contains(CurriculumFeedback.suggested_changes, search)
            )

        query = ordered(query, sort_column(CurriculumFeedback, sort_by, SORTABLE), sort_order)
        rows = query.offset(offset).limit(clamp_limit(limit, 100)).all()
        return [feedback_detail(*row) for row in rows]


@router.post("", response_model=FeedbackResponse, status_code=201)
async def submit_feedback(payload: FeedbackCreate, user: dict = Depends(get_current_user)):
    """Submit curriculum feedback. Priority defaults to medium, status to submitted."""
    if any(is_blank(getattr(payload, field)) for field in REQUIRED_FIELDS):
        raise bad_request(
            "Missing required fields: universityId, department, feedbackType, currentIndustryTrends, suggestedChanges",
            "MISSING_REQUIRED_FIELDS"
        )

    changes = _validated_changes(payload)
    with get_db_session() as db:
        if not db.query(University.id).filter(University.id == payload.university_id).first():
            raise bad_request("University not found", "UNIVERSITY_NOT_FOUND")

        feedback = CurriculumFeedback(
            submitted_by_id=user["id"],
            university_id=payload.university_id,
            status="submitted",
            **changes
        )
        db.add(feedback)
        db.flush()
        return FeedbackResponse.model_validate(feedback)


@router.put("", response_model=FeedbackResponse)
async def update_feedback(
    payload: FeedbackUpdate,
    id: Optional[str] = Query(None),
    user: dict = Depends(get_current_user)
):
    """
    Update only the fields sent. Submitter only.

    A valid status records who reviewed it and when.
    """
    feedback_id = parse_id(id, message=INVALID_ID_MESSAGE)
    with get_db_session() as db:
        feedback = _submitted_feedback(db, feedback_id, user["id"], "update")
        for field, value in _validated_changes(payload).items():
            setattr(feedback, field, value)

        if provided(payload, "status") and payload.status in choice_values(FeedbackStatus):
            feedback.status = payload.status
            feedback.reviewed_at = datetime.utcnow()
            feedback.reviewed_by_id = user["id"]
        if provided(payload, "review_notes"):
            feedback.review_notes = payload.review_notes
        if provided(payload, "implementation_timeline"):
            feedback.implementation_timeline = payload.implementation_timeline

        db.flush()
        return FeedbackResponse.model_validate(feedback)


@router.delete("")
async def delete_feedback(id: Optional[str] = Query(None), user: dict = Depends(get_current_user)):
    """Delete feedback. Submitter only."""
    feedback_id = parse_id(id, message=INVALID_ID_MESSAGE)
    with get_db_session() as db:
        feedback = _submitted_feedback(db, feedback_id, user["id"], "delete")
        deleted = FeedbackResponse.model_validate(feedback)
        db.delete(feedback)

    return {"message": "Feedback deleted successfully", "feedback": deleted}
