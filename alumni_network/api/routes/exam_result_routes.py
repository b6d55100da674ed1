"""
Exam Result Routes

GET /exam-results - List results, or one by ?id=
POST /exam-results - Record a result for the caller
PUT /exam-results?id= - Partial update (owner only)
DELETE /exam-results?id= - Delete (owner only)
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query

from alumni_network.core.auth import get_current_user
from alumni_network.core.errors import bad_request, not_found
from alumni_network.db.models import ExamResult, University
from alumni_network.db.postgres import get_db_session
from alumni_network.schemas.schemas import ExamResultCreate, ExamResultResponse
from alumni_network.utils.validation import (
    clamp_limit, contains, is_blank, parse_id, parse_iso_datetime, provided, query_flag, reject_body_fields
)

router = APIRouter(prefix="/exam-results", tags=["Exam Results"])

GRADE_BANDS = ((90, "A"), (80, "B"), (70, "C"), (60, "D"))


def calculate_grade(score: float, max_score: float) -> str:
    percentage = score / max_score * 100
    for floor, grade in GRADE_BANDS:
        if percentage >= floor:
            return grade
    return "F"


def _check_scores(score: Any, max_score: Any) -> None:
    numeric = all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in (score, max_score))
    if not numeric:
        raise bad_request("Score and maxScore must be numbers", "INVALID_SCORE_TYPE")
    if score < 0 or max_score <= 0:
        raise bad_request("Score must be non-negative and maxScore must be greater than 0", "INVALID_SCORE")
    if score > max_score:
        raise bad_request("Score cannot be greater than maxScore", "INVALID_SCORE")


def _exam_date(value: Any):
    parsed = parse_iso_datetime(value)
    if parsed is None:
        raise bad_request("examDate must be a valid ISO date string", "INVALID_EXAM_DATE")
    return parsed


def _require_university(db, university_id: Any) -> None:
    if not db.query(University.id).filter(University.id == university_id).first():
        raise bad_request("University not found", "UNIVERSITY_NOT_FOUND")


def _reject_user_id(payload) -> None:
    reject_body_fields(
        payload, ("userId", "user_id"), "USER_ID_NOT_ALLOWED", "User ID cannot be provided in request body"
    )


def _owned_result(db, result_id: int, user_id: str) -> ExamResult:
    result = (
        db.query(ExamResult)
        .filter(ExamResult.id == result_id, ExamResult.user_id == user_id)
        .first()
    )
    if not result:
        raise not_found("Exam result not found", "EXAM_RESULT_NOT_FOUND")
    return result


@router.get("")
async def get_exam_results(
    id: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None, alias="userId"),
    university_id: Optional[int] = Query(None, alias="universityId"),
    subject: Optional[str] = Query(None),
    is_verified: Optional[str] = Query(None, alias="isVerified"),
    search: Optional[str] = Query(None),
    limit: int = Query(20),
    offset: int = Query(0, ge=0)
):
    """Get one result by id, or list results by exam date, latest first."""
    with get_db_session() as db:
        if id is not None:
            result = db.query(ExamResult).filter(ExamResult.id == parse_id(id)).first()
            if not result:
                raise not_found("Exam result not found", "EXAM_RESULT_NOT_FOUND")
            return ExamResultResponse.model_validate(result)

        query = db.query(ExamResult)
        if user_id:
            query = query.filter(ExamResult.user_id == user_id)
        if university_id is not None:
            query = query.filter(ExamResult.university_id == university_id)
        if subject:
            query = query.filter(ExamResult.subject == subject)
        if is_verified is not None:
            query = query.filter(ExamResult.is_verified.is_(query_flag(is_verified)))
        if search:
            query = query.filter(contains(ExamResult.exam_name, search) | contains(ExamResult.subject, search))

        rows = (
            query.order_by(ExamResult.exam_date.desc())
            .offset(offset)
            .limit(clamp_limit(limit, 100))
            .all()
        )
        return [ExamResultResponse.model_validate(r) for r in rows]


@router.post("", response_model=ExamResultResponse, status_code=201)
async def create_exam_result(payload: ExamResultCreate, user: dict = Depends(get_current_user)):
    """Grade is derived from the percentage unless one is given."""
    _reject_user_id(payload)

    required = (payload.university_id, payload.exam_name, payload.subject, payload.exam_date)
    if any(is_blank(v) for v in required) or payload.score is None or payload.max_score is None:
        raise bad_request(
            "Required fields missing: universityId, examName, subject, score, maxScore, examDate",
            "MISSING_REQUIRED_FIELDS"
        )
    _check_scores(payload.score, payload.max_score)
    exam_date = _exam_date(payload.exam_date)

    with get_db_session() as db:
        _require_university(db, payload.university_id)

        result = ExamResult(
            user_id=user["id"],
            university_id=payload.university_id,
            exam_name=payload.exam_name.strip(),
            subject=payload.subject.strip(),
            score=payload.score,
            max_score=payload.max_score,
            grade=payload.grade or calculate_grade(payload.score, payload.max_score),
            exam_date=exam_date,
            credential_id=payload.credential_id,
            is_verified=bool(payload.is_verified)
        )
        db.add(result)
        db.flush()
        return ExamResultResponse.model_validate(result)


@router.put("", response_model=ExamResultResponse)
async def update_exam_result(
    payload: ExamResultCreate,
    id: Optional[str] = Query(None),
    user: dict = Depends(get_current_user)
):
    """
    Update only the fields sent. Owner only.

    A new score or maxScore recomputes the grade unless a grade is sent too.
    """
    result_id = parse_id(id)
    _reject_user_id(payload)

    with get_db_session() as db:
        result = _owned_result(db, result_id, user["id"])

        rescored = provided(payload, "score") or provided(payload, "max_score")
        if rescored:
            score = payload.score if provided(payload, "score") else result.score
            max_score = payload.max_score if provided(payload, "max_score") else result.max_score
            _check_scores(score, max_score)
            result.score = score
            result.max_score = max_score
            result.grade = payload.grade or calculate_grade(score, max_score)
        elif provided(payload, "grade"):
            result.grade = payload.grade

        if provided(payload, "university_id"):
            _require_university(db, payload.university_id)
            result.university_id = payload.university_id
        if provided(payload, "exam_name") and payload.exam_name:
            result.exam_name = payload.exam_name.strip()
        if provided(payload, "subject") and payload.subject:
            result.subject = payload.subject.strip()
        if provided(payload, "exam_date"):
            result.exam_date = _exam_date(payload.exam_date)
        if provided(payload, "credential_id"):
            result.credential_id = payload.credential_id
        if provided(payload, "is_verified"):
            result.is_verified = bool(payload.is_verified)

        db.flush()
        return ExamResultResponse.model_validate(result)


@router.delete("")
async def delete_exam_result(id: Optional[str] = Query(None), user: dict = Depends(get_current_user)):
    result_id = parse_id(id)
    with get_db_session() as db:
        result = _owned_result(db, result_id, user["id"])
        deleted = ExamResultResponse.model_validate(result)
        db.delete(result)

    return {"message": "Exam result deleted successfully", "deletedRecord": deleted}
