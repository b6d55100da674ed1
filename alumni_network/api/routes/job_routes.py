"""
Job Routes

GET /jobs - List active jobs with filters, or one by ?id= (counts a view)
POST /jobs - Create job posting
PUT /jobs?id= - Update job (poster only)
DELETE /jobs?id= - Delete job (poster only)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from alumni_network.core.auth import get_current_user
from alumni_network.core.errors import bad_request, forbidden, not_found
from alumni_network.db.models import JobPosting, User, UserProfile
from alumni_network.db.postgres import get_db_session
from alumni_network.schemas.schemas import (
    ExperienceLevel, JobCreate, JobDetailResponse, JobResponse, JobStatus, JobType,
    PosterProfile, UserSummary
)
from alumni_network.utils.validation import (
    as_string_list, clamp_limit, contains, is_blank, ordered, parse_id, parse_iso_datetime,
    provided, query_flag, require_choice, sort_column
)

router = APIRouter(prefix="/jobs", tags=["Jobs"])

REQUIRED_FIELDS = ("title", "description", "company", "location", "job_type", "experience_level", "requirements")

SORTABLE = {"title": "title", "company": "company", "location": "location", "createdAt": "created_at"}

PLAIN_FIELDS = (
    "title", "description", "company", "location", "salary_min", "salary_max", "currency",
    "requirements", "benefits", "is_remote", "university_id"
)


def _list_field(value, label: str, code: str) -> list:
    if value is None:
        return []
    parsed = as_string_list(value)
    if parsed is None:
        raise bad_request(f"{label} must be an array of strings", code)
    return parsed


def _validated_changes(payload: JobCreate) -> dict:
    """Validated column values for every job field present in the body."""
    changes = {}
    if provided(payload, "job_type"):
        changes["job_type"] = require_choice(payload.job_type, JobType, "INVALID_JOB_TYPE", "jobType")
    if provided(payload, "experience_level"):
        changes["experience_level"] = require_choice(
            payload.experience_level, ExperienceLevel, "INVALID_EXPERIENCE_LEVEL", "experienceLevel"
        )
    if provided(payload, "status"):
        changes["status"] = require_choice(payload.status, JobStatus, "INVALID_STATUS", "status")

    if provided(payload, "application_deadline"):
        deadline = None
        if payload.application_deadline:
            deadline = parse_iso_datetime(payload.application_deadline)
            if deadline is None:
                raise bad_request(
                    "applicationDeadline must be a valid ISO date string", "INVALID_APPLICATION_DEADLINE"
                )
        changes["application_deadline"] = deadline

    if provided(payload, "skills"):
        changes["skills"] = _list_field(payload.skills, "skills", "INVALID_SKILLS")
    if provided(payload, "tags"):
        changes["tags"] = _list_field(payload.tags, "tags", "INVALID_TAGS")

    for field in PLAIN_FIELDS:
        if provided(payload, field):
            value = getattr(payload, field)
            changes[field] = value.strip() if isinstance(value, str) else value
    return changes


def job_detail(job: JobPosting, poster: Optional[User], profile: Optional[UserProfile]) -> JobDetailResponse:
    detail = JobDetailResponse.model_validate(job)
    detail.poster = UserSummary.model_validate(poster) if poster else None
    detail.poster_profile = PosterProfile.model_validate(profile) if profile else None
    return detail


def _owned_job(db, job_id: int, user_id: str, action: str) -> JobPosting:
    job = db.query(JobPosting).filter(JobPosting.id == job_id).first()
    if not job:
        raise not_found("Job not found", "JOB_NOT_FOUND")
    if job.posted_by_id != user_id:
        raise forbidden(f"Unauthorized to {action} this job", "UNAUTHORIZED")
    return job


@router.get("")
async def get_jobs(
    id: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    job_type: Optional[str] = Query(None, alias="jobType"),
    experience_level: Optional[str] = Query(None, alias="experienceLevel"),
    location: Optional[str] = Query(None),
    is_remote: Optional[str] = Query(None, alias="isRemote"),
    posted_by_id: Optional[str] = Query(None, alias="postedById"),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query("desc", alias="sortOrder"),
    limit: int = Query(20),
    offset: int = Query(0, ge=0)
):
    """
    Get one job by id (counts a view), or list active jobs.

    Each job carries the poster and the poster's company/position.
    """
    with get_db_session() as db:
        query = (
            db.query(JobPosting, User, UserProfile)
            .outerjoin(User, User.id == JobPosting.posted_by_id)
            .outerjoin(UserProfile, UserProfile.user_id == JobPosting.posted_by_id)
        )

        if id is not None:
            job_id = parse_id(id, message="Valid job ID is required")
            row = query.filter(JobPosting.id == job_id).first()
            if not row:
                raise not_found("Job not found", "JOB_NOT_FOUND")
            job, poster, profile = row
            job.view_count = (job.view_count or 0) + 1
            db.flush()
            return job_detail(job, poster, profile)

        query = query.filter(JobPosting.status == "active")
        if search:
            query = query.filter(
                contains(JobPosting.title, search)
                | contains(JobPosting.description, search)
                | contains(JobPosting.company, search)
            )
        if job_type:
            query = query.filter(JobPosting.job_type == job_type)
        if experience_level:
            query = query.filter(JobPosting.experience_level == experience_level)
        if location:
            query = query.filter(contains(JobPosting.location, location))
        if query_flag(is_remote):
            query = query.filter(JobPosting.is_remote.is_(True))
        if posted_by_id:
            query = query.filter(JobPosting.posted_by_id == posted_by_id)

        query = ordered(query, sort_column(JobPosting, sort_by, SORTABLE), sort_order)
        rows = query.offset(offset).limit(clamp_limit(limit, 100)).all()
        return [job_detail(job, poster, profile) for job, poster, profile in rows]


@router.post("", response_model=JobResponse, status_code=201)
async def create_job(payload: JobCreate, user: dict = Depends(get_current_user)):
    """Create a job posting. The poster is the current user."""
    if any(is_blank(getattr(payload, field)) for field in REQUIRED_FIELDS):
        raise bad_request(
            "Missing required fields: title, description, company, location, jobType, experienceLevel, requirements",
            "MISSING_REQUIRED_FIELDS"
        )

    changes = _validated_changes(payload)
    with get_db_session() as db:
        job = JobPosting(posted_by_id=user["id"], **changes)
        db.add(job)
        db.flush()
        return JobResponse.model_validate(job)


@router.put("", response_model=JobResponse)
async def update_job(payload: JobCreate, id: Optional[str] = Query(None), user: dict = Depends(get_current_user)):
    """Update only the fields sent. Poster only."""
    job_id = parse_id(id, message="Valid job ID is required")
    with get_db_session() as db:
        job = _owned_job(db, job_id, user["id"], "update")
        for field, value in _validated_changes(payload).items():
            setattr(job, field, value)
        db.flush()
        return JobResponse.model_validate(job)


@router.delete("")
async def delete_job(id: Optional[str] = Query(None), user: dict = Depends(get_current_user)):
    """Delete a job posting. Poster only."""
    job_id = parse_id(id, message="Valid job ID is required")
    with get_db_session() as db:
        job = _owned_job(db, job_id, user["id"], "delete")
        deleted = JobResponse.model_validate(job)
        db.delete(job)

    return {"message": "Job deleted successfully", "job": deleted}
