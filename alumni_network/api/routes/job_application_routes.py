"""
Job Application Routes (mounted at /job-applications and /jobs/applications)

GET - List applications with job, applicant and applicant profile
POST - Apply to a job
PUT ?id= - Applicant edits cover letter/resume; poster sets status/review notes
DELETE ?id= - Withdraw (applicant only)
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from alumni_network.core.auth import get_current_user
from alumni_network.core.errors import bad_request, forbidden, not_found
from alumni_network.db.models import JobApplication, JobPosting, User, UserProfile
from alumni_network.db.postgres import get_db_session
from alumni_network.schemas.schemas import (
    ApplicantProfile, ApplicationStatus, JobApplicationCreate, JobApplicationDetail,
    JobApplicationResponse, JobApplicationUpdate, JobBrief, UserContact
)
from alumni_network.services.notification_service import NotificationService, notify
from alumni_network.utils.validation import (
    choice_values, clamp_limit, is_blank, parse_id, provided, require_choice
)

router = APIRouter(tags=["Job Applications"])


def _application_or_404(db, application_id: int):
    row = (
        db.query(JobApplication, JobPosting)
        .outerjoin(JobPosting, JobPosting.id == JobApplication.job_id)
        .filter(JobApplication.id == application_id)
        .first()
    )
    if not row:
        raise not_found("Application not found", "APPLICATION_NOT_FOUND")
    return row


@router.get("")
async def get_job_applications(
    job_id: Optional[str] = Query(None, alias="jobId"),
    applicant_id: Optional[str] = Query(None, alias="applicantId"),
    status: Optional[str] = Query(None),
    limit: int = Query(20),
    offset: int = Query(0, ge=0)
):
    """List applications, newest first."""
    with get_db_session() as db:
        query = (
            db.query(JobApplication, JobPosting, User, UserProfile)
            .outerjoin(JobPosting, JobPosting.id == JobApplication.job_id)
            .outerjoin(User, User.id == JobApplication.applicant_id)
            .outerjoin(UserProfile, UserProfile.user_id == JobApplication.applicant_id)
        )
        if job_id and job_id.strip().isdigit():
            query = query.filter(JobApplication.job_id == int(job_id))
        if applicant_id:
            query = query.filter(JobApplication.applicant_id == applicant_id)
        if status in choice_values(ApplicationStatus):
            query = query.filter(JobApplication.status == status)

        rows = (
            query.order_by(JobApplication.applied_at.desc())
            .offset(offset)
            .limit(clamp_limit(limit, 100))
            .all()
        )

        applications = []
        for application, job, applicant, profile in rows:
            detail = JobApplicationDetail.model_validate(application)
            detail.job = JobBrief.model_validate(job) if job else None
            detail.applicant = UserContact.model_validate(applicant) if applicant else None
            detail.applicant_profile = ApplicantProfile.model_validate(profile) if profile else None
            applications.append(detail)
        return applications


@router.post("", response_model=JobApplicationResponse, status_code=201)
async def apply_to_job(payload: JobApplicationCreate, user: dict = Depends(get_current_user)):
    """Apply to an active job before its deadline. Notifies the poster."""
    if is_blank(payload.job_id):
        raise bad_request("jobId is required", "MISSING_JOB_ID")
    job_id = parse_id(payload.job_id, message="jobId must be a valid integer")

    with get_db_session() as db:
        job = db.query(JobPosting).filter(JobPosting.id == job_id).first()
        if not job:
            raise not_found("Job not found", "JOB_NOT_FOUND")
        if job.status != "active":
            raise bad_request("Job is no longer accepting applications", "JOB_CLOSED")
        if job.application_deadline and job.application_deadline < datetime.utcnow():
            raise bad_request("Application deadline has passed", "DEADLINE_PASSED")

        already = (
            db.query(JobApplication.id)
            .filter(JobApplication.job_id == job_id, JobApplication.applicant_id == user["id"])
            .first()
        )
        if already:
            raise bad_request("You have already applied to this job", "ALREADY_APPLIED")

        application = JobApplication(
            job_id=job_id,
            applicant_id=user["id"],
            cover_letter=payload.cover_letter or None,
            resume_url=payload.resume_url or None
        )
        db.add(application)
        job.application_count = (job.application_count or 0) + 1
        db.flush()

        created = JobApplicationResponse.model_validate(application)
        poster_id, job_title = job.posted_by_id, job.title

    notify(
        NotificationService.job_application,
        poster_id=poster_id, applicant_name=user["name"], applicant_id=user["id"],
        job_id=job_id, job_title=job_title
    )
    return created


@router.put("", response_model=JobApplicationResponse)
async def update_job_application(
    payload: JobApplicationUpdate,
    id: Optional[str] = Query(None),
    user: dict = Depends(get_current_user)
):
    """
    The applicant may change coverLetter and resumeUrl; the job poster may
    change status (notifying the applicant) and reviewNotes.
    """
    application_id = parse_id(id, message="Valid application ID is required")
    status_changed = None

    with get_db_session() as db:
        application, job = _application_or_404(db, application_id)
        is_applicant = application.applicant_id == user["id"]
        is_poster = job is not None and job.posted_by_id == user["id"]
        if not (is_applicant or is_poster):
            raise forbidden("Unauthorized to update this application", "UNAUTHORIZED")

        if is_applicant:
            if provided(payload, "cover_letter"):
                application.cover_letter = payload.cover_letter
            if provided(payload, "resume_url"):
                application.resume_url = payload.resume_url

        if is_poster:
            if provided(payload, "status"):
                application.status = require_choice(payload.status, ApplicationStatus, "INVALID_STATUS", "status")
                application.reviewed_at = datetime.utcnow()
                status_changed = application.status
            if provided(payload, "review_notes"):
                application.review_notes = payload.review_notes

        db.flush()
        updated = JobApplicationResponse.model_validate(application)
        job_title = job.title if job else ""

    if status_changed:
        notify(
            NotificationService.application_status,
            applicant_id=updated.applicant_id, job_title=job_title, status=status_changed, job_id=updated.job_id
        )
    return updated


@router.delete("")
async def delete_job_application(id: Optional[str] = Query(None), user: dict = Depends(get_current_user)):
    """Withdraw an application. Applicant only."""
    application_id = parse_id(id, message="Valid application ID is required")
    with get_db_session() as db:
        application, job = _application_or_404(db, application_id)
        if application.applicant_id != user["id"]:
            raise forbidden("Unauthorized to delete this application", "UNAUTHORIZED")

        deleted = JobApplicationResponse.model_validate(application)
        db.delete(application)
        if job is not None:
            job.application_count = max(0, (job.application_count or 0) - 1)

    return {"message": "Application deleted successfully", "application": deleted}
