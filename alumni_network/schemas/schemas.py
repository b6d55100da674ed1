"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
JSON is camelCase on the wire; attributes stay snake_case in Python.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    alumni = "alumni"
    student = "student"
    university_admin = "university_admin"


class VerificationStatus(str, Enum):
    pending = "pending"
    verified = "verified"
    rejected = "rejected"


class CredentialType(str, Enum):
    degree = "degree"
    certificate = "certificate"
    exam = "exam"


class ConnectionType(str, Enum):
    mentorship = "mentorship"
    networking = "networking"
    collaboration = "collaboration"


class ConnectionStatus(str, Enum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"


class JobType(str, Enum):
    full_time = "full-time"
    part_time = "part-time"
    contract = "contract"
    internship = "internship"


class ExperienceLevel(str, Enum):
    entry = "entry"
    mid = "mid"
    senior = "senior"
    executive = "executive"


class JobStatus(str, Enum):
    active = "active"
    closed = "closed"
    draft = "draft"


class ApplicationStatus(str, Enum):
    pending = "pending"
    reviewed = "reviewed"
    shortlisted = "shortlisted"
    rejected = "rejected"
    hired = "hired"


class ScholarshipCategory(str, Enum):
    merit = "merit"
    need_based = "need-based"
    research = "research"
    sports = "sports"
    arts = "arts"


class ScholarshipStatus(str, Enum):
    active = "active"
    closed = "closed"
    draft = "draft"


class ScholarshipApplicationStatus(str, Enum):
    pending = "pending"
    under_review = "under_review"
    approved = "approved"
    rejected = "rejected"


class FeedbackType(str, Enum):
    course_content = "course_content"
    industry_relevance = "industry_relevance"
    skill_gap = "skill_gap"
    new_course_suggestion = "new_course_suggestion"


class FeedbackPriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    urgent = "urgent"


class FeedbackStatus(str, Enum):
    submitted = "submitted"
    under_review = "under_review"
    approved = "approved"
    implemented = "implemented"
    rejected = "rejected"


class NewsletterStatus(str, Enum):
    draft = "draft"
    published = "published"
    scheduled = "scheduled"


class EventStatus(str, Enum):
    upcoming = "upcoming"
    ongoing = "ongoing"
    completed = "completed"
    cancelled = "cancelled"


class AttendanceStatus(str, Enum):
    registered = "registered"
    attended = "attended"
    no_show = "no_show"
    cancelled = "cancelled"


class MessageType(str, Enum):
    text = "text"
    file = "file"
    image = "image"


class NotificationType(str, Enum):
    connection = "connection"
    message = "message"
    job = "job"
    event = "event"
    credential = "credential"
    mention = "mention"
    application = "application"


class MediaType(str, Enum):
    image = "image"
    video = "video"


class RecommendationType(str, Enum):
    jobs = "jobs"
    mentors = "mentors"
    connections = "connections"


# ============================================================
# BASE MODELS
# ============================================================

class CamelModel(BaseModel):
    """Response base - built from ORM rows, rendered as camelCase."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class RequestBody(BaseModel):
    """
    Request base. Fields are optional so each route reports a missing
    field with its own error code. Unknown keys land in model_extra.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class MessageResponse(BaseModel):
    message: str


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=8)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserSummary(CamelModel):
    id: str
    name: str
    image: Optional[str] = None


class UserContact(UserSummary):
    email: str


class UserResponse(CamelModel):
    id: str
    name: str
    email: str
    email_verified: bool
    image: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class TokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: UserContact


# ============================================================
# UNIVERSITY SCHEMAS
# ============================================================

class UniversityCreate(RequestBody):
    """Used for POST and PUT - PUT applies only the fields sent."""
    name: Optional[str] = None
    domain: Optional[str] = None
    country: Optional[str] = None
    tenant_id: Optional[str] = None
    logo: Optional[str] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None
    admin_ids: Any = None
    settings: Any = None


class UniversityBrief(CamelModel):
    id: int
    name: str
    logo: Optional[str] = None


class UniversityResponse(CamelModel):
    id: int
    name: str
    domain: str
    logo: Optional[str] = None
    country: str
    description: Optional[str] = None
    is_active: bool
    admin_ids: List[Any] = []
    tenant_id: str
    settings: dict = {}
    created_at: datetime
    updated_at: datetime


# ============================================================
# PROFILE SCHEMAS
# ============================================================

class ProfileCreate(RequestBody):
    user_id: Optional[str] = None
    role: Optional[str] = None
    university_id: Optional[int] = None
    graduation_year: Optional[int] = None
    major: Optional[str] = None
    degree: Optional[str] = None
    current_position: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    skills: Any = None
    interests: Any = None
    phone_number: Optional[str] = None
    linkedin_url: Optional[str] = None
    is_verified: Optional[bool] = None
    verification_status: Optional[str] = None


class ProfileResponse(CamelModel):
    id: int
    user_id: str
    role: str
    university_id: Optional[int] = None
    graduation_year: Optional[int] = None
    major: Optional[str] = None
    degree: Optional[str] = None
    current_position: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    skills: List[str] = []
    interests: List[str] = []
    phone_number: Optional[str] = None
    linkedin_url: Optional[str] = None
    is_verified: bool
    verification_status: str
    created_at: datetime
    updated_at: datetime


class AdminUserUpdate(RequestBody):
    name: Any = None
    email: Any = None
    email_verified: Any = None


class AdminUserResponse(UserResponse):
    profile: Optional[ProfileResponse] = None


# ============================================================
# CREDENTIAL SCHEMAS
# ============================================================

class CredentialCreate(RequestBody):
    university_id: Optional[int] = None
    credential_type: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    issue_date: Any = None
    expiry_date: Any = None
    blockchain_tx_hash: Optional[str] = None
    is_verified_on_chain: Optional[bool] = None
    ipfs_hash: Optional[str] = None
    credential_metadata: Any = Field(None, alias="metadata")


class CredentialResponse(CamelModel):
    id: int
    user_id: str
    university_id: int
    credential_type: str
    title: str
    description: Optional[str] = None
    issuer_name: Optional[str] = None
    issue_date: datetime
    expiry_date: Optional[datetime] = None
    blockchain_tx_hash: Optional[str] = None
    is_verified_on_chain: bool
    ipfs_hash: Optional[str] = None
    credential_metadata: Optional[Any] = Field(None, serialization_alias="metadata")
    created_at: datetime
    updated_at: datetime


class CredentialVerifyRequest(RequestBody):
    credential_id: Any = None
    blockchain_tx_hash: Any = None


class CredentialVerifyResponse(CamelModel):
    success: bool
    message: str
    credential: CredentialResponse


class ExamResultCreate(RequestBody):
    university_id: Optional[int] = None
    exam_name: Optional[str] = None
    subject: Optional[str] = None
    score: Any = None
    max_score: Any = None
    grade: Optional[str] = None
    exam_date: Any = None
    credential_id: Optional[int] = None
    is_verified: Optional[bool] = None


class ExamResultResponse(CamelModel):
    id: int
    user_id: str
    university_id: int
    exam_name: str
    subject: str
    score: float
    max_score: float
    grade: Optional[str] = None
    exam_date: datetime
    credential_id: Optional[int] = None
    is_verified: bool
    created_at: datetime
    updated_at: datetime


# ============================================================
# CONNECTION SCHEMAS
# ============================================================

class ConnectionCreate(RequestBody):
    requester_id: Optional[str] = None
    recipient_id: Optional[str] = None
    connection_type: Optional[str] = None
    message: Optional[str] = None


class ConnectionUpdate(RequestBody):
    status: Optional[str] = None
    message: Optional[str] = None


class ConnectionResponse(CamelModel):
    id: int
    requester_id: str
    recipient_id: str
    status: str
    message: Optional[str] = None
    connection_type: str
    requested_at: datetime
    responded_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class ConnectionRequestResponse(CamelModel):
    success: bool
    message: str
    connection: ConnectionResponse


# ============================================================
# JOB SCHEMAS
# ============================================================

class JobCreate(RequestBody):
    """Used for POST and PUT."""
    title: Optional[str] = None
    description: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    job_type: Optional[str] = None
    experience_level: Optional[str] = None
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None
    currency: Optional[str] = None
    skills: Any = None
    requirements: Optional[str] = None
    benefits: Optional[str] = None
    application_deadline: Any = None
    is_remote: Optional[bool] = None
    university_id: Optional[int] = None
    status: Optional[str] = None
    tags: Any = None


class PosterProfile(CamelModel):
    company: Optional[str] = None
    current_position: Optional[str] = None


class JobResponse(CamelModel):
    id: int
    title: str
    description: str
    company: str
    location: str
    job_type: str
    experience_level: str
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None
    currency: str
    skills: List[str] = []
    requirements: str
    benefits: Optional[str] = None
    application_deadline: Optional[datetime] = None
    is_remote: bool
    posted_by_id: str
    university_id: Optional[int] = None
    status: str
    application_count: int
    view_count: int
    tags: List[str] = []
    created_at: datetime
    updated_at: datetime


class JobDetailResponse(JobResponse):
    poster: Optional[UserSummary] = None
    poster_profile: Optional[PosterProfile] = None


class JobApplicationCreate(RequestBody):
    job_id: Any = None
    cover_letter: Optional[str] = None
    resume_url: Optional[str] = None


class JobApplicationUpdate(RequestBody):
    cover_letter: Optional[str] = None
    resume_url: Optional[str] = None
    status: Optional[str] = None
    review_notes: Optional[str] = None


class JobBrief(CamelModel):
    id: int
    title: str
    company: str
    posted_by_id: str


class ApplicantProfile(CamelModel):
    current_position: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    skills: List[str] = []


class JobApplicationResponse(CamelModel):
    id: int
    job_id: int
    applicant_id: str
    cover_letter: Optional[str] = None
    resume_url: Optional[str] = None
    status: str
    applied_at: datetime
    reviewed_at: Optional[datetime] = None
    review_notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class JobApplicationDetail(JobApplicationResponse):
    job: Optional[JobBrief] = None
    applicant: Optional[UserContact] = None
    applicant_profile: Optional[ApplicantProfile] = None


# ============================================================
# SCHOLARSHIP SCHEMAS
# ============================================================

class ScholarshipCreate(RequestBody):
    title: Optional[str] = None
    description: Optional[str] = None
    amount: Any = None
    currency: Optional[str] = None
    eligibility_criteria: Optional[str] = None
    application_deadline: Any = None
    max_recipients: Any = None
    category: Optional[str] = None
    academic_year: Optional[str] = None
    requirements: Any = None
    status: Optional[str] = None
    is_recurring: Optional[bool] = None
    recurring_frequency: Optional[str] = None
    tags: Any = None
    university_id: Optional[int] = None


class FunderProfile(CamelModel):
    company: Optional[str] = None
    current_position: Optional[str] = None
    graduation_year: Optional[int] = None


class ScholarshipResponse(CamelModel):
    id: int
    title: str
    description: str
    amount: float
    currency: str
    funded_by_id: str
    university_id: Optional[int] = None
    eligibility_criteria: str
    application_deadline: datetime
    max_recipients: int
    current_recipients: int
    category: str
    academic_year: Optional[str] = None
    requirements: List[Any] = []
    status: str
    is_recurring: bool
    recurring_frequency: Optional[str] = None
    tags: List[str] = []
    created_at: datetime
    updated_at: datetime


class ScholarshipDetail(ScholarshipResponse):
    funder: Optional[UserSummary] = None
    funder_profile: Optional[FunderProfile] = None
    university: Optional[UniversityBrief] = None


class ScholarshipApplicationCreate(RequestBody):
    scholarship_id: Any = None
    application_essay: Optional[str] = None
    academic_records: Optional[str] = None
    recommendation_letters: Any = None
    financial_need_statement: Optional[str] = None


class ScholarshipApplicationUpdate(ScholarshipApplicationCreate):
    status: Optional[str] = None
    review_score: Optional[int] = None
    review_notes: Optional[str] = None


class ScholarshipApplicationResponse(CamelModel):
    id: int
    scholarship_id: int
    applicant_id: str
    application_essay: str
    academic_records: Optional[str] = None
    recommendation_letters: List[Any] = []
    financial_need_statement: Optional[str] = None
    status: str
    review_score: Optional[int] = None
    review_notes: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    reviewed_by_id: Optional[str] = None
    applied_at: datetime
    created_at: datetime
    updated_at: datetime


# ============================================================
# CURRICULUM FEEDBACK SCHEMAS
# ============================================================

class FeedbackCreate(RequestBody):
    university_id: Optional[int] = None
    department: Optional[str] = None
    course_code: Optional[str] = None
    course_name: Optional[str] = None
    feedback_type: Optional[str] = None
    current_industry_trends: Optional[str] = None
    suggested_changes: Optional[str] = None
    skills_in_demand: Any = None
    tools_and_technologies: Any = None
    industry_projects: Any = None
    priority: Optional[str] = None
    implementation_complexity: Optional[str] = None
    potential_impact: Optional[str] = None
    supporting_evidence: Optional[str] = None


class FeedbackUpdate(FeedbackCreate):
    status: Optional[str] = None
    review_notes: Optional[str] = None
    implementation_timeline: Optional[str] = None


class FeedbackResponse(CamelModel):
    id: int
    submitted_by_id: str
    university_id: int
    department: str
    course_code: Optional[str] = None
    course_name: Optional[str] = None
    feedback_type: str
    current_industry_trends: str
    suggested_changes: str
    skills_in_demand: List[Any] = []
    tools_and_technologies: List[Any] = []
    industry_projects: List[Any] = []
    priority: str
    implementation_complexity: Optional[str] = None
    potential_impact: Optional[str] = None
    supporting_evidence: Optional[str] = None
    status: str
    review_notes: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    reviewed_by_id: Optional[str] = None
    implementation_timeline: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class FeedbackDetail(FeedbackResponse):
    submitter: Optional[UserSummary] = None
    submitter_profile: Optional[FunderProfile] = None
    university: Optional[UniversityBrief] = None


# ============================================================
# NEWSLETTER SCHEMAS
# ============================================================

class NewsletterCreate(RequestBody):
    university_id: Any = None
    title: Any = None
    content: Any = None
    html_content: Optional[str] = None
    status: Optional[str] = None
    publish_date: Any = None
    recipient_count: Any = None
    open_rate: Any = None
    ai_prompt: Optional[str] = None
    created_by: Any = None


class NewsletterGenerate(RequestBody):
    university_id: Any = None
    created_by: Any = None
    ai_prompt: Any = None
    title: Optional[str] = None


class NewsletterResponse(CamelModel):
    id: int
    university_id: int
    title: str
    content: str
    html_content: Optional[str] = None
    status: str
    publish_date: Optional[datetime] = None
    recipient_count: int
    open_rate: float
    ai_prompt: Optional[str] = None
    created_by: str
    created_at: datetime
    updated_at: datetime


class NewsletterGenerateResponse(CamelModel):
    success: bool
    message: str
    newsletter: NewsletterResponse


# ============================================================
# EVENT SCHEMAS
# ============================================================

class EventCreate(RequestBody):
    """Used for POST and PUT. The organizer always comes from the session."""
    title: Any = None
    description: Any = None
    event_date: Any = None
    event_time: Any = None
    location: Any = None
    university_id: Optional[int] = None
    max_attendees: Any = None
    image_url: Optional[str] = None
    tags: Any = None
    registration_deadline: Any = None
    is_public: Optional[bool] = None
    status: Optional[str] = None


class EventResponse(CamelModel):
    id: int
    title: str
    description: str
    event_date: date
    event_time: str
    location: str
    university_id: Optional[int] = None
    organizer_id: str
    max_attendees: Optional[int] = None
    current_attendees: int
    image_url: Optional[str] = None
    status: str
    tags: List[str] = []
    registration_deadline: Optional[date] = None
    is_public: bool
    created_at: datetime
    updated_at: datetime


class EventDetail(EventResponse):
    registration_count: int = 0


class EventRegistrationResponse(CamelModel):
    id: int
    event_id: int
    user_id: str
    registered_at: datetime
    attendance_status: str


class RegistrationWithUser(EventRegistrationResponse):
    user: Optional[UserContact] = None


# ============================================================
# MESSAGING SCHEMAS
# ============================================================

class MessageCreate(RequestBody):
    sender_id: Optional[str] = None
    receiver_id: Optional[str] = None
    conversation_id: Any = None
    encrypted_content: Optional[str] = None
    encrypted_key: Optional[str] = None
    message_type: Optional[str] = None


class ChatMessageResponse(CamelModel):
    id: int
    sender_id: str
    receiver_id: str
    conversation_id: int
    encrypted_content: str
    encrypted_key: str
    message_type: str
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime


class ConversationCreate(RequestBody):
    participants: Any = None
    group_name: Optional[str] = None
    encryption_public_keys: Any = None


class ConversationUpdate(RequestBody):
    last_message: Optional[str] = None
    last_message_at: Any = None
    group_name: Optional[str] = None
    encryption_public_keys: Any = None


class ConversationResponse(CamelModel):
    id: int
    participants: List[str] = []
    last_message: Optional[str] = None
    last_message_at: Optional[datetime] = None
    is_group_chat: bool
    group_name: Optional[str] = None
    encryption_public_keys: Optional[Any] = None
    created_at: datetime
    updated_at: datetime


# ============================================================
# NOTIFICATION SCHEMAS
# ============================================================

class NotificationCreate(RequestBody):
    user_id: Optional[str] = None
    type: Optional[str] = None
    title: Optional[str] = None
    message: Optional[str] = None
    action_url: Optional[str] = None
    notification_metadata: Any = Field(None, alias="metadata")


class NotificationResponse(CamelModel):
    id: int
    user_id: str
    type: str
    title: str
    message: str
    action_url: Optional[str] = None
    is_read: bool
    notification_metadata: Optional[Any] = Field(None, serialization_alias="metadata")
    read_at: Optional[datetime] = None
    created_at: datetime


class NotificationListResponse(CamelModel):
    notifications: List[NotificationResponse]
    unread_count: int


# ============================================================
# POST SCHEMAS
# ============================================================

class PostCreate(RequestBody):
    content: Optional[str] = None
    media_data_url: Optional[str] = None
    media_type: Optional[str] = None


class CommentCreate(RequestBody):
    text: Optional[str] = None


class PostResponse(CamelModel):
    id: int
    user_id: str
    content: Optional[str] = None
    media_url: Optional[str] = None
    media_type: Optional[str] = None
    likes_count: int
    comments_count: int
    created_at: datetime
    updated_at: datetime
    author: Optional[UserSummary] = None


class CommentResponse(CamelModel):
    id: int
    post_id: int
    user_id: str
    text: str
    created_at: datetime
    author: Optional[UserSummary] = None


class LikeResponse(CamelModel):
    liked: bool
    likes_count: int


# ============================================================
# RECOMMENDATION SCHEMAS
# ============================================================

class MatchItem(CamelModel):
    user_id: str
    score: int
    reasons: List[str] = []
    match_type: str


class RecommendationResponse(CamelModel):
    type: str
    user_id: str
    recommendations: List[MatchItem]
    count: int
    generated_at: datetime


# ============================================================
# GAMIFICATION SCHEMAS
# ============================================================

class Achievement(CamelModel):
    id: str
    title: str
    description: str
    icon: str
    category: str
    points: int
    rarity: str
    unlocked: bool = False
    unlocked_at: Optional[datetime] = None
    progress: Optional[int] = None
    max_progress: Optional[int] = None


class Badge(CamelModel):
    id: str
    name: str
    description: str
    icon: str
    color: str
    earned_at: Optional[datetime] = None


class Streak(CamelModel):
    current: int = 0
    longest: int = 0
    type: str = "login"


class UserStats(CamelModel):
    total_points: int
    level: int
    next_level_points: int
    current_level_points: int
    achievements: List[Achievement] = []
    badges: List[Badge] = []
    streak: Streak
    leaderboard_rank: Optional[int] = None


class LeaderboardEntry(CamelModel):
    user_id: str
    name: str
    points: int
    level: int
    rank: int
