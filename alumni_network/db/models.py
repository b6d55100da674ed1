"""
Relational schema (SQLAlchemy ORM).

Every tenant-scoped row points at a university; user-owned rows cascade
when the owning user is deleted. Array and object fields are JSON columns.
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _uuid() -> str:
    return str(uuid.uuid4())


# ============================================================
# AUTH
# ============================================================

class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(200), nullable=False)
    email = Column(String(320), unique=True, index=True, nullable=False)
    email_verified = Column(Boolean, nullable=False, default=False)
    image = Column(String(500))
    password_hash = Column(String(200))
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


class Session(Base):
    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    token = Column(String(64), unique=True, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    ip_address = Column(String(64))
    user_agent = Column(String(500))
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


# ============================================================
# TENANTS & PROFILES
# ============================================================

class University(Base):
    __tablename__ = "universities"

    id = Column(Integer, primary_key=True)
    name = Column(String(300), nullable=False)
    domain = Column(String(255), unique=True, nullable=False)
    logo = Column(String(500))
    country = Column(String(100), nullable=False)
    description = Column(Text)
    is_active = Column(Boolean, nullable=False, default=True)
    admin_ids = Column(JSON, nullable=False, default=list)
    tenant_id = Column(String(100), unique=True, nullable=False)
    settings = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


class UserProfile(Base):
    __tablename__ = "user_profiles"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    role = Column(String(30), nullable=False)
    university_id = Column(Integer, ForeignKey("universities.id", ondelete="SET NULL"))
    graduation_year = Column(Integer)
    major = Column(String(200))
    degree = Column(String(200))
    current_position = Column(String(200))
    company = Column(String(200))
    location = Column(String(200))
    bio = Column(Text)
    skills = Column(JSON, nullable=False, default=list)
    interests = Column(JSON, nullable=False, default=list)
    phone_number = Column(String(50))
    linkedin_url = Column(String(500))
    is_verified = Column(Boolean, nullable=False, default=False)
    verification_status = Column(String(20), nullable=False, default="pending")
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


# ============================================================
# CREDENTIALS & ACADEMICS
# ============================================================

class Credential(Base):
    __tablename__ = "credentials"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    university_id = Column(Integer, ForeignKey("universities.id", ondelete="CASCADE"), nullable=False)
    credential_type = Column(String(20), nullable=False)
    title = Column(String(300), nullable=False)
    description = Column(Text)
    issuer_name = Column(String(300))
    issue_date = Column(DateTime, nullable=False)
    expiry_date = Column(DateTime)
    blockchain_tx_hash = Column(String(100))
    is_verified_on_chain = Column(Boolean, nullable=False, default=False)
    ipfs_hash = Column(String(200))
    # "metadata" is reserved on declarative classes
    credential_metadata = Column("metadata", JSON)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


class ExamResult(Base):
    __tablename__ = "exam_results"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    university_id = Column(Integer, ForeignKey("universities.id", ondelete="CASCADE"), nullable=False)
    exam_name = Column(String(300), nullable=False)
    subject = Column(String(200), nullable=False)
    score = Column(Float, nullable=False)
    max_score = Column(Float, nullable=False)
    grade = Column(String(5))
    exam_date = Column(DateTime, nullable=False)
    credential_id = Column(Integer, ForeignKey("credentials.id", ondelete="SET NULL"))
    is_verified = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


class CurriculumFeedback(Base):
    __tablename__ = "curriculum_feedback"

    id = Column(Integer, primary_key=True)
    submitted_by_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    university_id = Column(Integer, ForeignKey("universities.id", ondelete="CASCADE"), nullable=False)
    department = Column(String(200), nullable=False)
    course_code = Column(String(50))
    course_name = Column(String(300))
    feedback_type = Column(String(40), nullable=False)
    current_industry_trends = Column(Text, nullable=False)
    suggested_changes = Column(Text, nullable=False)
    skills_in_demand = Column(JSON, nullable=False, default=list)
    tools_and_technologies = Column(JSON, nullable=False, default=list)
    industry_projects = Column(JSON, nullable=False, default=list)
    priority = Column(String(10), nullable=False, default="medium")
    implementation_complexity = Column(String(20))
    potential_impact = Column(Text)
    supporting_evidence = Column(Text)
    status = Column(String(20), nullable=False, default="submitted")
    review_notes = Column(Text)
    reviewed_at = Column(DateTime)
    reviewed_by_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"))
    implementation_timeline = Column(String(200))
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


class Newsletter(Base):
    __tablename__ = "newsletters"

    id = Column(Integer, primary_key=True)
    university_id = Column(Integer, ForeignKey("universities.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(300), nullable=False)
    content = Column(Text, nullable=False)
    html_content = Column(Text)
    status = Column(String(20), nullable=False, default="draft")
    publish_date = Column(DateTime)
    recipient_count = Column(Integer, nullable=False, default=0)
    open_rate = Column(Float, nullable=False, default=0)
    ai_prompt = Column(Text)
    created_by = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


# ============================================================
# SOCIAL
# ============================================================

class Post(Base):
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text)
    media_url = Column(Text)
    media_type = Column(String(10))
    likes_count = Column(Integer, nullable=False, default=0)
    comments_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


class PostLike(Base):
    __tablename__ = "post_likes"

    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class PostComment(Base):
    __tablename__ = "post_comments"

    id = Column(Integer, primary_key=True)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    text = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class Connection(Base):
    __tablename__ = "alumni_connections"

    id = Column(Integer, primary_key=True)
    requester_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    recipient_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default="pending")
    message = Column(Text)
    connection_type = Column(String(20), nullable=False)
    requested_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    responded_at = Column(DateTime)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


class Conversation(Base):
    __tablename__ = "conversations"

    id = Column(Integer, primary_key=True)
    participants = Column(JSON, nullable=False, default=list)
    last_message = Column(Text)
    last_message_at = Column(DateTime)
    is_group_chat = Column(Boolean, nullable=False, default=False)
    group_name = Column(String(200))
    encryption_public_keys = Column(JSON)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True)
    sender_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    receiver_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    conversation_id = Column(Integer, ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False, index=True)
    encrypted_content = Column(Text, nullable=False)
    encrypted_key = Column(Text, nullable=False)
    message_type = Column(String(10), nullable=False, default="text")
    is_read = Column(Boolean, nullable=False, default=False)
    read_at = Column(DateTime)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(20), nullable=False)
    title = Column(String(300), nullable=False)
    message = Column(Text, nullable=False)
    action_url = Column(String(500))
    is_read = Column(Boolean, nullable=False, default=False)
    notification_metadata = Column("metadata", JSON)
    read_at = Column(DateTime)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


# ============================================================
# EVENTS
# ============================================================

class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True)
    title = Column(String(300), nullable=False)
    description = Column(Text, nullable=False)
    event_date = Column(Date, nullable=False)
    event_time = Column(String(20), nullable=False)
    location = Column(String(300), nullable=False)
    university_id = Column(Integer, ForeignKey("universities.id", ondelete="CASCADE"))
    organizer_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    max_attendees = Column(Integer)
    current_attendees = Column(Integer, nullable=False, default=0)
    image_url = Column(String(500))
    status = Column(String(20), nullable=False, default="upcoming")
    tags = Column(JSON, nullable=False, default=list)
    registration_deadline = Column(Date)
    is_public = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


class EventRegistration(Base):
    __tablename__ = "event_registrations"
    __table_args__ = (UniqueConstraint("event_id", "user_id", name="uq_event_registration"),)

    id = Column(Integer, primary_key=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    registered_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    attendance_status = Column(String(20), nullable=False, default="registered")


# ============================================================
# JOBS
# ============================================================

class JobPosting(Base):
    __tablename__ = "job_postings"

    id = Column(Integer, primary_key=True)
    title = Column(String(300), nullable=False)
    description = Column(Text, nullable=False)
    company = Column(String(200), nullable=False)
    location = Column(String(200), nullable=False)
    job_type = Column(String(20), nullable=False)
    experience_level = Column(String(20), nullable=False)
    salary_min = Column(Integer)
    salary_max = Column(Integer)
    currency = Column(String(10), nullable=False, default="INR")
    skills = Column(JSON, nullable=False, default=list)
    requirements = Column(Text, nullable=False)
    benefits = Column(Text)
    application_deadline = Column(DateTime)
    is_remote = Column(Boolean, nullable=False, default=False)
    posted_by_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    university_id = Column(Integer, ForeignKey("universities.id", ondelete="SET NULL"))
    status = Column(String(20), nullable=False, default="active")
    application_count = Column(Integer, nullable=False, default=0)
    view_count = Column(Integer, nullable=False, default=0)
    tags = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


class JobApplication(Base):
    __tablename__ = "job_applications"

    id = Column(Integer, primary_key=True)
    job_id = Column(Integer, ForeignKey("job_postings.id", ondelete="CASCADE"), nullable=False, index=True)
    applicant_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    cover_letter = Column(Text)
    resume_url = Column(String(500))
    status = Column(String(20), nullable=False, default="pending")
    applied_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    reviewed_at = Column(DateTime)
    review_notes = Column(Text)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


# ============================================================
# GIVING BACK
# ============================================================

class Scholarship(Base):
    __tablename__ = "scholarships"

    id = Column(Integer, primary_key=True)
    title = Column(String(300), nullable=False)
    description = Column(Text, nullable=False)
    amount = Column(Float, nullable=False)
    currency = Column(String(10), nullable=False, default="INR")
    funded_by_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    university_id = Column(Integer, ForeignKey("universities.id", ondelete="SET NULL"))
    eligibility_criteria = Column(Text, nullable=False)
    application_deadline = Column(DateTime, nullable=False)
    max_recipients = Column(Integer, nullable=False, default=1)
    current_recipients = Column(Integer, nullable=False, default=0)
    category = Column(String(20), nullable=False)
    academic_year = Column(String(20))
    requirements = Column(JSON, nullable=False, default=list)
    status = Column(String(20), nullable=False, default="active")
    is_recurring = Column(Boolean, nullable=False, default=False)
    recurring_frequency = Column(String(20))
    tags = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


class ScholarshipApplication(Base):
    __tablename__ = "scholarship_applications"

    id = Column(Integer, primary_key=True)
    scholarship_id = Column(Integer, ForeignKey("scholarships.id", ondelete="CASCADE"), nullable=False, index=True)
    applicant_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    application_essay = Column(Text, nullable=False)
    academic_records = Column(Text)
    recommendation_letters = Column(JSON, nullable=False, default=list)
    financial_need_statement = Column(Text)
    status = Column(String(20), nullable=False, default="pending")
    review_score = Column(Integer)
    review_notes = Column(Text)
    reviewed_at = Column(DateTime)
    reviewed_by_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"))
    applied_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
