"""
Matching Service - job, mentor and connection recommendations.

HOW IT WORKS:
1. Load the requesting user's profile
2. Load candidate rows (active jobs, alumni, other members)
3. Score each candidate with fixed weights and collect the reasons
4. Keep candidates above the threshold, best first

Scoring is plain arithmetic over profile fields, so the score_* functions
take ORM rows (or anything with the same attributes) and never touch the
database themselves.
"""

import math
from typing import List, Optional

from alumni_network.db.models import JobPosting, User, UserProfile


JOB_THRESHOLD = 10
MENTOR_THRESHOLD = 20
CONNECTION_THRESHOLD = 25
CONNECTION_CANDIDATES = 50
RECENT_GRADUATE_YEAR = 2015


def _round(score: float) -> int:
    # Half rounds up, not to even
    return int(math.floor(score + 0.5))


def _match(candidate_id: str, score: float, reasons: List[str], match_type: str) -> dict:
    return {
        "user_id": candidate_id,
        "score": _round(score),
        "reasons": reasons,
        "match_type": match_type
    }


def matching_skills(user_skills: List[str], job_skills: List[str]) -> List[str]:
    """User skills that appear in (or contain) any job skill, case-insensitively."""
    job_lower = [s.lower() for s in job_skills]
    return [
        skill for skill in user_skills
        if any(skill.lower() in js or js in skill.lower() for js in job_lower)
    ]


# ============================================================
# SCORING
# ============================================================

def score_job(profile: Optional[UserProfile], job: JobPosting) -> Optional[dict]:
    """
    Weights: skills 40 (share of job skills matched), remote or same
    location 30, same university 20, full-time 10.
    """
    score = 0.0
    reasons = []

    user_skills = list(profile.skills or []) if profile else []
    job_skills = list(job.skills or [])
    if user_skills and job_skills:
        matched = matching_skills(user_skills, job_skills)
        if matched:
            score += len(matched) / len(job_skills) * 40
            reasons.append(f"{len(matched)} matching skills")

    if job.is_remote:
        score += 30
        reasons.append("Remote work available")
    elif profile and profile.location and job.location == profile.location:
        score += 30
        reasons.append("Location matches")

    if profile and profile.university_id and job.university_id == profile.university_id:
        score += 20
        reasons.append("Same university")

    if job.job_type == "full-time":
        score += 10
        reasons.append("Full-time position")

    if score > JOB_THRESHOLD:
        return _match(str(job.id), score, reasons, "job")
    return None


def score_mentor(profile: Optional[UserProfile], mentor_id: str, mentor: UserProfile) -> Optional[dict]:
    """
    Weights: same university 40, same major 30, has a company 20,
    graduated 2015 or later 10.
    """
    score = 0
    reasons = []

    if profile and profile.university_id and mentor.university_id == profile.university_id:
        score += 40
        reasons.append("Same university alumni")

    if profile and profile.major and mentor.major == profile.major:
        score += 30
        reasons.append("Same field of study")

    if mentor.company:
        score += 20
        reasons.append(f"Works at {mentor.company}")

    if mentor.graduation_year and mentor.graduation_year >= RECENT_GRADUATE_YEAR:
        score += 10
        reasons.append("Recent graduate")

    if score > MENTOR_THRESHOLD:
        return _match(mentor_id, score, reasons, "mentor")
    return None


def score_connection(profile: Optional[UserProfile], candidate_id: str,
                     candidate: Optional[UserProfile]) -> Optional[dict]:
    """
    Weights: same university 30, same location 25, graduation year
    within 2 years 20, same major 15, same company 10.
    """
    if profile is None or candidate is None:
        return None

    score = 0
    reasons = []

    if profile.university_id and candidate.university_id == profile.university_id:
        score += 30
        reasons.append("Same university")

    if profile.location and candidate.location == profile.location:
        score += 25
        reasons.append("Same location")

    if profile.graduation_year and candidate.graduation_year:
        if abs(profile.graduation_year - candidate.graduation_year) <= 2:
            score += 20
            reasons.append("Similar graduation year")

    if profile.major and candidate.major == profile.major:
        score += 15
        reasons.append("Same field of study")

    if profile.company and candidate.company == profile.company:
        score += 10
        reasons.append("Same company")

    if score > CONNECTION_THRESHOLD:
        return _match(candidate_id, score, reasons, "connection")
    return None


def _best(matches: List[Optional[dict]], limit: int) -> List[dict]:
    kept = [m for m in matches if m is not None]
    kept.sort(key=lambda m: m["score"], reverse=True)
    return kept[:limit]


# ============================================================
# RECOMMENDATION SERVICE
# ============================================================

class MatchingService:
    """
    Loads candidates from the relational store and ranks them.

    Usage:
        with get_db_session() as db:
            MatchingService(db).find_job_matches(user_id, limit=10)
    """

    def __init__(self, db):
        self.db = db

    def _profile(self, user_id: str) -> Optional[UserProfile]:
        return self.db.query(UserProfile).filter(UserProfile.user_id == user_id).first()

    def _user_exists(self, user_id: str) -> bool:
        return self.db.query(User.id).filter(User.id == user_id).first() is not None

    def find_job_matches(self, user_id: str, limit: int = 10) -> List[dict]:
        if not self._user_exists(user_id):
            return []
        profile = self._profile(user_id)

        jobs = (
            self.db.query(JobPosting)
            .filter(JobPosting.status == "active", JobPosting.posted_by_id != user_id)
            .all()
        )
        return _best([score_job(profile, job) for job in jobs], limit)

    def find_mentor_matches(self, user_id: str, limit: int = 10) -> List[dict]:
        if not self._user_exists(user_id):
            return []
        profile = self._profile(user_id)

        mentors = (
            self.db.query(UserProfile)
            .filter(UserProfile.role == "alumni", UserProfile.user_id != user_id)
            .all()
        )
        return _best([score_mentor(profile, m.user_id, m) for m in mentors], limit)

    def find_connection_matches(self, user_id: str, limit: int = 10) -> List[dict]:
        if not self._user_exists(user_id):
            return []
        profile = self._profile(user_id)

        candidates = (
            self.db.query(User.id, UserProfile)
            .outerjoin(UserProfile, UserProfile.user_id == User.id)
            .filter(User.id != user_id)
            .order_by(User.created_at)
            .limit(CONNECTION_CANDIDATES)
            .all()
        )
        return _best([score_connection(profile, cid, candidate) for cid, candidate in candidates], limit)
