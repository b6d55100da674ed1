"""
Gamification Service - points, levels, achievements and leaderboard.

Nothing is stored: every figure is derived from the rows a member has
already created (connections, posts, applications, credentials, ...).
Point values and level thresholds are fixed tables below.
"""

from datetime import date, datetime, timedelta
from typing import Dict, List, Optional

from sqlalchemy import distinct, func

from alumni_network.db.models import (
    Connection,
    Credential,
    CurriculumFeedback,
    EventRegistration,
    JobApplication,
    Message,
    Post,
    PostComment,
    Scholarship,
    Session,
    User,
    UserProfile,
)


POINT_VALUES = {
    "PROFILE_COMPLETE": 100,
    "FIRST_CONNECTION": 50,
    "CONNECTION_MADE": 10,
    "POST_CREATED": 25,
    "POST_LIKED": 5,
    "COMMENT_MADE": 15,
    "JOB_APPLIED": 30,
    "SCHOLARSHIP_CREATED": 200,
    "CURRICULUM_FEEDBACK": 100,
    "DAILY_LOGIN": 5,
    "MESSAGE_SENT": 10,
    "EVENT_ATTENDED": 50,
    "CREDENTIAL_VERIFIED": 75,
}

LEVEL_THRESHOLDS = [
    0, 100, 250, 500, 1000, 2000, 3500, 5500, 8000, 12000, 17000, 25000, 35000, 50000, 75000
]

EARLY_ADOPTER_LIMIT = 100

# (id, title, description, icon, category, points, rarity, activity key, target)
ACHIEVEMENTS = [
    ("first_connection", "Networker", "Made your first connection", "🤝", "networking", 50, "common", "connections", 1),
    ("connection_master", "Connection Master", "Connected with 50+ alumni", "🌐", "networking", 200, "rare", "connections", 50),
    ("job_hunter", "Job Hunter", "Applied to your first job", "🎯", "career", 30, "common", "job_applications", 1),
    ("scholarship_creator", "Generous Alumni", "Created your first scholarship", "🎓", "giving", 200, "epic", "scholarships", 1),
    ("mentor", "Mentor", "Mentored 5+ students", "👨‍🏫", "giving", 300, "epic", "mentorships", 5),
    ("influencer", "Influencer", "Got 100+ likes on a post", "⭐", "engagement", 150, "rare", "top_post_likes", 100),
    ("early_adopter", "Early Adopter", "One of the first 100 users", "🚀", "engagement", 500, "legendary", "early_adopter", 1),
    ("blockchain_verified", "Blockchain Verified", "Verified credentials on blockchain", "⛓️", "learning", 75, "common", "credentials_verified", 1),
    ("skill_master", "Skill Master", "Received 25+ skill endorsements", "💪", "learning", 250, "rare", "endorsements", 25),
    ("level_5", "Rising Star", "Reached level 5", "🌟", "engagement", 100, "common", "level", 5),
    ("level_10", "Platform Expert", "Reached level 10", "👑", "engagement", 300, "epic", "level", 10),
]

BADGE_COLORS = {
    "rare": "#3B82F6",
    "epic": "#8B5CF6",
    "legendary": "#F59E0B",
}


def calculate_level(total_points: int) -> int:
    """Index of the highest threshold reached, counted from 1."""
    for i in range(len(LEVEL_THRESHOLDS) - 1, -1, -1):
        if total_points >= LEVEL_THRESHOLDS[i]:
            return i + 1
    return 1


def next_level_points(level: int) -> int:
    if level < len(LEVEL_THRESHOLDS):
        return LEVEL_THRESHOLDS[level]
    return LEVEL_THRESHOLDS[-1]


def format_points(points: int) -> str:
    if points >= 1_000_000:
        return f"{points / 1_000_000:.1f}M"
    if points >= 1000:
        return f"{points / 1000:.1f}K"
    return str(points)


def is_profile_complete(profile: Optional[UserProfile]) -> bool:
    if profile is None:
        return False
    return bool(profile.major and profile.location and profile.bio and profile.skills)


def points_for(activity: dict) -> int:
    """Total points for one member's activity counts."""
    connections = activity.get("connections", 0)
    points = connections * POINT_VALUES["CONNECTION_MADE"]
    if connections >= 1:
        points += POINT_VALUES["FIRST_CONNECTION"]
    points += activity.get("posts", 0) * POINT_VALUES["POST_CREATED"]
    points += activity.get("likes_received", 0) * POINT_VALUES["POST_LIKED"]
    points += activity.get("comments", 0) * POINT_VALUES["COMMENT_MADE"]
    points += activity.get("job_applications", 0) * POINT_VALUES["JOB_APPLIED"]
    points += activity.get("scholarships", 0) * POINT_VALUES["SCHOLARSHIP_CREATED"]
    points += activity.get("feedback", 0) * POINT_VALUES["CURRICULUM_FEEDBACK"]
    points += activity.get("messages", 0) * POINT_VALUES["MESSAGE_SENT"]
    points += activity.get("events_attended", 0) * POINT_VALUES["EVENT_ATTENDED"]
    points += activity.get("credentials_verified", 0) * POINT_VALUES["CREDENTIAL_VERIFIED"]
    points += activity.get("login_days", 0) * POINT_VALUES["DAILY_LOGIN"]
    if activity.get("profile_complete"):
        points += POINT_VALUES["PROFILE_COMPLETE"]
    return points


def login_streak(days: List[date], today: Optional[date] = None) -> dict:
    """
    Current and longest run of consecutive login days.
    The current run counts only if it reaches today or yesterday.
    """
    today = today or datetime.utcnow().date()
    unique = sorted(set(days))
    if not unique:
        return {"current": 0, "longest": 0, "type": "login"}

    longest = run = 1
    for prev, day in zip(unique, unique[1:]):
        run = run + 1 if day - prev == timedelta(days=1) else 1
        longest = max(longest, run)

    current = 0
    if today - unique[-1] <= timedelta(days=1):
        current = 1
        for prev, day in zip(reversed(unique[:-1]), reversed(unique)):
            if day - prev != timedelta(days=1):
                break
            current += 1

    return {"current": current, "longest": longest, "type": "login"}


def evaluate_achievements(activity: dict, level: int) -> List[dict]:
    values = dict(activity, level=level)
    achievements = []
    for achievement_id, title, description, icon, category, points, rarity, key, target in ACHIEVEMENTS:
        progress = min(int(values.get(key, 0)), target)
        achievements.append({
            "id": achievement_id,
            "title": title,
            "description": description,
            "icon": icon,
            "category": category,
            "points": points,
            "rarity": rarity,
            "progress": progress,
            "max_progress": target,
            "unlocked": progress >= target
        })
    return achievements


class GamificationService:
    """
    Derives gamification figures from relational rows.

    Usage:
        with get_db_session() as db:
            stats = GamificationService(db).get_user_stats(user_id)
    """

    def __init__(self, db):
        self.db = db

    def _grouped(self, column, *filters, aggregate=None) -> Dict[str, int]:
        aggregate = aggregate if aggregate is not None else func.count()
        rows = self.db.query(column, aggregate).filter(*filters).group_by(column).all()
        return {user_id: int(value or 0) for user_id, value in rows}

    def activity_by_user(self) -> Dict[str, dict]:
        """Activity counts for every member, keyed by user id."""
        accepted = Connection.status == "accepted"
        as_requester = self._grouped(Connection.requester_id, accepted)
        as_recipient = self._grouped(Connection.recipient_id, accepted)

        counters = {
            "posts": self._grouped(Post.user_id),
            "likes_received": self._grouped(Post.user_id, aggregate=func.sum(Post.likes_count)),
            "top_post_likes": self._grouped(Post.user_id, aggregate=func.max(Post.likes_count)),
            "comments": self._grouped(PostComment.user_id),
            "job_applications": self._grouped(JobApplication.applicant_id),
            "scholarships": self._grouped(Scholarship.funded_by_id),
            "feedback": self._grouped(CurriculumFeedback.submitted_by_id),
            "messages": self._grouped(Message.sender_id),
            "events_attended": self._grouped(
                EventRegistration.user_id, EventRegistration.attendance_status == "attended"
            ),
            "credentials_verified": self._grouped(Credential.user_id, Credential.is_verified_on_chain.is_(True)),
            "mentorships": self._grouped(
                Connection.recipient_id, accepted, Connection.connection_type == "mentorship"
            ),
            "login_days": self._grouped(
                Session.user_id, aggregate=func.count(distinct(func.date(Session.created_at)))
            ),
        }

        profiles = {p.user_id: p for p in self.db.query(UserProfile).all()}
        users = self.db.query(User.id).order_by(User.created_at, User.id).all()

        activity = {}
        for signup_rank, (user_id,) in enumerate(users, start=1):
            row = {key: values.get(user_id, 0) for key, values in counters.items()}
            row["connections"] = as_requester.get(user_id, 0) + as_recipient.get(user_id, 0)
            row["profile_complete"] = is_profile_complete(profiles.get(user_id))
            row["early_adopter"] = 1 if signup_rank <= EARLY_ADOPTER_LIMIT else 0
            # No endorsement store yet
            row["endorsements"] = 0
            activity[user_id] = row
        return activity

    def _ranking(self, activity: Dict[str, dict]) -> List[tuple]:
        """[(user_id, points)] best first; ties keep signup order."""
        scored = [(user_id, points_for(row)) for user_id, row in activity.items()]
        scored.sort(key=lambda item: item[1], reverse=True)
        return scored

    def get_user_stats(self, user_id: str) -> Optional[dict]:
        activity = self.activity_by_user()
        if user_id not in activity:
            return None

        ranking = self._ranking(activity)
        rank = next(i for i, (uid, _) in enumerate(ranking, start=1) if uid == user_id)

        total_points = points_for(activity[user_id])
        level = calculate_level(total_points)
        achievements = evaluate_achievements(activity[user_id], level)
        unlocked = [a for a in achievements if a["unlocked"]]

        session_days = [
            created_at.date()
            for (created_at,) in self.db.query(Session.created_at).filter(Session.user_id == user_id).all()
        ]

        return {
            "total_points": total_points,
            "level": level,
            "next_level_points": next_level_points(level),
            "current_level_points": total_points,
            "achievements": unlocked,
            "badges": [
                {
                    "id": f"badge_{a['id']}",
                    "name": a["title"],
                    "description": a["description"],
                    "icon": a["icon"],
                    "color": BADGE_COLORS[a["rarity"]]
                }
                for a in unlocked if a["rarity"] in BADGE_COLORS
            ],
            "streak": login_streak(session_days),
            "leaderboard_rank": rank
        }

    def get_achievements(self, user_id: str) -> List[dict]:
        """Whole catalogue with the member's progress on each entry."""
        activity = self.activity_by_user().get(user_id, {})
        return evaluate_achievements(activity, calculate_level(points_for(activity)))

    def get_leaderboard(self, limit: int = 10) -> List[dict]:
        activity = self.activity_by_user()
        names = dict(self.db.query(User.id, User.name).all())

        leaderboard = []
        for rank, (user_id, points) in enumerate(self._ranking(activity)[:limit], start=1):
            leaderboard.append({
                "user_id": user_id,
                "name": names.get(user_id, ""),
                "points": points,
                "level": calculate_level(points),
                "rank": rank
            })
        return leaderboard
