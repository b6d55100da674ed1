"""
Gamification Routes

GET /gamification/stats - Caller's points, level, badges and streak
GET /gamification/leaderboard - Top members by points
GET /gamification/achievements - Achievement catalogue with caller's progress
"""

from typing import List

from fastapi import APIRouter, Depends, Query

from alumni_network.core.auth import get_current_user
from alumni_network.core.errors import not_found
from alumni_network.db.postgres import get_db_session
from alumni_network.schemas.schemas import Achievement, LeaderboardEntry, UserStats
from alumni_network.services.gamification_service import GamificationService
from alumni_network.utils.validation import clamp_limit

router = APIRouter(prefix="/gamification", tags=["Gamification"])


@router.get("/stats", response_model=UserStats)
async def get_stats(user: dict = Depends(get_current_user)):
    with get_db_session() as db:
        stats = GamificationService(db).get_user_stats(user["id"])

    if stats is None:
        raise not_found("User not found", "USER_NOT_FOUND")
    return UserStats(**stats)


@router.get("/leaderboard", response_model=List[LeaderboardEntry])
async def get_leaderboard(limit: int = Query(10)):
    with get_db_session() as db:
        entries = GamificationService(db).get_leaderboard(limit=clamp_limit(limit, 100))
    return [LeaderboardEntry(**entry) for entry in entries]


@router.get("/achievements", response_model=List[Achievement])
async def get_achievements(user: dict = Depends(get_current_user)):
    """Every achievement, locked ones included, with progress counters."""
    with get_db_session() as db:
        achievements = GamificationService(db).get_achievements(user["id"])
    return [Achievement(**a) for a in achievements]
