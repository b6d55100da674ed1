"""
Recommendation Routes

GET /recommendations?type=jobs|mentors|connections - Ranked matches for the caller
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from alumni_network.core.auth import get_current_user
from alumni_network.core.errors import bad_request
from alumni_network.db.postgres import get_db_session
from alumni_network.schemas.schemas import MatchItem, RecommendationResponse, RecommendationType
from alumni_network.services.matching_service import MatchingService
from alumni_network.utils.validation import clamp_limit, is_blank, require_choice

router = APIRouter(prefix="/recommendations", tags=["Recommendations"])

FINDERS = {
    "jobs": MatchingService.find_job_matches,
    "mentors": MatchingService.find_mentor_matches,
    "connections": MatchingService.find_connection_matches,
}


@router.get("", response_model=RecommendationResponse)
async def get_recommendations(
    type: Optional[str] = Query(None),
    limit: int = Query(10),
    user: dict = Depends(get_current_user)
):
    """Score candidates against the caller's profile and return the best ones."""
    if is_blank(type):
        raise bad_request("type is required", "MISSING_TYPE")
    require_choice(type, RecommendationType, "INVALID_TYPE", "type")

    with get_db_session() as db:
        matches = FINDERS[type](MatchingService(db), user["id"], limit=clamp_limit(limit, 50))

    return RecommendationResponse(
        type=type,
        user_id=user["id"],
        recommendations=[MatchItem(**m) for m in matches],
        count=len(matches),
        generated_at=datetime.utcnow()
    )
