"""
Profile Routes

GET /profiles - List profiles, or one by ?id= / ?userId=
GET /profiles/{profile_id} - Get one profile
POST /profiles - Create or update the profile for a user (upsert by userId)
PUT /profiles?id= - Partial update
DELETE /profiles?id= - Delete profile

Changes are limited to the profile owner and university admins.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from alumni_network.core.auth import ADMIN_ROLE, get_current_user, is_admin
from alumni_network.core.errors import bad_request, forbidden, not_found
from alumni_network.db.models import UserProfile
from alumni_network.db.postgres import get_db_session
from alumni_network.schemas.schemas import (
    ProfileCreate, ProfileResponse, UserRole, VerificationStatus
)
from alumni_network.utils.validation import (
    as_string_list, clamp_limit, contains, is_blank, parse_id, provided, require_choice
)

router = APIRouter(prefix="/profiles", tags=["Profiles"])

PLAIN_FIELDS = (
    "university_id", "graduation_year", "major", "degree", "current_position", "company",
    "location", "bio", "phone_number", "linkedin_url", "is_verified"
)


def _validated_changes(payload: ProfileCreate) -> dict:
    """Column values for every profile field present in the body."""
    changes = {}

    if provided(payload, "role"):
        if is_blank(payload.role):
            raise bad_request("role is required", "MISSING_ROLE")
        changes["role"] = require_choice(payload.role.strip().lower(), UserRole, "INVALID_ROLE", "role")

    if provided(payload, "verification_status") and payload.verification_status is not None:
        changes["verification_status"] = require_choice(
            payload.verification_status, VerificationStatus, "INVALID_VERIFICATION_STATUS", "verificationStatus"
        )

    for field, code in (("skills", "INVALID_SKILLS_FORMAT"), ("interests", "INVALID_INTERESTS_FORMAT")):
        if provided(payload, field):
            value = getattr(payload, field)
            parsed = [] if value is None else as_string_list(value)
            if parsed is None:
                raise bad_request(f"{field} must be an array or comma-separated string", code)
            changes[field] = parsed

    for field in PLAIN_FIELDS:
        if provided(payload, field):
            changes[field] = getattr(payload, field)
    return changes


def _check_access(db, user: dict, owner_id: str, role: Optional[str] = None) -> None:
    """Only the owner or an admin may change a profile; only admins grant the admin role."""
    admin = is_admin(db, user["id"])
    if owner_id != user["id"] and not admin:
        raise forbidden("Unauthorized to modify this profile", "FORBIDDEN")
    if role == ADMIN_ROLE and not admin:
        raise forbidden("Only university admins can assign the university_admin role", "FORBIDDEN")


def _get_or_404(db, profile_id: int) -> UserProfile:
    profile = db.query(UserProfile).filter(UserProfile.id == profile_id).first()
    if not profile:
        raise not_found("Profile not found", "PROFILE_NOT_FOUND")
    return profile


@router.get("")
async def get_profiles(
    id: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None, alias="userId"),
    university_id: Optional[int] = Query(None, alias="universityId"),
    role: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    limit: int = Query(10),
    offset: int = Query(0, ge=0)
):
    """Get one profile by id or userId, or list profiles with filters."""
    with get_db_session() as db:
        if id is not None:
            return ProfileResponse.model_validate(
                _get_or_404(db, parse_id(id, message="Valid profile ID is required"))
            )

        if user_id:
            profile = db.query(UserProfile).filter(UserProfile.user_id == user_id).first()
            if not profile:
                raise not_found("Profile not found", "PROFILE_NOT_FOUND")
            return ProfileResponse.model_validate(profile)

        query = db.query(UserProfile)
        if university_id is not None:
            query = query.filter(UserProfile.university_id == university_id)
        if role:
            query = query.filter(UserProfile.role == role.lower())
        if search:
            query = query.filter(
                contains(UserProfile.major, search)
                | contains(UserProfile.company, search)
                | contains(UserProfile.current_position, search)
                | contains(UserProfile.bio, search)
            )

        rows = (
            query.order_by(UserProfile.created_at.desc())
            .offset(offset)
            .limit(clamp_limit(limit, 100))
            .all()
        )
        return [ProfileResponse.model_validate(p) for p in rows]


@router.get("/{profile_id}", response_model=ProfileResponse)
async def get_profile(profile_id: int):
    """Get a single profile."""
    with get_db_session() as db:
        return ProfileResponse.model_validate(_get_or_404(db, profile_id))


@router.post("", response_model=ProfileResponse, status_code=201)
async def upsert_profile(payload: ProfileCreate, response: Response, user: dict = Depends(get_current_user)):
    """
    Create the profile for userId, or update it when one exists.

    Returns 201 on create and 200 on update.
    """
    if is_blank(payload.user_id):
        raise bad_request("userId is required", "MISSING_USER_ID")
    if is_blank(payload.role):
        raise bad_request("role is required", "MISSING_ROLE")

    changes = _validated_changes(payload)
    with get_db_session() as db:
        _check_access(db, user, payload.user_id, changes.get("role"))
        profile = db.query(UserProfile).filter(UserProfile.user_id == payload.user_id).first()
        created = profile is None
        if created:
            profile = UserProfile(user_id=payload.user_id, **changes)
            db.add(profile)
        else:
            for field, value in changes.items():
                setattr(profile, field, value)
        db.flush()
        if not created:
            response.status_code = 200
        return ProfileResponse.model_validate(profile)


@router.put("", response_model=ProfileResponse)
async def update_profile(
    payload: ProfileCreate,
    id: Optional[str] = Query(None),
    user: dict = Depends(get_current_user)
):
    """Update only the fields sent in the body."""
    profile_id = parse_id(id, message="Valid profile ID is required")
    changes = _validated_changes(payload)

    with get_db_session() as db:
        profile = _get_or_404(db, profile_id)
        _check_access(db, user, profile.user_id, changes.get("role"))
        for field, value in changes.items():
            setattr(profile, field, value)
        db.flush()
        return ProfileResponse.model_validate(profile)


@router.delete("")
async def delete_profile(id: Optional[str] = Query(None), user: dict = Depends(get_current_user)):
    """Delete a profile and return it."""
    profile_id = parse_id(id, message="Valid profile ID is required")
    with get_db_session() as db:
        profile = _get_or_404(db, profile_id)
        _check_access(db, user, profile.user_id)
        deleted = ProfileResponse.model_validate(profile)
        db.delete(profile)

    return {"message": "Profile deleted successfully", "profile": deleted}
