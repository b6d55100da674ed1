"""
Admin User Routes (university_admin only)

GET /admin/users - List users with profiles, or one by ?id= / ?email=
PUT /admin/users?id= - Update name, email, emailVerified
DELETE /admin/users?id= - Delete user and everything they own
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from alumni_network.core.auth import get_current_admin
from alumni_network.core.errors import bad_request, not_found
from alumni_network.db.models import User, UserProfile
from alumni_network.db.postgres import get_db_session
from alumni_network.schemas.schemas import AdminUserResponse, AdminUserUpdate, ProfileResponse
from alumni_network.utils.validation import clamp_limit, contains, is_blank, provided

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/users", tags=["Admin"])


def admin_user_view(user: User, profile: Optional[UserProfile]) -> AdminUserResponse:
    view = AdminUserResponse.model_validate(user)
    view.profile = ProfileResponse.model_validate(profile) if profile else None
    return view


def _require_user_id(id: Optional[str]) -> str:
    if is_blank(id):
        raise bad_request("User ID is required", "MISSING_USER_ID")
    return id.strip()


def _user_with_profile(db, *filters):
    row = (
        db.query(User, UserProfile)
        .outerjoin(UserProfile, UserProfile.user_id == User.id)
        .filter(*filters)
        .first()
    )
    if not row:
        raise not_found("User not found", "USER_NOT_FOUND")
    return row


@router.get("")
async def get_users(
    id: Optional[str] = Query(None),
    email: Optional[str] = Query(None),
    role: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    limit: int = Query(20),
    offset: int = Query(0, ge=0),
    admin: dict = Depends(get_current_admin)
):
    """Get one user by id or email, or list users newest first."""
    with get_db_session() as db:
        if id:
            return admin_user_view(*_user_with_profile(db, User.id == id))
        if email:
            return admin_user_view(*_user_with_profile(db, User.email == email.strip().lower()))

        query = db.query(User, UserProfile).outerjoin(UserProfile, UserProfile.user_id == User.id)
        if role:
            query = query.filter(UserProfile.role == role)
        if search:
            query = query.filter(contains(User.name, search) | contains(User.email, search))

        rows = (
            query.order_by(User.created_at.desc())
            .offset(offset)
            .limit(clamp_limit(limit, 100))
            .all()
        )
        return [admin_user_view(user, profile) for user, profile in rows]


@router.put("", response_model=AdminUserResponse)
async def update_user(
    payload: AdminUserUpdate,
    id: Optional[str] = Query(None),
    admin: dict = Depends(get_current_admin)
):
    """Update only the fields sent. Emails are stored lowercased."""
    user_id = _require_user_id(id)
    with get_db_session() as db:
        user, profile = _user_with_profile(db, User.id == user_id)

        if provided(payload, "name"):
            if not isinstance(payload.name, str) or is_blank(payload.name):
                raise bad_request("Name must be a non-empty string", "INVALID_NAME")
            user.name = payload.name.strip()

        if provided(payload, "email"):
            if not isinstance(payload.email, str) or "@" not in payload.email:
                raise bad_request("Valid email is required", "INVALID_EMAIL")
            email = payload.email.strip().lower()
            taken = db.query(User.id).filter(User.email == email, User.id != user_id).first()
            if taken:
                raise bad_request("Email already in use", "EMAIL_EXISTS")
            user.email = email

        if provided(payload, "email_verified"):
            if not isinstance(payload.email_verified, bool):
                raise bad_request("emailVerified must be a boolean", "INVALID_EMAIL_VERIFIED")
            user.email_verified = payload.email_verified

        db.flush()
        return admin_user_view(user, profile)


@router.delete("")
async def delete_user(id: Optional[str] = Query(None), admin: dict = Depends(get_current_admin)):
    """Delete a user; owned rows go with it through ON DELETE CASCADE."""
    user_id = _require_user_id(id)
    with get_db_session() as db:
        user, profile = _user_with_profile(db, User.id == user_id)
        deleted = admin_user_view(user, profile)
        db.delete(user)

    logger.info("User %s deleted by admin %s", user_id, admin["id"])
    return {"message": "User deleted successfully", "deletedUser": deleted}
