"""
Authentication Routes

POST /auth/register - Register new user
POST /auth/login - Login and get JWT token (bound to a session row)
POST /auth/logout - End the current session
GET /auth/me - Get current user info
"""

from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, Request

from alumni_network.core.auth import (
    create_session, get_current_user, hash_password, verify_password
)
from alumni_network.core.config import get_settings
from alumni_network.core.errors import APIError, bad_request, forbidden
from alumni_network.db.models import Session, User
from alumni_network.db.postgres import get_db_session
from alumni_network.schemas.schemas import (
    LoginRequest, MessageResponse, RegisterRequest, TokenResponse, UserContact, UserResponse
)

settings = get_settings()
router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=UserResponse, status_code=201)
async def register(request: RegisterRequest):
    """
    Register a new user account.

    After registration, login to get access token, then create profile.
    """
    email = request.email.lower()
    with get_db_session() as db:
        if db.query(User).filter(User.email == email).first():
            raise bad_request("Email already registered", "EMAIL_EXISTS")

        user = User(
            name=request.name.strip(),
            email=email,
            password_hash=hash_password(request.password)
        )
        db.add(user)
        db.flush()
        return UserResponse.model_validate(user)


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest, http_request: Request):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    with get_db_session() as db:
        user = db.query(User).filter(User.email == request.email.lower()).first()
        if not user or not user.password_hash or not verify_password(request.password, user.password_hash):
            raise APIError(401, "Invalid email or password", "INVALID_CREDENTIALS")

        if not user.is_active:
            raise forbidden("Account deactivated", "ACCOUNT_DEACTIVATED")

        token = create_session(
            db, user,
            ip_address=http_request.client.host if http_request.client else None,
            user_agent=http_request.headers.get("user-agent")
        )
        return TokenResponse(
            access_token=token,
            expires_at=datetime.utcnow() + timedelta(minutes=settings.jwt_expire_minutes),
            user=UserContact.model_validate(user)
        )


@router.post("/logout", response_model=MessageResponse)
async def logout(user: dict = Depends(get_current_user)):
    """Delete the session behind the current token."""
    with get_db_session() as db:
        db.query(Session).filter(Session.token == user["session_token"]).delete()

    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserContact)
async def get_me(user: dict = Depends(get_current_user)):
    """Get current authenticated user info."""
    return UserContact(id=user["id"], email=user["email"], name=user["name"], image=user["image"])
