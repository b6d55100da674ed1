"""
Authentication Utility - JWT, sessions and password handling.

Provides:
- Password hashing with bcrypt
- JWT token creation/verification (each token is bound to a session row)
- FastAPI dependencies for protected routes
"""

import secrets
from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from alumni_network.core.config import get_settings
from alumni_network.core.errors import APIError, forbidden
from alumni_network.db.postgres import get_db_session
from alumni_network.db.models import Session, User, UserProfile

settings = get_settings()

ADMIN_ROLE = "university_admin"

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token extractor. Missing headers are reported by the dependencies
# below so every 401 carries the same body.
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def create_session(db, user: User, ip_address: str = None, user_agent: str = None) -> str:
    """Open a session for the user and return its signed access token."""
    expires_delta = timedelta(minutes=settings.jwt_expire_minutes)
    session = Session(
        user_id=user.id,
        token=secrets.token_hex(32),
        expires_at=datetime.utcnow() + expires_delta,
        ip_address=ip_address,
        user_agent=user_agent
    )
    db.add(session)
    db.flush()
    return create_access_token({"sub": user.id, "sid": session.token}, expires_delta)


def _unauthorized(error: str, code: str) -> APIError:
    return APIError(401, error, code, headers={"WWW-Authenticate": "Bearer"})


def _resolve_user(credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[dict]:
    if credentials is None:
        return None

    payload = decode_token(credentials.credentials)
    if not payload or not payload.get("sub") or not payload.get("sid"):
        raise _unauthorized("Invalid or expired token", "INVALID_TOKEN")

    with get_db_session() as db:
        row = (
            db.query(User, Session)
            .join(Session, Session.user_id == User.id)
            .filter(User.id == payload["sub"], Session.token == payload["sid"])
            .first()
        )
        if not row:
            raise _unauthorized("Invalid or expired token", "INVALID_TOKEN")

        user, session = row
        if session.expires_at < datetime.utcnow():
            raise _unauthorized("Session expired", "INVALID_TOKEN")

    if not user.is_active:
        raise forbidden("Account deactivated", "ACCOUNT_DEACTIVATED")

    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "image": user.image,
        "session_token": session.token
    }


async def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme)) -> dict:
    """
    FastAPI dependency - Get current authenticated user.

    Usage:
        @app.get("/protected")
        async def route(user: dict = Depends(get_current_user)):
            return user
    """
    user = _resolve_user(credentials)
    if user is None:
        raise _unauthorized("Authentication required", "AUTHENTICATION_REQUIRED")
    return user


def is_admin(db, user_id: str) -> bool:
    """True when the user has a university_admin profile."""
    profile = db.query(UserProfile).filter(UserProfile.user_id == user_id).first()
    return profile is not None and profile.role == ADMIN_ROLE


async def get_current_admin(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require a university_admin profile."""
    with get_db_session() as db:
        admin = is_admin(db, user["id"])

    if not admin:
        raise forbidden("University admins only", "FORBIDDEN")

    user["role"] = ADMIN_ROLE
    return user
