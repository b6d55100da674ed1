"""
University Routes (tenants)

GET /universities - List, or one by ?id= / ?domain=
POST /universities - Register a university
PUT /universities?id= - Partial update
DELETE /universities?id= - Delete (tenant rows cascade)
"""

import re
from typing import Optional

from fastapi import APIRouter, Depends, Query

from alumni_network.core.auth import get_current_user
from alumni_network.core.errors import bad_request, not_found
from alumni_network.db.models import University
from alumni_network.db.postgres import get_db_session
from alumni_network.schemas.schemas import UniversityCreate, UniversityResponse
from alumni_network.utils.validation import (
    clamp_limit, contains, is_blank, parse_id, provided, query_flag
)

router = APIRouter(prefix="/universities", tags=["Universities"])

# Multi-level domains such as example.edu.in are allowed
DOMAIN_PATTERN = re.compile(r"^(?:[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.)+[a-zA-Z]{2,}$")

MUTABLE_FIELDS = ("name", "country", "tenant_id", "logo", "description", "is_active")


def normalize_domain(domain: str) -> str:
    normalized = domain.strip().lower()
    if not DOMAIN_PATTERN.match(normalized):
        raise bad_request("Invalid domain format", "INVALID_DOMAIN_FORMAT")
    return normalized


def _check_json_fields(payload: UniversityCreate) -> None:
    if payload.admin_ids is not None and not isinstance(payload.admin_ids, list):
        raise bad_request("adminIds must be an array", "INVALID_ADMIN_IDS")
    if payload.settings is not None and not isinstance(payload.settings, dict):
        raise bad_request("settings must be an object", "INVALID_SETTINGS")


def validate_new_university(payload: UniversityCreate) -> dict:
    """Column values for a new university. Shared with the document mirror."""
    if is_blank(payload.name):
        raise bad_request("Name is required", "MISSING_NAME")
    if is_blank(payload.domain):
        raise bad_request("Domain is required", "MISSING_DOMAIN")
    if is_blank(payload.country):
        raise bad_request("Country is required", "MISSING_COUNTRY")
    if is_blank(payload.tenant_id):
        raise bad_request("TenantId is required", "MISSING_TENANT_ID")

    domain = normalize_domain(payload.domain)
    _check_json_fields(payload)

    return {
        "name": payload.name.strip(),
        "domain": domain,
        "country": payload.country.strip(),
        "tenant_id": payload.tenant_id.strip(),
        "logo": payload.logo,
        "description": payload.description,
        "is_active": True if payload.is_active is None else payload.is_active,
        "admin_ids": payload.admin_ids or [],
        "settings": payload.settings or {}
    }


def validate_university_changes(payload: UniversityCreate) -> dict:
    """Only the fields the client sent, validated. Shared with the document mirror."""
    changes = {}
    if provided(payload, "domain") and payload.domain is not None:
        changes["domain"] = normalize_domain(payload.domain)
    _check_json_fields(payload)

    for field in MUTABLE_FIELDS:
        if provided(payload, field):
            value = getattr(payload, field)
            changes[field] = value.strip() if isinstance(value, str) else value
    if provided(payload, "admin_ids"):
        changes["admin_ids"] = payload.admin_ids or []
    if provided(payload, "settings"):
        changes["settings"] = payload.settings or {}
    return changes


def _ensure_unique(db, domain: Optional[str], tenant_id: Optional[str], exclude_id: int = None) -> None:
    if domain:
        query = db.query(University).filter(University.domain == domain)
        if exclude_id is not None:
            query = query.filter(University.id != exclude_id)
        if query.first():
            raise bad_request("Domain already exists", "DUPLICATE_DOMAIN")
    if tenant_id:
        query = db.query(University).filter(University.tenant_id == tenant_id)
        if exclude_id is not None:
            query = query.filter(University.id != exclude_id)
        if query.first():
            raise bad_request("TenantId already exists", "DUPLICATE_TENANT_ID")


def _get_or_404(db, university_id: int) -> University:
    university = db.query(University).filter(University.id == university_id).first()
    if not university:
        raise not_found("University not found", "UNIVERSITY_NOT_FOUND")
    return university


@router.get("")
async def get_universities(
    id: Optional[str] = Query(None),
    domain: Optional[str] = Query(None),
    country: Optional[str] = Query(None),
    is_active: Optional[str] = Query(None, alias="isActive"),
    search: Optional[str] = Query(None),
    limit: int = Query(10),
    offset: int = Query(0, ge=0)
):
    """Get one university by id or domain, or list them with filters."""
    with get_db_session() as db:
        if id is not None:
            return UniversityResponse.model_validate(_get_or_404(db, parse_id(id)))

        if domain:
            university = db.query(University).filter(University.domain == domain.strip().lower()).first()
            if not university:
                raise not_found("University not found", "UNIVERSITY_NOT_FOUND")
            return UniversityResponse.model_validate(university)

        query = db.query(University)
        if country:
            query = query.filter(University.country == country)
        if is_active is not None:
            query = query.filter(University.is_active.is_(query_flag(is_active)))
        if search:
            query = query.filter(contains(University.name, search) | contains(University.country, search))

        rows = (
            query.order_by(University.created_at.desc())
            .offset(offset)
            .limit(clamp_limit(limit, 100))
            .all()
        )
        return [UniversityResponse.model_validate(u) for u in rows]


@router.post("", response_model=UniversityResponse, status_code=201)
async def create_university(payload: UniversityCreate, user: dict = Depends(get_current_user)):
    """Register a university (tenant)."""
    values = validate_new_university(payload)
    with get_db_session() as db:
        _ensure_unique(db, values["domain"], values["tenant_id"])
        university = University(**values)
        db.add(university)
        db.flush()
        return UniversityResponse.model_validate(university)


@router.put("", response_model=UniversityResponse)
async def update_university(
    payload: UniversityCreate,
    id: Optional[str] = Query(None),
    user: dict = Depends(get_current_user)
):
    """Update only the fields sent in the body."""
    university_id = parse_id(id)
    with get_db_session() as db:
        university = _get_or_404(db, university_id)
        changes = validate_university_changes(payload)
        _ensure_unique(db, changes.get("domain"), changes.get("tenant_id"), exclude_id=university_id)

        for field, value in changes.items():
            setattr(university, field, value)
        db.flush()
        return UniversityResponse.model_validate(university)


@router.delete("")
async def delete_university(id: Optional[str] = Query(None), user: dict = Depends(get_current_user)):
    """Delete a university and return it."""
    university_id = parse_id(id)
    with get_db_session() as db:
        university = _get_or_404(db, university_id)
        deleted = UniversityResponse.model_validate(university)
        db.delete(university)

    return {"message": "University deleted successfully", "university": deleted}
