"""
Request validation helpers shared by the route modules.

Each helper raises APIError with the documented error code, so route code
reads as a flat list of checks.
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Iterable, List, Optional

from pydantic import BaseModel

from alumni_network.core.errors import bad_request


def parse_id(value: Optional[str], code: str = "INVALID_ID", message: str = "Valid ID is required") -> int:
    """Parse a numeric id from a query string value."""
    if value is None:
        raise bad_request(message, code)
    try:
        parsed = int(str(value).strip())
    except ValueError:
        raise bad_request(message, code)
    return parsed


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return False


def parse_iso_datetime(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 string into a naive UTC datetime.
    Returns None when the value is not a valid ISO date/datetime.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_calendar_date(value: Any) -> Optional[date]:
    """Parse a strict YYYY-MM-DD string."""
    if not isinstance(value, str) or len(value.strip()) != 10:
        return None
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        return None


def choice_values(choices: Iterable) -> List[str]:
    """Plain values of an Enum class or any iterable of strings."""
    return [c.value if isinstance(c, Enum) else c for c in choices]


def require_choice(value: Any, choices: Iterable, code: str, label: str) -> str:
    values = choice_values(choices)
    if value not in values:
        raise bad_request(f"{label} must be one of: {', '.join(values)}", code)
    return value


def reject_body_fields(payload: BaseModel, names: Iterable[str], code: str, message: str) -> None:
    """Reject identity fields the server derives from the session."""
    extra = payload.model_extra or {}
    provided = set(extra) | {f for f in payload.model_fields_set}
    for name in names:
        if name in provided:
            raise bad_request(message, code)


def provided(payload: BaseModel, field: str) -> bool:
    """True when the client sent the field, even if it sent null."""
    return field in payload.model_fields_set


def as_string_list(value: Any) -> Optional[list]:
    """
    Accept a list of strings or a comma-separated string.
    Returns None for any other shape.
    """
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return [item.strip() for item in value if item.strip()]
    return None


def as_positive_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, float) and value.is_integer():
        return int(value) if value > 0 else None
    if isinstance(value, str) and value.strip().isdigit():
        parsed = int(value.strip())
        return parsed if parsed > 0 else None
    return None


def as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def clamp_limit(limit: int, cap: int) -> int:
    return max(1, min(limit, cap))


def contains(column, term: str):
    """Case-insensitive substring match."""
    return column.ilike(f"%{term}%")


def query_flag(value: Optional[str]) -> bool:
    """Boolean query-string flag: 'true' or '1'."""
    return value is not None and value.strip().lower() in ("true", "1")


def sort_column(model, sort_by: Optional[str], allowed: dict, default: str = "created_at"):
    """Map a camelCase sortBy value onto a column, falling back to the default."""
    return getattr(model, allowed.get(sort_by or "", default))


def ordered(query, column, sort_order: Optional[str]):
    return query.order_by(column.asc() if sort_order == "asc" else column.desc())
