# fintrack/schemas/common.py
import uuid
from datetime import date
from typing import Annotated, Any, Dict, Generic, List, Optional, TypeVar
from pydantic import BaseModel, BeforeValidator

from fintrack.core.errors import ValidationError
from fintrack.utils.money import MAX_MONEY

T = TypeVar("T")

# Spellings clients use for "no value" in optional identifier fields
ABSENT_MARKERS = {"", "null", "undefined", "none"}


def blank_to_none(value: Any) -> Any:
    """Map null, "", "null", "undefined" and "none" (any case) to None."""
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.lower() in ABSENT_MARKERS:
            return None
        return stripped
    return value


def empty_to_none(value: Any) -> Any:
    """Free text only treats the empty string as absent."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


OptionalUUID = Annotated[Optional[uuid.UUID], BeforeValidator(blank_to_none)]
OptionalText = Annotated[Optional[str], BeforeValidator(empty_to_none)]

# Upper bound for money fields, the range of a Numeric(14, 2) column
MONEY_LIMIT = float(MAX_MONEY)


def parse_optional_uuid(value: Optional[str], field: str) -> Optional[uuid.UUID]:
    """Same normalisation for query-string identifiers."""
    value = blank_to_none(value)
    if value is None:
        return None
    try:
        return uuid.UUID(value)
    except ValueError:
        raise ValidationError(f"{field} must be a valid UUID")


def parse_optional_date(value: Optional[str], field: str) -> Optional[date]:
    value = blank_to_none(value)
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"{field} must be a date in YYYY-MM-DD format")


def provided_fields(patch: BaseModel) -> Dict[str, Any]:
    """Fields the client actually sent with a value; absent and null are both 'keep'."""
    return {k: v for k, v in patch.model_dump(exclude_unset=True).items() if v is not None}


class APIResponse(BaseModel, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    data: T


class PageMeta(BaseModel):
    total: int
    limit: int
    offset: int


class PaginatedResponse(BaseModel, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    data: List[T]
    meta: PageMeta


class MessageResponse(BaseModel):
    success: bool = True
    message: str
