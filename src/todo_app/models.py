from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


Category = Literal["Work", "Personal"]
CATEGORIES = ("Work", "Personal")

IssueType = Literal["business_hours", "business_info", "date"]


class Outcome(str, Enum):
    """How a call to an external service ended. Several outcomes may map to
    the same fallback value; callers can still tell them apart."""

    SUCCESS = "success"
    UNCONFIGURED = "unconfigured"
    TRANSPORT_ERROR = "transport_error"
    CONTENT_ERROR = "content_error"


class ValidationStatus(str, Enum):
    PENDING = "pending"
    VALID = "valid"
    WARNING = "warning"
    REQUIRES_ATTENTION = "requires_attention"
    ERROR = "error"


# valid < warning < requires_attention; pending/error sit outside the lattice
_SEVERITY = {
    ValidationStatus.VALID: 0,
    ValidationStatus.WARNING: 1,
    ValidationStatus.REQUIRES_ATTENTION: 2,
}


def escalate(current: ValidationStatus, candidate: ValidationStatus) -> ValidationStatus:
    """Return the more severe of two orchestration statuses.

    Only the three orchestration outcomes take part; a status is never
    downgraded by this merge.
    """
    if current not in _SEVERITY or candidate not in _SEVERITY:
        raise ValueError(f"cannot merge statuses {current!r} and {candidate!r}")
    return candidate if _SEVERITY[candidate] > _SEVERITY[current] else current


class Todo(BaseModel):
    id: int
    title: str = Field(..., min_length=1)
    description: Optional[str] = ""
    category: Category
    completed: bool = False
    created_at: datetime

    original_text: Optional[str] = None
    parsed_data: Optional[Dict[str, Any]] = None
    validation_status: ValidationStatus = ValidationStatus.PENDING
    business_info: Optional[Dict[str, Any]] = None
    suggested_alternatives: Optional[Any] = None
    scheduled_datetime: Optional[datetime] = None
    location_data: Optional[Dict[str, Any]] = None


class TodoCreate(BaseModel):
    """Body of a plain create. Required-ness is enforced by the store so the
    API can answer with a 400 instead of a schema error."""

    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None


class TodoUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    completed: Optional[bool] = None


class ParsedData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    task: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    business_name: Optional[str] = None
    business_type: Optional[str] = None
    location: Optional[str] = None
    urgency: Optional[str] = "medium"
    category: Optional[str] = "Personal"

    @field_validator("date", "time", "business_name", "business_type", "location", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @classmethod
    def default_for(cls, text: str) -> "ParsedData":
        return cls(task=text)


class BusinessSource(BaseModel):
    title: Optional[str] = None
    url: Optional[str] = None
    content: Optional[str] = None


class BusinessInfo(BaseModel):
    name: str
    location: Optional[str] = None
    hours: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    contact: Optional[str] = None
    status: str = "unknown"
    sources: List[BusinessSource] = Field(default_factory=list)
    error: Optional[str] = None


class ValidationIssue(BaseModel):
    type: IssueType
    message: str
    suggestions: List[str] = Field(default_factory=list)


class HoursCheck(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    is_valid: bool
    reason: str
    suggestions: List[str] = Field(default_factory=list)


class ValidationResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    original_text: str
    parsed_data: ParsedData
    validation_status: ValidationStatus
    business_info: Optional[BusinessInfo] = None
    suggested_alternatives: Optional[Dict[str, Any]] = None
    validation_issues: List[ValidationIssue] = Field(default_factory=list)
    scheduled_datetime: Optional[datetime] = None
    location_data: Optional[Dict[str, Any]] = None
