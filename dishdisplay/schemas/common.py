"""
Shared schema primitives used across the API.
"""
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field


class ErrorDetail(BaseModel):
    """A single field-level validation error."""
    field: str
    message: str
    type: str


class ErrorResponse(BaseModel):
    """Standard error envelope returned for all 4xx/5xx responses."""
    model_config = ConfigDict(from_attributes=True)

    code: str
    message: str
    details: Optional[dict[str, Any]] = None


class PointsBreakdown(BaseModel):
    """How an award was computed, for display next to the total."""
    base_points: int
    bonus_points: int
    total_points: int
    bonuses: list[str] = Field(default_factory=list, examples=[["+10 for detailed review"]])


def check_email(value: str) -> str:
    value = value.strip().lower()
    local, _, domain = value.partition("@")
    if not local or not domain:
        raise ValueError("must be an email address")
    return value
