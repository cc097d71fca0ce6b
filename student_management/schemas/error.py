"""Error response schemas shared across API handlers."""

from __future__ import annotations

from pydantic import BaseModel
from pydantic import Field

ERROR_CODE_PATTERN = r"^E\d{3}$"


class FieldErrorDetail(BaseModel):
    """Single field-level validation or input issue."""

    field: str
    message: str


class ErrorResponse(BaseModel):
    """Canonical API error body.

    ``errors`` and ``details`` are two public names for the same list; both are
    left unset when there is no field-level detail so they drop out of the
    serialized body.
    """

    status: int
    code: str = Field(pattern=ERROR_CODE_PATTERN)
    error: str
    message: str
    errors: list[FieldErrorDetail] | None = None
    details: list[FieldErrorDetail] | None = None
