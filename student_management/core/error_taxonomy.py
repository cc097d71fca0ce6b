"""Failure kinds and their fixed HTTP status, error code, and label."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION_FAILED = "validation_failed"
    INVALID_JSON = "invalid_json"
    MISSING_PARAMETER = "missing_parameter"
    EMPTY_OBJECT = "empty_object"
    TYPE_MISMATCH = "type_mismatch"
    INVALID_REQUEST = "invalid_request"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    UNROUTED = "unrouted"
    UNCLASSIFIED = "unclassified"


@dataclass(frozen=True)
class ErrorSpec:
    """Wire-level identity of one failure kind."""

    status: int
    code: str
    label: str
    default_message: str


ERROR_TAXONOMY: dict[ErrorKind, ErrorSpec] = {
    ErrorKind.VALIDATION_FAILED: ErrorSpec(400, "E001", "VALIDATION_FAILED", "Request validation failed"),
    ErrorKind.INVALID_JSON: ErrorSpec(
        400,
        "E002",
        "INVALID_JSON",
        "Request JSON is malformed; check its structure",
    ),
    ErrorKind.MISSING_PARAMETER: ErrorSpec(400, "E003", "MISSING_PARAMETER", "Request body is required"),
    ErrorKind.EMPTY_OBJECT: ErrorSpec(400, "E003", "EMPTY_OBJECT", "No fields to update"),
    ErrorKind.TYPE_MISMATCH: ErrorSpec(400, "E004", "TYPE_MISMATCH", "Request parameter has an invalid type"),
    ErrorKind.INVALID_REQUEST: ErrorSpec(400, "E006", "INVALID_REQUEST", "Request format is invalid"),
    ErrorKind.UNAUTHORIZED: ErrorSpec(401, "E401", "UNAUTHORIZED", "Authentication is required"),
    ErrorKind.FORBIDDEN: ErrorSpec(403, "E403", "FORBIDDEN", "Access denied; administrator role is required"),
    ErrorKind.NOT_FOUND: ErrorSpec(404, "E404", "NOT_FOUND", "The requested resource was not found"),
    ErrorKind.UNROUTED: ErrorSpec(404, "E404", "NOT_FOUND", "The requested URL does not exist"),
    ErrorKind.UNCLASSIFIED: ErrorSpec(500, "E999", "INTERNAL_SERVER_ERROR", "An unexpected error occurred"),
}


def spec_for(kind: ErrorKind) -> ErrorSpec:
    """Return the taxonomy entry for a failure kind."""
    return ERROR_TAXONOMY[kind]
