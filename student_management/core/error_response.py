"""Assembly of the canonical error body."""

from __future__ import annotations

from collections.abc import Mapping
from collections.abc import Sequence
import logging
import re

from fastapi.responses import JSONResponse

from student_management.core.error_taxonomy import ErrorKind
from student_management.core.error_taxonomy import spec_for
from student_management.schemas.error import ERROR_CODE_PATTERN
from student_management.schemas.error import ErrorResponse
from student_management.schemas.error import FieldErrorDetail

logger = logging.getLogger(__name__)

_ERROR_CODE_RE = re.compile(ERROR_CODE_PATTERN)


def looks_like_error_code(value: str | None) -> bool:
    """Return True when the value has the ``E`` + three digits shape."""
    return value is not None and _ERROR_CODE_RE.fullmatch(value) is not None


def _normalize_label_and_code(label: str, code: str) -> tuple[str, str]:
    # Older call sites pass (code, label); the body must still carry code=E***.
    if looks_like_error_code(label) and not looks_like_error_code(code):
        logger.warning("Error builder received swapped label/code arguments: label=%s code=%s", label, code)
        label, code = code, label
    if not looks_like_error_code(code):
        raise ValueError(f"No error code of the form E000 among label={label!r}, code={code!r}")
    return label, code


def build_error_response(
    status: int,
    error_label_or_code: str,
    code_or_error_label: str,
    message: str,
    field_errors: Sequence[FieldErrorDetail] | None = None,
) -> ErrorResponse:
    """Build an error body, accepting the label and the code in either order.

    The canonical order is ``(status, label, code, message)``. When the label
    slot holds the ``E\\d{3}`` value and the code slot does not, the two are
    swapped so the body always has ``code`` = the ``E\\d{3}`` value and
    ``error`` = the label.

    ``errors`` and ``details`` receive the same list when field errors are
    given and are both omitted otherwise.
    """
    label, code = _normalize_label_and_code(error_label_or_code, code_or_error_label)
    safe = list(field_errors) if field_errors else None
    return ErrorResponse(
        status=status,
        code=code,
        error=label,
        message=message,
        errors=safe,
        details=safe,
    )


def build_for_kind(
    kind: ErrorKind,
    message: str | None = None,
    field_errors: Sequence[FieldErrorDetail] | None = None,
) -> ErrorResponse:
    """Build the error body for a taxonomy entry."""
    spec = spec_for(kind)
    return build_error_response(
        spec.status,
        spec.label,
        spec.code,
        message or spec.default_message,
        field_errors,
    )


def to_json_response(body: ErrorResponse, headers: Mapping[str, str] | None = None) -> JSONResponse:
    """Serialize an error body, dropping unset optional keys."""
    return JSONResponse(
        status_code=body.status,
        content=body.model_dump(exclude_none=True),
        headers=dict(headers) if headers else None,
    )
