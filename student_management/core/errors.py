"""Application exceptions, failure classification, and handler registration."""

from __future__ import annotations

from collections.abc import Mapping
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
import json
import logging
from typing import Any

from fastapi import FastAPI
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

from student_management.core.error_response import build_for_kind
from student_management.core.error_response import to_json_response
from student_management.core.error_taxonomy import ErrorKind
from student_management.core.error_taxonomy import spec_for
from student_management.schemas.error import ErrorResponse
from student_management.schemas.error import FieldErrorDetail

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base application exception carrying its failure kind."""

    kind: ErrorKind = ErrorKind.UNCLASSIFIED

    def __init__(
        self,
        *,
        message: str | None = None,
        field_errors: Sequence[FieldErrorDetail] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self.message = message if message and message.strip() else spec_for(self.kind).default_message
        super().__init__(self.message)
        self.field_errors = list(field_errors) if field_errors else None
        self.headers = dict(headers) if headers else None


class IdentifierFormat(str, Enum):
    """Which stage of identifier decoding rejected the input."""

    BASE64 = "Base64"
    UUID = "UUID"


class InvalidIdentifierError(AppError):
    """Identifier text or bytes that cannot represent a 16-byte identifier."""

    kind = ErrorKind.INVALID_REQUEST

    def __init__(self, message: str, *, id_format: IdentifierFormat, field: str | None = None) -> None:
        super().__init__(message=message)
        self.id_format = id_format
        self.field = field

    def for_field(self, field: str) -> InvalidIdentifierError:
        """Return a copy of this error attributed to a request field."""
        error = InvalidIdentifierError(self.message, id_format=self.id_format, field=field)
        error.__cause__ = self.__cause__
        return error


class ValidationFailedError(AppError):
    """One or more declared field constraints were violated."""

    kind = ErrorKind.VALIDATION_FAILED

    def __init__(self, field_errors: Sequence[FieldErrorDetail], *, message: str | None = None) -> None:
        super().__init__(message=message, field_errors=field_errors)

    @classmethod
    def from_issues(cls, issues: Sequence[Mapping[str, Any]]) -> ValidationFailedError:
        """Build from pydantic ``errors()`` entries, one field detail per issue."""
        return cls(_validation_field_errors(issues))


class BodyUnreadableError(AppError):
    """Request body could not be read as JSON.

    The underlying problem is chained as ``__cause__``; no cause means the body
    was absent or empty.
    """

    kind = ErrorKind.INVALID_REQUEST


class EmptyObjectError(AppError):
    """Request body is present but carries nothing to apply."""

    kind = ErrorKind.EMPTY_OBJECT


class MissingParameterError(AppError):
    """A required parameter or body was not supplied."""

    kind = ErrorKind.MISSING_PARAMETER

    def __init__(self, *, parameter: str | None = None, message: str | None = None) -> None:
        if not message and parameter:
            message = f"Required parameter '{parameter}' is missing"
        super().__init__(message=message)
        self.parameter = parameter


class InvalidRequestError(AppError):
    """Request is well-formed but its combination of inputs is not accepted."""

    kind = ErrorKind.INVALID_REQUEST


class ResourceNotFoundError(AppError):
    """Referenced resource does not exist."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, resource: str, key: Any, *, message: str | None = None) -> None:
        if not message or not message.strip():
            message = f"{resource} not found: {key}"
        super().__init__(message=message)
        self.resource = resource
        self.key = key


class UnauthorizedError(AppError):
    kind = ErrorKind.UNAUTHORIZED

    def __init__(self, *, message: str | None = None) -> None:
        super().__init__(message=message, headers={"WWW-Authenticate": "Basic"})


class ForbiddenError(AppError):
    kind = ErrorKind.FORBIDDEN


@dataclass(frozen=True)
class Failure:
    """Classified failure ready to be rendered through the taxonomy."""

    kind: ErrorKind
    message: str | None = None
    field_errors: list[FieldErrorDetail] | None = None
    headers: dict[str, str] | None = None


_PARAMETER_LOCATIONS = {"query", "path", "header", "cookie"}
_LOCATION_PREFIXES = {"body"} | _PARAMETER_LOCATIONS

_EXPECTED_TYPES = {
    "bool_parsing": "bool",
    "bool_type": "bool",
    "int_parsing": "int",
    "int_type": "int",
    "int_from_float": "int",
    "float_parsing": "float",
    "float_type": "float",
    "decimal_parsing": "Decimal",
    "uuid_parsing": "UUID",
    "uuid_type": "UUID",
    "date_parsing": "date",
    "date_from_datetime_parsing": "date",
    "datetime_parsing": "datetime",
    "time_parsing": "time",
    "enum": "enum",
}


def _format_location(location: tuple[Any, ...] | list[Any] | Any) -> str:
    if not isinstance(location, (tuple, list)):
        return str(location)

    filtered = [str(part) for part in location if part not in _LOCATION_PREFIXES]
    if filtered:
        return ".".join(filtered)

    if not location:
        return "request"

    return str(location[0])


def _location_root(issue: Mapping[str, Any]) -> Any:
    location = issue.get("loc") or ()
    return location[0] if location else None


def _is_type_error(error_type: str) -> bool:
    return error_type in _EXPECTED_TYPES or error_type.endswith(("_parsing", "_type"))


def _expected_type(error_type: str) -> str:
    if error_type in _EXPECTED_TYPES:
        return _EXPECTED_TYPES[error_type]
    return error_type.rsplit("_", 1)[0] or "unknown"


def _validation_field_errors(issues: Sequence[Mapping[str, Any]]) -> list[FieldErrorDetail]:
    return [
        FieldErrorDetail(
            field=_format_location(issue.get("loc", ())),
            message=str(issue.get("msg", "Invalid value")),
        )
        for issue in issues
    ]


def _classify_validation_issues(issues: Sequence[Mapping[str, Any]]) -> Failure:
    if any(issue.get("type") == "json_invalid" for issue in issues):
        return Failure(ErrorKind.INVALID_JSON)

    for issue in issues:
        location = tuple(issue.get("loc", ()))
        if location == ("body",) and issue.get("type") == "missing":
            return Failure(ErrorKind.MISSING_PARAMETER, message="Request body is required")

    parameter_issues = [issue for issue in issues if _location_root(issue) in _PARAMETER_LOCATIONS]
    for issue in parameter_issues:
        if issue.get("type") == "missing":
            name = _format_location(issue["loc"])
            return Failure(ErrorKind.MISSING_PARAMETER, message=f"Required parameter '{name}' is missing")

    for issue in parameter_issues:
        error_type = str(issue.get("type", ""))
        if _is_type_error(error_type):
            name = _format_location(issue["loc"])
            received = issue.get("input")
            expected = _expected_type(error_type)
            detail = FieldErrorDetail(
                field=name,
                message=f"type mismatch (value='{received}', expected={expected})",
            )
            return Failure(
                ErrorKind.TYPE_MISMATCH,
                message=f"Request parameter '{name}' has an invalid type (value='{received}', expected={expected})",
                field_errors=[detail],
            )

    return Failure(ErrorKind.VALIDATION_FAILED, field_errors=_validation_field_errors(issues))


def _classify_unreadable_body(exc: BodyUnreadableError) -> Failure:
    cause = exc.__cause__
    if cause is None:
        return Failure(ErrorKind.MISSING_PARAMETER, message="Request body is required")
    if isinstance(cause, (json.JSONDecodeError, TypeError)):
        return Failure(ErrorKind.INVALID_JSON)
    return Failure(ErrorKind.INVALID_REQUEST, message="Request body format is invalid")


def _classify_http_exception(exc: StarletteHTTPException) -> Failure:
    headers = dict(exc.headers) if exc.headers else None
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return Failure(ErrorKind.UNROUTED)
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        return Failure(ErrorKind.UNAUTHORIZED, headers=headers)
    if exc.status_code == status.HTTP_403_FORBIDDEN:
        return Failure(ErrorKind.FORBIDDEN)
    return Failure(ErrorKind.UNCLASSIFIED)


def classify_exception(exc: BaseException) -> Failure:
    """Map any raised exception onto exactly one failure kind."""
    if isinstance(exc, RequestValidationError):
        return _classify_validation_issues(exc.errors())
    if isinstance(exc, BodyUnreadableError):
        return _classify_unreadable_body(exc)
    if isinstance(exc, InvalidIdentifierError):
        details = [FieldErrorDetail(field=exc.field, message=exc.message)] if exc.field else None
        return Failure(exc.kind, message=exc.message, field_errors=details)
    if isinstance(exc, AppError):
        return Failure(exc.kind, message=exc.message, field_errors=exc.field_errors, headers=exc.headers)
    if isinstance(exc, StarletteHTTPException):
        return _classify_http_exception(exc)
    return Failure(ErrorKind.UNCLASSIFIED)


def _log_failure(exc: BaseException, failure: Failure, body: ErrorResponse) -> None:
    if failure.kind is ErrorKind.UNCLASSIFIED:
        logger.error("Unhandled %s", type(exc).__name__, exc_info=exc)
        return
    logger.warning("Request failed with %s %s: %s", body.code, body.error, body.message)


def dispatch(exc: BaseException) -> tuple[ErrorResponse, dict[str, str] | None]:
    """Translate an exception into an error body and optional headers.

    Never raises; anything that goes wrong while translating yields the
    generic internal-error body.
    """
    try:
        failure = classify_exception(exc)
        body = build_for_kind(failure.kind, failure.message, failure.field_errors)
        _log_failure(exc, failure, body)
        return body, failure.headers
    except Exception:
        logger.exception("Failed to translate %s into an error response", type(exc).__name__)
        return build_for_kind(ErrorKind.UNCLASSIFIED), None


def error_response_for(exc: BaseException) -> ErrorResponse:
    """Return only the error body for an exception."""
    body, _ = dispatch(exc)
    return body


async def handle_exception(_: Request, exc: Exception) -> JSONResponse:
    """Render any exception as the canonical error body."""
    body, headers = dispatch(exc)
    return to_json_response(body, headers)


def register_error_handlers(app: FastAPI) -> None:
    """Attach the shared error handler to a FastAPI app instance."""

    app.add_exception_handler(AppError, handle_exception)
    app.add_exception_handler(RequestValidationError, handle_exception)
    app.add_exception_handler(StarletteHTTPException, handle_exception)
    app.add_exception_handler(Exception, handle_exception)
