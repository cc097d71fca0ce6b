"""Unit tests for canonical error body assembly."""

from __future__ import annotations

import json

import pytest

from student_management.core.error_response import build_error_response
from student_management.core.error_response import build_for_kind
from student_management.core.error_response import looks_like_error_code
from student_management.core.error_response import to_json_response
from student_management.core.error_taxonomy import ErrorKind
from student_management.schemas.error import FieldErrorDetail


def _field_errors() -> list[FieldErrorDetail]:
    return [
        FieldErrorDetail(field="student.email", message="email address format is invalid"),
        FieldErrorDetail(field="student.fullName", message="Field required"),
    ]


@pytest.mark.parametrize(
    ("value", "expected"),
    [("E001", True), ("E999", True), ("E01", False), ("e001", False), ("VALIDATION_FAILED", False), (None, False)],
)
def test_error_code_shape(value: str | None, expected: bool) -> None:
    assert looks_like_error_code(value) is expected


def test_canonical_argument_order_builds_expected_body() -> None:
    body = build_error_response(400, "VALIDATION_FAILED", "E001", "Request validation failed")

    assert body.model_dump(exclude_none=True) == {
        "status": 400,
        "code": "E001",
        "error": "VALIDATION_FAILED",
        "message": "Request validation failed",
    }


def test_swapped_label_and_code_are_corrected() -> None:
    canonical = build_error_response(400, "VALIDATION_FAILED", "E001", "bad input", _field_errors())
    swapped = build_error_response(400, "E001", "VALIDATION_FAILED", "bad input", _field_errors())

    assert swapped == canonical
    assert swapped.code == "E001"
    assert swapped.error == "VALIDATION_FAILED"


def test_missing_error_code_is_rejected() -> None:
    with pytest.raises(ValueError):
        build_error_response(400, "VALIDATION_FAILED", "NOT_A_CODE", "bad input")


def test_errors_and_details_alias_the_same_content() -> None:
    body = build_error_response(400, "VALIDATION_FAILED", "E001", "bad input", _field_errors())

    assert body.errors == body.details
    assert [item.field for item in body.errors] == ["student.email", "student.fullName"]


@pytest.mark.parametrize("field_errors", [None, []])
def test_no_field_errors_omits_both_alias_keys(field_errors: list[FieldErrorDetail] | None) -> None:
    response = to_json_response(build_error_response(404, "NOT_FOUND", "E404", "gone", field_errors))

    payload = json.loads(response.body)
    assert "errors" not in payload
    assert "details" not in payload
    assert response.status_code == 404


def test_serialized_body_carries_both_alias_keys() -> None:
    response = to_json_response(build_for_kind(ErrorKind.VALIDATION_FAILED, field_errors=_field_errors()))

    payload = json.loads(response.body)
    assert payload["errors"] == payload["details"]
    assert payload["errors"][0] == {"field": "student.email", "message": "email address format is invalid"}
    assert set(payload) == {"status", "code", "error", "message", "errors", "details"}


def test_kind_defaults_message_and_keeps_explicit_one() -> None:
    assert build_for_kind(ErrorKind.NOT_FOUND).message == "The requested resource was not found"
    assert build_for_kind(ErrorKind.NOT_FOUND, "student not found: x").message == "student not found: x"


def test_headers_are_forwarded() -> None:
    response = to_json_response(build_for_kind(ErrorKind.UNAUTHORIZED), {"WWW-Authenticate": "Basic"})

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Basic"


def test_swapped_empty_object_arguments_serialize_identically() -> None:
    canonical = to_json_response(build_error_response(400, "EMPTY_OBJECT", "E003", "m"))
    swapped = to_json_response(build_error_response(400, "E003", "EMPTY_OBJECT", "m"))

    assert swapped.body == canonical.body
    assert json.loads(swapped.body)["code"] == "E003"
    assert json.loads(swapped.body)["error"] == "EMPTY_OBJECT"
