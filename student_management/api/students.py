"""Student API routes.

Student and course identifiers are URL-safe base64 strings on these routes.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from fastapi import Depends
from fastapi import Query
from fastapi import Response
from sqlalchemy.orm import Session

from student_management.api.dependencies import read_json_object
from student_management.api.dependencies import validate_body
from student_management.core.errors import EmptyObjectError
from student_management.core.errors import ValidationFailedError
from student_management.core.identifiers import Identifier
from student_management.db.base import get_db_session
from student_management.schemas.error import ErrorResponse
from student_management.schemas.error import FieldErrorDetail
from student_management.schemas.student import StudentDetail
from student_management.schemas.student import StudentListResponse
from student_management.schemas.student import StudentPatchRequest
from student_management.schemas.student import StudentRegistrationRequest
from student_management.services.converter import to_course_entities
from student_management.services.converter import to_detail
from student_management.services.converter import to_student_entity
from student_management.services.students import get_student_service
from student_management.services.students import list_student_courses_service
from student_management.services.students import list_students_service
from student_management.services.students import partial_update_student_service
from student_management.services.students import register_student_service
from student_management.services.students import restore_student_service
from student_management.services.students import soft_delete_student_service
from student_management.services.students import update_student_with_courses_service

STUDENT_ID_FIELD = "studentId"

router = APIRouter(
    prefix="/api/students",
    tags=["students"],
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)


def _decode_student_id(student_id: str) -> bytes:
    return Identifier.from_base64(student_id, field=STUDENT_ID_FIELD).raw


@router.post("", response_model=StudentDetail, status_code=201)
def register_student_endpoint(
    payload: StudentRegistrationRequest,
    session: Session = Depends(get_db_session),
) -> StudentDetail:
    """Register a student with its courses."""
    student = to_student_entity(payload.student)
    if payload.deleted and not student.is_deleted:
        student.soft_delete()
    courses = to_course_entities(payload.courses, student.student_id)
    register_student_service(session, student, courses)
    return to_detail(student, courses)


@router.get("", response_model=StudentListResponse)
def list_students_endpoint(
    furigana: str | None = None,
    include_deleted: bool = Query(default=False, alias="includeDeleted"),
    deleted_only: bool = Query(default=False, alias="deletedOnly"),
    session: Session = Depends(get_db_session),
) -> StudentListResponse:
    """List students with optional furigana and deletion-state filters."""
    items = list_students_service(
        session,
        furigana=furigana,
        include_deleted=include_deleted,
        deleted_only=deleted_only,
    )
    return StudentListResponse(items=items)


@router.get("/{student_id}", response_model=StudentDetail)
def get_student_endpoint(
    student_id: str,
    session: Session = Depends(get_db_session),
) -> StudentDetail:
    """Get a single student with its courses."""
    raw_id = _decode_student_id(student_id)
    student = get_student_service(session, raw_id)
    return to_detail(student, list_student_courses_service(session, raw_id))


@router.put("/{student_id}", response_model=StudentDetail)
def update_student_endpoint(
    student_id: str,
    body: dict[str, Any] = Depends(read_json_object),
    session: Session = Depends(get_db_session),
) -> StudentDetail:
    """Replace a student's fields and courses."""
    payload = validate_body(StudentRegistrationRequest, body)
    raw_id = _decode_student_id(student_id)
    courses = to_course_entities(payload.courses, raw_id)
    student = update_student_with_courses_service(session, raw_id, payload.student, courses)
    return to_detail(student, list_student_courses_service(session, raw_id))


@router.patch("/{student_id}", response_model=StudentDetail)
def partial_update_student_endpoint(
    student_id: str,
    body: dict[str, Any] = Depends(read_json_object),
    session: Session = Depends(get_db_session),
) -> StudentDetail:
    """Update only the supplied fields; courses are appended or replaced."""
    if "student" in body and body["student"] is None:
        raise ValidationFailedError([FieldErrorDetail(field="student", message="student must not be null")])
    raw_id = _decode_student_id(student_id)
    patch = validate_body(StudentPatchRequest, body)
    if patch.is_patch_empty():
        raise EmptyObjectError()
    student = partial_update_student_service(session, raw_id, patch)
    return to_detail(student, list_student_courses_service(session, raw_id))


@router.delete("/{student_id}", status_code=204)
def delete_student_endpoint(
    student_id: str,
    session: Session = Depends(get_db_session),
) -> Response:
    """Soft-delete a student."""
    soft_delete_student_service(session, _decode_student_id(student_id))
    return Response(status_code=204)


@router.patch("/{student_id}/restore", status_code=204)
def restore_student_endpoint(
    student_id: str,
    session: Session = Depends(get_db_session),
) -> Response:
    """Restore a soft-deleted student."""
    restore_student_service(session, _decode_student_id(student_id))
    return Response(status_code=204)
