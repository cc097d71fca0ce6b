"""Service helpers for student API operations."""

from __future__ import annotations

import logging
from typing import NoReturn

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from student_management.core.errors import InvalidRequestError
from student_management.core.errors import ResourceNotFoundError
from student_management.core.errors import ValidationFailedError
from student_management.core.identifiers import encode_uuid_string
from student_management.db.models.student import Student
from student_management.db.models.student import StudentCourse
from student_management.db.repository.student_courses import delete_courses_by_student_id
from student_management.db.repository.student_courses import find_all_courses
from student_management.db.repository.student_courses import find_courses_by_student_id
from student_management.db.repository.student_courses import insert_course_if_not_exists
from student_management.db.repository.student_courses import insert_courses
from student_management.db.repository.students import find_student_by_id
from student_management.db.repository.students import force_delete_student
from student_management.db.repository.students import insert_student
from student_management.db.repository.students import search_students
from student_management.db.repository.students import update_student
from student_management.schemas.error import FieldErrorDetail
from student_management.schemas.student import StudentDetail
from student_management.schemas.student import StudentInput
from student_management.schemas.student import StudentPatchRequest
from student_management.services.converter import apply_student_input
from student_management.services.converter import merge_student
from student_management.services.converter import to_course_entities
from student_management.services.converter import to_detail_list

logger = logging.getLogger(__name__)

STUDENT_RESOURCE = "student"


# constraint name -> (request field, message, column as named in SQLite errors)
_CONSTRAINT_FIELDS = {
    "uq_students_email": ("student.email", "email address is already registered", "students.email"),
    "pk_students": ("student.studentId", "student id is already registered", "students.student_id"),
    "pk_student_courses": ("courses.courseId", "course id is already registered", "student_courses.course_id"),
}


def _violated_constraint(exc: IntegrityError) -> str | None:
    diag = getattr(exc.orig, "diag", None)
    name = getattr(diag, "constraint_name", None)
    if name:
        return name
    text = str(exc.orig)
    for constraint, (_, _, column) in _CONSTRAINT_FIELDS.items():
        if constraint in text or f"constraint failed: {column}" in text:
            return constraint
    return None


def _raise_constraint_violation(exc: IntegrityError) -> NoReturn:
    """Report known unique keys on their request field; re-raise anything else."""
    constraint = _violated_constraint(exc)
    if constraint not in _CONSTRAINT_FIELDS:
        raise exc
    field, message, _ = _CONSTRAINT_FIELDS[constraint]
    logger.warning("Rejected write violating %s", constraint)
    raise ValidationFailedError([FieldErrorDetail(field=field, message=message)]) from exc


def register_student_service(
    session: Session,
    student: Student,
    courses: list[StudentCourse],
) -> Student:
    """Persist a new student and its courses in one transaction."""
    try:
        insert_student(session, student)
        if courses:
            insert_courses(session, courses)
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        _raise_constraint_violation(exc)
    logger.info("Registered student %s", encode_uuid_string(student.student_id))
    return student


def list_students_service(
    session: Session,
    *,
    furigana: str | None = None,
    include_deleted: bool = False,
    deleted_only: bool = False,
) -> list[StudentDetail]:
    """List student details filtered by furigana and deletion state."""
    if include_deleted and deleted_only:
        raise InvalidRequestError(message="includeDeleted and deletedOnly cannot both be true")
    logger.debug(
        "Searching students furigana=%s include_deleted=%s deleted_only=%s",
        furigana,
        include_deleted,
        deleted_only,
    )
    students = search_students(
        session,
        furigana=furigana,
        include_deleted=include_deleted,
        deleted_only=deleted_only,
    )
    return to_detail_list(students, find_all_courses(session))


def get_student_service(session: Session, student_id: bytes) -> Student:
    """Fetch a student or raise not found."""
    key = encode_uuid_string(student_id)
    student = find_student_by_id(session, student_id)
    if student is None:
        raise ResourceNotFoundError(STUDENT_RESOURCE, key)
    return student


def list_student_courses_service(session: Session, student_id: bytes) -> list[StudentCourse]:
    return find_courses_by_student_id(session, student_id)


def update_student_with_courses_service(
    session: Session,
    student_id: bytes,
    payload: StudentInput,
    courses: list[StudentCourse],
) -> Student:
    """Replace a student's fields and its full course list."""
    student = get_student_service(session, student_id)
    try:
        apply_student_input(student, payload)
        update_student(session, student)
        delete_courses_by_student_id(session, student_id)
        if courses:
            insert_courses(session, courses)
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        _raise_constraint_violation(exc)
    return student


def partial_update_student_service(
    session: Session,
    student_id: bytes,
    patch: StudentPatchRequest,
) -> Student:
    """Apply set fields and append or replace courses."""
    student = get_student_service(session, student_id)
    try:
        if patch.student is not None:
            merge_student(student, patch.student)
        if patch.courses:
            new_courses = to_course_entities(patch.courses, student_id)
            if patch.append_courses:
                for course in new_courses:
                    insert_course_if_not_exists(session, course)
            else:
                delete_courses_by_student_id(session, student_id)
                insert_courses(session, new_courses)
        update_student(session, student)
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        _raise_constraint_violation(exc)
    return student


def soft_delete_student_service(session: Session, student_id: bytes) -> None:
    """Flag a student as deleted; already-deleted students are left as is."""
    student = get_student_service(session, student_id)
    if student.is_deleted:
        return
    student.soft_delete()
    update_student(session, student)
    session.commit()
    logger.info("Soft-deleted student %s", encode_uuid_string(student_id))


def restore_student_service(session: Session, student_id: bytes) -> None:
    """Clear the deleted flag; active students are left as is."""
    student = get_student_service(session, student_id)
    if not student.is_deleted:
        return
    student.restore()
    update_student(session, student)
    session.commit()
    logger.info("Restored student %s", encode_uuid_string(student_id))


def force_delete_student_service(session: Session, student_id: bytes) -> None:
    """Physically delete a student and its courses."""
    key = encode_uuid_string(student_id)
    delete_courses_by_student_id(session, student_id)
    deleted = force_delete_student(session, student_id)
    if deleted == 0:
        session.rollback()
        raise ResourceNotFoundError(STUDENT_RESOURCE, key)
    session.commit()
    logger.info("Force-deleted student %s", key)
