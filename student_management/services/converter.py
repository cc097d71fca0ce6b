"""Conversion between student schemas and ORM entities.

Entities hold raw 16-byte identifiers; schemas carry them as URL-safe
base64 text.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from collections.abc import Sequence

from student_management.core.identifiers import Identifier
from student_management.core.identifiers import encode_to_base64
from student_management.core.identifiers import generate_new_identifier
from student_management.db.models.student import Student
from student_management.db.models.student import StudentCourse
from student_management.schemas.student import StudentCourseInput
from student_management.schemas.student import StudentCourseView
from student_management.schemas.student import StudentDetail
from student_management.schemas.student import StudentInput
from student_management.schemas.student import StudentPatchInput
from student_management.schemas.student import StudentView


def decode_id_or_new(text: str | None, *, field: str) -> bytes:
    """Decode a base64 identifier, minting a new one when the text is blank."""
    if text is None or not text.strip():
        return generate_new_identifier()
    return Identifier.from_base64(text, field=field).raw


def to_student_entity(dto: StudentInput, *, student_id: bytes | None = None) -> Student:
    """Build a new student entity; ``student_id`` wins over the DTO's id."""
    if student_id is None:
        student_id = decode_id_or_new(dto.student_id, field="student.studentId")
    student = Student(
        student_id=student_id,
        full_name=dto.full_name,
        furigana=dto.furigana,
        nickname=dto.nickname,
        email=dto.email,
        location=dto.location,
        age=dto.age,
        gender=dto.gender,
        remarks=dto.remarks,
        is_deleted=False,
    )
    if dto.deleted:
        student.soft_delete()
    return student


def apply_student_input(existing: Student, dto: StudentInput) -> Student:
    """Overwrite every mutable field of ``existing`` with the DTO values."""
    existing.full_name = dto.full_name
    existing.furigana = dto.furigana
    existing.nickname = dto.nickname
    existing.email = dto.email
    existing.location = dto.location
    existing.age = dto.age
    existing.gender = dto.gender
    existing.remarks = dto.remarks
    if dto.deleted is not None and dto.deleted != existing.is_deleted:
        if dto.deleted:
            existing.soft_delete()
        else:
            existing.restore()
    return existing


def merge_student(existing: Student, patch: StudentPatchInput) -> Student:
    """Copy only the fields the patch actually sets."""
    for name, value in patch.changes().items():
        setattr(existing, name, value)
    return existing


def to_course_entities(dtos: Iterable[StudentCourseInput], student_id: bytes) -> list[StudentCourse]:
    """Build course entities bound to ``student_id``."""
    return [
        StudentCourse(
            course_id=decode_id_or_new(dto.course_id, field="courses.courseId"),
            student_id=student_id,
            course_name=dto.course_name,
            start_date=dto.start_date,
            end_date=dto.end_date,
        )
        for dto in dtos
    ]


def to_student_view(student: Student) -> StudentView:
    return StudentView(
        student_id=encode_to_base64(student.student_id),
        full_name=student.full_name,
        furigana=student.furigana,
        nickname=student.nickname,
        email=student.email,
        location=student.location,
        age=student.age,
        gender=student.gender,
        remarks=student.remarks,
        deleted=bool(student.is_deleted),
        created_at=student.created_at,
        deleted_at=student.deleted_at,
    )


def to_course_view(course: StudentCourse) -> StudentCourseView:
    return StudentCourseView(
        course_id=encode_to_base64(course.course_id),
        course_name=course.course_name,
        start_date=course.start_date,
        end_date=course.end_date,
    )


def to_detail(student: Student, courses: Sequence[StudentCourse]) -> StudentDetail:
    return StudentDetail(
        student=to_student_view(student),
        courses=[to_course_view(course) for course in courses],
    )


def to_detail_list(students: Sequence[Student], courses: Iterable[StudentCourse]) -> list[StudentDetail]:
    """Pair each student with its own courses, preserving student order."""
    by_student: dict[bytes, list[StudentCourse]] = defaultdict(list)
    for course in courses:
        by_student[course.student_id].append(course)
    return [to_detail(student, by_student.get(student.student_id, [])) for student in students]
