"""Repository primitives for student course entities."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import delete
from sqlalchemy import select
from sqlalchemy.orm import Session

from student_management.db.models.student import StudentCourse


def find_courses_by_student_id(session: Session, student_id: bytes) -> list[StudentCourse]:
    """List the courses of one student."""
    stmt = (
        select(StudentCourse)
        .where(StudentCourse.student_id == student_id)
        .order_by(StudentCourse.start_date.asc(), StudentCourse.course_name.asc())
    )
    return list(session.scalars(stmt))


def find_all_courses(session: Session) -> list[StudentCourse]:
    """List every course row."""
    stmt = select(StudentCourse).order_by(StudentCourse.start_date.asc(), StudentCourse.course_name.asc())
    return list(session.scalars(stmt))


def insert_courses(session: Session, courses: Iterable[StudentCourse]) -> list[StudentCourse]:
    """Persist course rows."""
    rows = list(courses)
    session.add_all(rows)
    session.flush()
    return rows


def insert_course_if_not_exists(session: Session, course: StudentCourse) -> bool:
    """Insert a course unless a row with the same id already exists."""
    if session.get(StudentCourse, course.course_id) is not None:
        return False
    session.add(course)
    session.flush()
    return True


def delete_courses_by_student_id(session: Session, student_id: bytes) -> int:
    """Delete all courses of a student; returns the number of rows removed."""
    result = session.execute(delete(StudentCourse).where(StudentCourse.student_id == student_id))
    return result.rowcount or 0
