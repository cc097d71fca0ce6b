"""Repository primitives for student entities."""

from __future__ import annotations

from sqlalchemy import delete
from sqlalchemy import select
from sqlalchemy.orm import Session

from student_management.db.models.student import Student


def insert_student(session: Session, student: Student) -> Student:
    """Persist a new student row and return it with server defaults loaded."""
    session.add(student)
    session.flush()
    session.refresh(student)
    return student


def find_student_by_id(session: Session, student_id: bytes) -> Student | None:
    """Fetch a student by raw identifier, deleted or not."""
    return session.get(Student, student_id)


def search_students(
    session: Session,
    *,
    furigana: str | None = None,
    include_deleted: bool = False,
    deleted_only: bool = False,
) -> list[Student]:
    """List students filtered by furigana substring and deletion state."""
    stmt = select(Student)
    if furigana:
        stmt = stmt.where(Student.furigana.contains(furigana))
    if deleted_only:
        stmt = stmt.where(Student.is_deleted.is_(True))
    elif not include_deleted:
        stmt = stmt.where(Student.is_deleted.is_(False))
    stmt = stmt.order_by(Student.created_at.asc(), Student.furigana.asc())
    return list(session.scalars(stmt))


def update_student(session: Session, student: Student) -> Student:
    """Flush pending changes on a tracked student row."""
    session.flush()
    session.refresh(student)
    return student


def force_delete_student(session: Session, student_id: bytes) -> int:
    """Physically delete a student row; returns the number of rows removed."""
    result = session.execute(delete(Student).where(Student.student_id == student_id))
    return result.rowcount or 0
