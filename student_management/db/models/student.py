"""SQLAlchemy models for students and their course enrollments."""

from __future__ import annotations

from datetime import date
from datetime import datetime
from datetime import timezone

from sqlalchemy import Boolean
from sqlalchemy import CheckConstraint
from sqlalchemy import Date
from sqlalchemy import DateTime
from sqlalchemy import ForeignKey
from sqlalchemy import Index
from sqlalchemy import Integer
from sqlalchemy import LargeBinary
from sqlalchemy import PrimaryKeyConstraint
from sqlalchemy import String
from sqlalchemy import Text
from sqlalchemy import UniqueConstraint
from sqlalchemy import false
from sqlalchemy import func
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.orm import Mapped
from sqlalchemy.orm import mapped_column
from sqlalchemy.orm import relationship

from student_management.core.identifiers import IDENTIFIER_LENGTH
from student_management.core.identifiers import generate_new_identifier


class Base(DeclarativeBase):
    """Declarative base for ORM models."""


class Student(Base):
    """Student master record; ``student_id`` holds the raw 16-byte identifier."""

    __tablename__ = "students"
    __table_args__ = (
        PrimaryKeyConstraint("student_id", name="pk_students"),
        UniqueConstraint("email", name="uq_students_email"),
        CheckConstraint("age >= 0", name="ck_students_age"),
    )

    student_id: Mapped[bytes] = mapped_column(
        LargeBinary(IDENTIFIER_LENGTH),
        primary_key=True,
        default=generate_new_identifier,
    )
    full_name: Mapped[str] = mapped_column(String(100), nullable=False)
    furigana: Mapped[str] = mapped_column(String(100), nullable=False)
    nickname: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    location: Mapped[str | None] = mapped_column(String(100), nullable=True)
    age: Mapped[int | None] = mapped_column(Integer, nullable=True)
    gender: Mapped[str] = mapped_column(String(20), nullable=False)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    is_deleted: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )

    courses: Mapped[list["StudentCourse"]] = relationship(
        "StudentCourse",
        back_populates="student",
        order_by="StudentCourse.start_date",
    )

    def soft_delete(self) -> None:
        """Flag the student as deleted and stamp the deletion time."""
        self.is_deleted = True
        self.deleted_at = datetime.now(timezone.utc)

    def restore(self) -> None:
        """Clear the deletion flag and timestamp."""
        self.is_deleted = False
        self.deleted_at = None


class StudentCourse(Base):
    """Course enrollment owned by a student."""

    __tablename__ = "student_courses"
    __table_args__ = (
        PrimaryKeyConstraint("course_id", name="pk_student_courses"),
        Index("ix_student_courses_student_id", "student_id"),
    )

    course_id: Mapped[bytes] = mapped_column(
        LargeBinary(IDENTIFIER_LENGTH),
        primary_key=True,
        default=generate_new_identifier,
    )
    student_id: Mapped[bytes] = mapped_column(
        LargeBinary(IDENTIFIER_LENGTH),
        ForeignKey("students.student_id", name="fk_student_courses_student_id_students", ondelete="RESTRICT"),
        nullable=False,
    )
    course_name: Mapped[str] = mapped_column(String(255), nullable=False)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    student: Mapped[Student] = relationship("Student", back_populates="courses")
