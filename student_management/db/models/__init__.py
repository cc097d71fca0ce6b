"""Model module imports for SQLAlchemy relationship registration."""

from student_management.db.models.student import Base
from student_management.db.models.student import Student
from student_management.db.models.student import StudentCourse

__all__ = [
    "Base",
    "Student",
    "StudentCourse",
]
