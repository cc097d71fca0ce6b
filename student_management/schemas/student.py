"""Pydantic schemas for student API payloads.

Identifiers are URL-safe base64 strings on the wire; field names are
camelCase.
"""

from __future__ import annotations

from datetime import date
from datetime import datetime
import re
from typing import Annotated

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import StringConstraints
from pydantic import field_validator
from pydantic.alias_generators import to_camel

_EMAIL_RE = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")

NonBlank = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]


def _check_email(value: str | None) -> str | None:
    if value is not None and _EMAIL_RE.fullmatch(value) is None:
        raise ValueError("email address format is invalid")
    return value


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StudentInput(CamelModel):
    """Student fields accepted on create and full update."""

    student_id: str | None = None
    full_name: Name
    furigana: NonBlank
    nickname: NonBlank
    email: NonBlank
    location: str | None = None
    age: int | None = Field(default=None, ge=0)
    gender: NonBlank
    remarks: str | None = None
    deleted: bool | None = None

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, value: str | None) -> str | None:
        return _check_email(value)


class StudentPatchInput(CamelModel):
    """Student fields accepted on partial update; unset fields are kept."""

    student_id: str | None = None
    full_name: Name | None = None
    furigana: NonBlank | None = None
    nickname: NonBlank | None = None
    email: NonBlank | None = None
    location: str | None = None
    age: int | None = Field(default=None, ge=0)
    gender: NonBlank | None = None
    remarks: str | None = None

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, value: str | None) -> str | None:
        return _check_email(value)

    def changes(self) -> dict[str, object]:
        """Return the fields that carry a value, excluding the identifier."""
        return self.model_dump(exclude_none=True, exclude={"student_id"})


class StudentCourseInput(CamelModel):
    """Course enrollment fields; a missing ``courseId`` mints a new one."""

    course_id: str | None = None
    course_name: NonBlank
    start_date: date | None = None
    end_date: date | None = None


class StudentRegistrationRequest(CamelModel):
    """Student plus course list for create and full update."""

    student: StudentInput
    courses: list[StudentCourseInput] = Field(default_factory=list)
    deleted: bool = False


class StudentPatchRequest(CamelModel):
    """Partial update payload."""

    student: StudentPatchInput | None = None
    courses: list[StudentCourseInput] | None = None
    append_courses: bool | None = None

    def is_patch_empty(self) -> bool:
        """Return True when the payload would change nothing."""
        no_student = self.student is None or not self.student.changes()
        no_courses = not self.courses
        return no_student and no_courses


class StudentView(CamelModel):
    """Student response payload."""

    student_id: str
    full_name: str
    furigana: str
    nickname: str | None = None
    email: str
    location: str | None = None
    age: int | None = None
    gender: str
    remarks: str | None = None
    deleted: bool
    created_at: datetime | None = None
    deleted_at: datetime | None = None


class StudentCourseView(CamelModel):
    """Course response payload."""

    course_id: str
    course_name: str
    start_date: date | None = None
    end_date: date | None = None


class StudentDetail(CamelModel):
    """Student with its courses."""

    student: StudentView
    courses: list[StudentCourseView]


class StudentListResponse(CamelModel):
    """List response envelope for student details."""

    items: list[StudentDetail]
