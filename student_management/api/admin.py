"""Administrator-only student routes.

Identifiers on these routes are canonical UUID text.
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi import Depends
from fastapi import Response
from sqlalchemy.orm import Session

from student_management.core.identifiers import Identifier
from student_management.core.security import require_admin
from student_management.db.base import get_db_session
from student_management.schemas.error import ErrorResponse
from student_management.services.students import force_delete_student_service

router = APIRouter(
    prefix="/api/admin/students",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)


@router.delete("/{student_id}", status_code=204)
def force_delete_student_endpoint(
    student_id: str,
    session: Session = Depends(get_db_session),
) -> Response:
    """Physically delete a student and its courses."""
    raw_id = Identifier.from_uuid_string(student_id, field="studentId").raw
    force_delete_student_service(session, raw_id)
    return Response(status_code=204)
