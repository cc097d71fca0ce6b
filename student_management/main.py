"""FastAPI application entrypoint for the student management API."""

import logging

from fastapi import FastAPI

from student_management.api.admin import router as admin_router
from student_management.api.students import router as students_router
from student_management.core.config import get_settings
from student_management.core.errors import register_error_handlers
from student_management.core.logging import configure_logging
from student_management.db import models as _models  # noqa: F401

settings = get_settings()
configure_logging(settings.log_level)
logging.getLogger(__name__).info("Starting with settings=%s", settings.safe_for_logging())

app = FastAPI(title="Student Management")
register_error_handlers(app)
app.include_router(students_router)
app.include_router(admin_router)


@app.get("/health")
def health() -> dict[str, str]:
    """Health check stub endpoint for service readiness."""
    return {"status": "ok"}
