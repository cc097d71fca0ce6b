"""HTTP Basic authentication for administrator routes."""

from __future__ import annotations

import logging
import secrets

from fastapi import Depends
from fastapi.security import HTTPBasic
from fastapi.security import HTTPBasicCredentials

from student_management.core.config import Settings
from student_management.core.config import get_settings
from student_management.core.errors import ForbiddenError
from student_management.core.errors import UnauthorizedError

logger = logging.getLogger(__name__)

ROLE_ADMIN = "admin"
ROLE_USER = "user"

basic_auth = HTTPBasic(auto_error=False)


def _matches(given: str, expected: str) -> bool:
    return secrets.compare_digest(given.encode("utf-8"), expected.encode("utf-8"))


def authenticate(credentials: HTTPBasicCredentials, settings: Settings) -> str | None:
    """Return the role of the account the credentials belong to, if any."""
    accounts = (
        (settings.admin_username, settings.admin_password, ROLE_ADMIN),
        (settings.user_username, settings.user_password, ROLE_USER),
    )
    for username, password, role in accounts:
        if _matches(credentials.username, username) and _matches(credentials.password, password):
            return role
    return None


def require_admin(
    credentials: HTTPBasicCredentials | None = Depends(basic_auth),
    settings: Settings = Depends(get_settings),
) -> str:
    """Allow only authenticated administrators; returns the username."""
    if credentials is None:
        raise UnauthorizedError()
    role = authenticate(credentials, settings)
    if role is None:
        logger.warning("Rejected credentials for user=%s", credentials.username)
        raise UnauthorizedError(message="Authentication failed; login is required")
    if role != ROLE_ADMIN:
        raise ForbiddenError()
    return credentials.username
