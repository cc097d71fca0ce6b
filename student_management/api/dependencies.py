"""Request dependencies shared by student routes."""

from __future__ import annotations

import json
from typing import Any
from typing import TypeVar

from fastapi import Request
from pydantic import BaseModel
from pydantic import ValidationError

from student_management.core.errors import BodyUnreadableError
from student_management.core.errors import EmptyObjectError
from student_management.core.errors import ValidationFailedError

ModelT = TypeVar("ModelT", bound=BaseModel)


async def read_json_object(request: Request) -> dict[str, Any]:
    """Read the raw body as a non-empty JSON object.

    An absent or blank body, malformed JSON, a non-object document, and ``{}``
    are each rejected with their own error before any model validation runs.
    """
    raw = await request.body()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise BodyUnreadableError() from exc

    if not text.strip():
        raise BodyUnreadableError()

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise BodyUnreadableError() from exc

    if not isinstance(payload, dict):
        raise BodyUnreadableError() from TypeError(f"expected a JSON object, got {type(payload).__name__}")
    if not payload:
        raise EmptyObjectError()
    return payload


def validate_body(model: type[ModelT], body: dict[str, Any]) -> ModelT:
    """Validate a raw JSON object against a request model."""
    try:
        return model.model_validate(body)
    except ValidationError as exc:
        raise ValidationFailedError.from_issues(exc.errors()) from exc
