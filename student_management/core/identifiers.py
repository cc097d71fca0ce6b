"""Identifier value type and its base64 / UUID text codecs.

An identifier is a 16-byte value in UUID binary layout. It travels as
URL-safe base64 without padding on the public student routes and as canonical
UUID text on the admin routes. Base64 alphabet failures and wrong decoded
lengths are reported with different ``IdentifierFormat`` tags.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
import re
import uuid

from student_management.core.errors import IdentifierFormat
from student_management.core.errors import InvalidIdentifierError

IDENTIFIER_LENGTH = 16

_BASE64_URL_RE = re.compile(r"[A-Za-z0-9_-]*={0,2}")
_UUID_TEXT_RE = re.compile(r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}")

INVALID_BASE64_MESSAGE = "Invalid ID format (Base64)"
INVALID_UUID_MESSAGE = "Invalid ID format (UUID)"


@dataclass(frozen=True)
class Identifier:
    """Immutable 16-byte identifier."""

    raw: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.raw, (bytes, bytearray)) or len(self.raw) != IDENTIFIER_LENGTH:
            raise InvalidIdentifierError(INVALID_UUID_MESSAGE, id_format=IdentifierFormat.UUID)
        object.__setattr__(self, "raw", bytes(self.raw))

    @classmethod
    def generate(cls) -> Identifier:
        return cls(uuid.uuid4().bytes)

    @classmethod
    def from_base64(cls, text: str | None, *, field: str | None = None) -> Identifier:
        """Decode base64 text that must yield exactly 16 bytes."""
        try:
            if text is None:
                raise InvalidIdentifierError(INVALID_BASE64_MESSAGE, id_format=IdentifierFormat.BASE64)
            return cls(_decode_base64(text))
        except InvalidIdentifierError as exc:
            raise exc.for_field(field) if field else exc

    @classmethod
    def from_uuid_string(cls, text: str | None, *, field: str | None = None) -> Identifier:
        """Parse canonical 8-4-4-4-12 UUID text."""
        if text is None or _UUID_TEXT_RE.fullmatch(text.strip()) is None:
            raise InvalidIdentifierError(INVALID_UUID_MESSAGE, id_format=IdentifierFormat.UUID, field=field)
        return cls(uuid.UUID(text.strip()).bytes)

    def to_base64(self) -> str:
        return base64.urlsafe_b64encode(self.raw).rstrip(b"=").decode("ascii")

    def to_uuid_string(self) -> str:
        return str(uuid.UUID(bytes=self.raw))

    def __str__(self) -> str:
        return self.to_base64()


def _decode_base64(text: str) -> bytes:
    if _BASE64_URL_RE.fullmatch(text) is None:
        raise InvalidIdentifierError(INVALID_BASE64_MESSAGE, id_format=IdentifierFormat.BASE64)

    unpadded = text.rstrip("=")
    if len(unpadded) % 4 == 1:
        raise InvalidIdentifierError(INVALID_BASE64_MESSAGE, id_format=IdentifierFormat.BASE64)

    padding = -len(unpadded) % 4
    if len(text) != len(unpadded) and len(text) != len(unpadded) + padding:
        raise InvalidIdentifierError(INVALID_BASE64_MESSAGE, id_format=IdentifierFormat.BASE64)

    try:
        raw = base64.urlsafe_b64decode(unpadded + "=" * padding)
    except (binascii.Error, ValueError) as exc:
        raise InvalidIdentifierError(INVALID_BASE64_MESSAGE, id_format=IdentifierFormat.BASE64) from exc

    # Non-zero trailing bits would give one value several spellings.
    if base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii") != unpadded:
        raise InvalidIdentifierError(INVALID_BASE64_MESSAGE, id_format=IdentifierFormat.BASE64)
    return raw


def encode_to_base64(raw: bytes | None) -> str | None:
    """Encode 16 raw bytes as URL-safe base64 without padding; ``None`` passes through."""
    if raw is None:
        return None
    return Identifier(raw).to_base64()


def decode_from_base64(text: str | None) -> bytes | None:
    """Decode URL-safe base64 without checking the decoded length; ``None`` passes through."""
    if text is None:
        return None
    return _decode_base64(text)


def decode_base64_strict_to_uuid_bytes(text: str | None) -> bytes:
    """Decode URL-safe base64 that must yield exactly 16 bytes."""
    return Identifier.from_base64(text).raw


def encode_uuid_string(raw: bytes | None) -> str:
    """Render 16 raw bytes as canonical lower-case UUID text."""
    return Identifier(raw).to_uuid_string()


def decode_uuid_string_or_throw(text: str | None) -> bytes:
    """Parse canonical UUID text into 16 raw bytes.

    ``None`` and blank text are rejected the same way as malformed text.
    """
    return Identifier.from_uuid_string(text).raw


def generate_new_identifier() -> bytes:
    return Identifier.generate().raw
