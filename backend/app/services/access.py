"""Caller identity checks shared by the entity services."""

from typing import Optional

from backend.app.core.errors import AuthenticationRequired, ValidationError
from backend.app.models.user import User
from backend.app.services.validation import is_valid_uuid


def require_user(user: Optional[User]) -> User:
    """Reject unauthenticated callers before any storage access."""
    if user is None or not getattr(user, "id", None):
        raise AuthenticationRequired()
    return user


def require_uuid(value: str, message: str = "Invalid UUID format") -> str:
    if not is_valid_uuid(value):
        raise ValidationError(message)
    return value
