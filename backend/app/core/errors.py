"""Service error taxonomy and the uniform result envelope.

Service functions raise ``ServiceError`` subclasses internally and convert them
at their public boundary into a ``ServiceResult`` so callers never see a
storage-layer exception.
"""

import functools
import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

T = TypeVar("T")

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    error_type = "unknown"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    error_type = "validation"


class NotFoundError(ServiceError):
    error_type = "not_found"


class RelationshipError(ServiceError):
    error_type = "relationship"


class ConstraintViolation(ServiceError):
    error_type = "constraint"


class AuthenticationRequired(ServiceError):
    error_type = "authentication"

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class UnknownStorageError(ServiceError):
    error_type = "unknown"


@dataclass
class ServiceResult(Generic[T]):
    data: Optional[T] = None
    error: Optional[str] = None
    error_type: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, data: T) -> "ServiceResult[T]":
        return cls(data=data)

    @classmethod
    def failure(cls, exc: ServiceError) -> "ServiceResult[T]":
        return cls(error=exc.message, error_type=exc.error_type)


def is_unique_violation(exc: IntegrityError) -> bool:
    orig = getattr(exc, "orig", None)
    if getattr(orig, "pgcode", None) == "23505":
        return True
    return "unique" in str(orig).lower()


def is_foreign_key_violation(exc: IntegrityError) -> bool:
    orig = getattr(exc, "orig", None)
    if getattr(orig, "pgcode", None) == "23503":
        return True
    return "foreign key" in str(orig).lower()


def translate_integrity_error(
    exc: IntegrityError,
    unique_message: str | None = None,
    foreign_key_message: str | None = None,
) -> ServiceError:
    """Map a store constraint failure onto a human-readable error."""
    if unique_message and is_unique_violation(exc):
        return ConstraintViolation(unique_message)
    if foreign_key_message and is_foreign_key_violation(exc):
        return ConstraintViolation(foreign_key_message)
    return UnknownStorageError(str(getattr(exc, "orig", exc)))


def _rollback(args: tuple) -> None:
    # Services take the database session as their first argument.
    if args and isinstance(args[0], Session):
        args[0].rollback()


def service_boundary(action: str) -> Callable[[Callable[..., T]], Callable[..., ServiceResult]]:
    """Wrap a service function so it always returns a ``ServiceResult``.

    ``action`` completes the sentence "An unexpected error occurred while ...".
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., ServiceResult]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> ServiceResult:
            try:
                return ServiceResult.success(func(*args, **kwargs))
            except ServiceError as exc:
                return ServiceResult.failure(exc)
            except SQLAlchemyError as exc:
                logger.error("Storage error while %s: %s", action, exc)
                _rollback(args)
                message = str(getattr(exc, "orig", None) or exc)
                return ServiceResult.failure(UnknownStorageError(message))
            except Exception:
                logger.exception("Unexpected error while %s", action)
                return ServiceResult.failure(UnknownStorageError(f"An unexpected error occurred while {action}"))

        return wrapper

    return decorator
