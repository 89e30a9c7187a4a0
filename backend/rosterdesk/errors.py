from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Optional


@dataclass(eq=False)
class DomainError(Exception):
    """Structured error raised by the roster services.

    The HTTP layer maps each subclass to one status code while keeping a
    stable machine-readable code for the admin UI.
    """

    message: str
    details: Optional[Any] = None

    code: ClassVar[str] = "DOMAIN_ERROR"
    status_code: ClassVar[int] = 400

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.code}: {self.message}"


class NotFoundError(DomainError):
    """Referenced row does not exist or belongs to another organization."""

    code = "NOT_FOUND"
    status_code = 404


class ConflictError(DomainError):
    """Write would break a contract rule or lost a race."""

    code = "CONFLICT"
    status_code = 409


class InvalidStateError(DomainError):
    """Operation is not allowed in the row's current lifecycle state."""

    code = "INVALID_STATE"
    status_code = 409


class ValidationError(DomainError):
    code = "VALIDATION_ERROR"
    status_code = 422
