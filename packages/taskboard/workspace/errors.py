"""Domain error taxonomy for the membership and invitation core."""

from __future__ import annotations

from enum import Enum
from typing import ClassVar, Optional

__all__ = [
    "ErrorKind",
    "DomainError",
    "NotFoundError",
    "UnauthorizedError",
    "ConflictError",
    "ExpiredError",
    "BusinessRuleViolationError",
    "ValidationError",
]


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    CONFLICT = "conflict"
    EXPIRED = "expired"
    BUSINESS_RULE_VIOLATION = "business_rule_violation"
    VALIDATION = "validation"


class DomainError(Exception):
    """Base class for recoverable domain failures.

    Every subclass pins a :class:`ErrorKind` so callers can branch on
    ``error.kind`` instead of the concrete type.
    """

    kind: ClassVar[ErrorKind]

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class NotFoundError(DomainError):
    kind = ErrorKind.NOT_FOUND

    def __init__(
        self,
        entity: str,
        entity_id: Optional[str] = None,
        message: Optional[str] = None,
    ):
        if message is None:
            if entity_id is None:
                message = f"{entity} not found"
            else:
                message = f"{entity} with ID '{entity_id}' was not found."
        super().__init__(message)
        self.entity = entity
        self.entity_id = entity_id


class UnauthorizedError(DomainError):
    kind = ErrorKind.UNAUTHORIZED


class ConflictError(DomainError):
    kind = ErrorKind.CONFLICT


class ExpiredError(DomainError):
    kind = ErrorKind.EXPIRED


class BusinessRuleViolationError(DomainError):
    kind = ErrorKind.BUSINESS_RULE_VIOLATION

    def __init__(self, message: str, rule: Optional[str] = None):
        if rule is not None:
            message = f"Business rule '{rule}' violated: {message}"
        super().__init__(message)
        self.rule = rule


class ValidationError(DomainError):
    kind = ErrorKind.VALIDATION
