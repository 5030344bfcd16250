"""Shared domain error messages and error types."""

from typing import Any, Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling. ``code`` is the reason
    reported when the error is recorded as an import issue.
    """

    code = "ERROR"


class ParseError(DomainError):
    """A statement row could not be turned into an entry."""

    code = "MALFORMED_ROW"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        if code is not None:
            self.code = code


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""

    code = "VALIDATION_FAILED"


class MissingReferenceError(ValidationError):
    """A command references an entity that does not exist."""

    code = "NOT_FOUND"

    def __init__(self, entity_kind: str, entity_id: Any):
        super().__init__(entity_not_found(entity_kind, entity_id))
        self.entity_kind = entity_kind
        self.entity_id = entity_id


class InvalidAllocationError(ValidationError):
    """Responsibility allocations violate the sum-to-100 invariant."""

    code = "INVALID_ALLOCATION"


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""

    code = "NOT_FOUND"

    def __init__(self, entity_kind: str, entity_id: Any):
        super().__init__(entity_not_found(entity_kind, entity_id))
        self.entity_kind = entity_kind
        self.entity_id = entity_id


def entity_not_found(entity_kind: str, entity_id: Any) -> str:
    """Return message for a missing entity of the given kind."""
    return f"{entity_kind} {entity_id} not found"


def allocation_sum_invalid(total: Any) -> str:
    """Return message for allocations that do not add up to 100."""
    return f"Responsibility percentages must sum to 100, got {total}"


def duplicate_responsible(responsible_id: int) -> str:
    """Return message for a responsible listed more than once."""
    return f"Responsible {responsible_id} is allocated more than once"


def column_not_in_header(role: str, column: str) -> str:
    """Return message for a configured column missing from the CSV header."""
    return f"Required {role} column '{column}' not found in CSV header"


def too_many_decimals(label: str, value: Any) -> str:
    """Return message for a value that cannot be stored at two decimal places."""
    return f"{label} must have at most 2 decimal places, got {value}"
