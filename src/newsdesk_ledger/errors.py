"""Error taxonomy for ledger operations.

Every error carries a short public message that is safe to return to the
caller and a machine-readable code. Internal detail stays in the logs.
"""

from __future__ import annotations

from uuid import UUID


class LedgerError(Exception):
    """Base class for expected, caller-facing failures."""

    code = "OPERATION_FAILED"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class UnauthorizedError(LedgerError):
    """No identity is attached to the call."""

    code = "UNAUTHORIZED"

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class ForbiddenError(LedgerError):
    """Identity present but its role is not allowed to do this."""

    code = "FORBIDDEN"

    def __init__(self, message: str = "Forbidden", role: str | None = None):
        self.role = role
        super().__init__(message)


class NotFoundError(LedgerError):
    """Referenced row does not exist."""

    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: object):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found")


class InvalidIdentifierError(LedgerError):
    """Identifier is malformed and could never match a row."""

    code = "INVALID_IDENTIFIER"

    def __init__(self, value: object):
        self.value = value
        super().__init__("Invalid identifier")


class ValidationError(LedgerError):
    """Input values are rejected before touching the datastore."""

    code = "VALIDATION_ERROR"


class OperationFailedError(LedgerError):
    """Datastore failure reported with a generic message."""


def parse_identifier(value: str | UUID) -> UUID:
    """Parse a row identifier, raising InvalidIdentifierError if malformed."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        raise InvalidIdentifierError(value) from None
