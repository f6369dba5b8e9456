class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is malformed or required configuration is missing."""


class PolicyViolation(DomainError):
    """Raised when an action is well-formed but attendance policy forbids it."""


class DuplicateRecordError(PolicyViolation):
    """Raised when an attendance day already has a record."""


class NotFoundError(DomainError):
    """Raised when a required employee, record or admin config does not exist."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""
