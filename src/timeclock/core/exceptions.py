class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when a clock action or manual workday is rejected."""


class NotFoundError(DomainError):
    """Raised when a requested workday or employee record does not exist."""


class ConflictError(DomainError):
    """Raised by storage when a write violates a uniqueness constraint."""
