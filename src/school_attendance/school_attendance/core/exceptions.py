class DomainError(Exception):
    """Base exception for business rule violations."""

    http_status = 400


class ValidationError(DomainError):
    """Raised when input data is missing, malformed or violates domain rules."""

    http_status = 400


class NotFoundError(DomainError):
    """Raised when a referenced class, student or teacher does not exist."""

    http_status = 404


class ConflictError(DomainError):
    """Raised when a uniqueness rule (grade level, email, roll number) would be broken."""

    http_status = 409


class EditWindowExpiredError(DomainError):
    """Raised when correcting attendance older than the edit cutoff."""

    http_status = 403


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid or the actor is missing."""

    http_status = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    http_status = 403
