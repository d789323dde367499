from enum import Enum


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    REFERENTIAL_VIOLATION = "referential_violation"
    BUSINESS_RULE_VIOLATION = "business_rule_violation"
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    UNAVAILABLE = "unavailable"
    INTERNAL = "internal"


class RepositoryError(Exception):
    """Base repository error."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class RepositoryUnavailableError(RepositoryError):
    """Raised when the database is unavailable or not configured."""

    kind = ErrorKind.UNAVAILABLE


class RepositoryNotFoundError(RepositoryError):
    """Raised when the requested entity does not exist."""

    kind = ErrorKind.NOT_FOUND


class RepositoryConflictError(RepositoryError):
    """Raised when a write would duplicate a unique value."""

    kind = ErrorKind.CONFLICT


class RepositoryReferenceError(RepositoryError):
    """Raised when a referenced parent row does not exist."""

    kind = ErrorKind.REFERENTIAL_VIOLATION


class RepositoryBusinessRuleError(RepositoryError):
    """Raised when a request is well-formed but not allowed in the current state."""

    kind = ErrorKind.BUSINESS_RULE_VIOLATION


class RepositoryAuthenticationError(RepositoryError):
    """Raised when supplied credentials do not match a stored user."""

    kind = ErrorKind.UNAUTHENTICATED


class RepositoryForbiddenError(RepositoryError):
    """Raised when an authenticated account may not perform the action."""

    kind = ErrorKind.FORBIDDEN
