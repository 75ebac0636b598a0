from typing import Any


class WorkdeskError(Exception):
    """Base exception for business rule violations."""

    status_code = 500

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.message, **self.extra}


class ValidationError(WorkdeskError):
    """Raised when input data is missing or invalid."""

    status_code = 400


class AuthenticationError(WorkdeskError):
    """Raised when credentials or tokens are invalid."""

    status_code = 401


class AuthorizationError(WorkdeskError):
    """Raised when a user lacks permission for an action."""

    status_code = 403


class NotFoundError(WorkdeskError):
    status_code = 404


class ConflictError(WorkdeskError):
    """Raised when an action would break a uniqueness rule (running task, open break, duplicate email)."""

    status_code = 409
