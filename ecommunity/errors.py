"""Custom exception classes for the application.

Services raise these; `error_handlers` turns them into JSON responses with
the class's HTTP status.
"""


class AppError(Exception):
    """Base application error class."""

    status_code = 400
    default_message = "Something went wrong."

    def __init__(self, message=None, status_code=None):
        self.message = message or self.default_message
        super().__init__(self.message)
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AppError):
    """Raised when user input fails validation."""

    default_message = "Validation failed."


class DuplicateResourceError(AppError):
    """Raised when a unique name or address is already in use."""

    default_message = "Resource already exists."


class AuthenticationError(AppError):
    """Raised when a request carries no valid bearer token."""

    status_code = 401
    default_message = "Authentication required."


class AccessDenied(AppError):
    """Raised when a user may not act on a resource."""

    status_code = 403
    default_message = "Action forbidden."


class NotFoundError(AppError):
    status_code = 404
    default_message = "Resource not found."
