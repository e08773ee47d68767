"""
Domain exceptions raised by the services layer.

Each error carries the HTTP status it is reported with; the API layer turns
them into JSON responses in one place (``tasktracker.api.errors``).
"""

from fastapi import status


class AppError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequestError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"


class InvalidSessionError(AuthenticationError):
    default_message = "Invalid session token"


class SessionExpiredError(AuthenticationError):
    default_message = "Session expired"


class InvalidCredentialsError(AuthenticationError):
    default_message = "Invalid email or password"


class InactiveAccountError(AuthenticationError):
    # Authenticated identity, but the account may not be used
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Your account is inactive"


class PermissionDeniedError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not authorized"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"
