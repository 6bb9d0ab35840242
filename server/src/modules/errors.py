"""Error taxonomy shared by the handlers.

Each exception carries the HTTP status it maps to; ``main.py`` turns them
into ``{"error": message}`` JSON bodies.
"""


class ApiError(Exception):
    status_code = 500
    message = "Internal error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class ValidationError(ApiError):
    status_code = 400
    message = "Invalid input"


class InvalidParameter(ValidationError):
    message = "Invalid parameter"


class NotFound(ApiError):
    status_code = 404
    message = "Not found"


class AuthError(ApiError):
    status_code = 401
    message = "Not authenticated"


class TokenMissing(AuthError):
    message = "Authentication token missing"


class TokenExpired(AuthError):
    message = "Session expired, please log in again"


class TokenInvalid(AuthError):
    message = "Invalid token"


class InvalidCredentials(AuthError):
    message = "Invalid credentials"


class InternalError(ApiError):
    message = "System error"


class DuplicateUser(InternalError):
    pass
