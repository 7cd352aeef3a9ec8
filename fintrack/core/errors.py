# fintrack/core/errors.py
"""
Application error taxonomy.

Business code raises these; the handlers registered in ``fintrack.main``
turn them into ``{"success": false, "error": ...}`` responses.
"""
from typing import Optional


class AppError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidCredentials(AppError):
    status_code = 401
    default_message = "Invalid email/username or password"


class Unauthorized(AppError):
    status_code = 401
    default_message = "Unauthorized - please log in first"


class TokenExpired(AppError):
    status_code = 401
    default_message = "Token has expired, please log in again"


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid input"


class NotFound(AppError):
    status_code = 404

    def __init__(self, resource: str):
        self.resource = resource
        super().__init__(f"{resource} not found")


class Conflict(AppError):
    status_code = 409
    default_message = "Conflict"


class InternalError(AppError):
    """Failure not attributable to the caller. ``detail`` is logged, never returned."""
    status_code = 500

    def __init__(self, detail: str = ""):
        self.detail = detail
        super().__init__(self.default_message)
