"""Domain error taxonomy.

Services raise these; ``app.main`` renders them into the standard
``ErrorResponse`` envelope with the status code carried by each class.
"""

from typing import Optional


class AppError(Exception):
    """Base class for every caller-visible failure"""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class AuthenticationRequiredError(AppError):
    """No valid principal attached to the request"""

    status_code = 401
    code = "AUTHENTICATION_REQUIRED"


class PermissionDeniedError(AppError):
    """Principal resolved but lacks rights; message names the failed rule"""

    status_code = 403
    code = "PERMISSION_DENIED"


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"


class ValidationError(AppError):
    """Malformed or missing input, always user-correctable"""

    status_code = 400
    code = "VALIDATION_ERROR"


class ConflictError(AppError):
    """Uniqueness violation or referential guard; message names the blocker"""

    status_code = 409
    code = "CONFLICT"


class StorageError(AppError):
    """Transport or transaction failure. Never carries internals to clients."""

    status_code = 500
    code = "STORAGE_FAILURE"

    def __init__(self, message: str = "Storage operation failed", code: Optional[str] = None):
        super().__init__(message, code)
