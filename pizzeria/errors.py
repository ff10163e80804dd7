"""Error taxonomy shared by the storage helpers and the HTTP layer.

Each error carries the HTTP status it maps to, so handlers in ``main`` only
need a single exception handler. ``ValidationError`` is also a ``ValueError``
so pydantic validators can raise it directly.
"""


class PizzeriaError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(PizzeriaError, ValueError):
    status_code = 400
    default_message = "Invalid request data"


class NotFoundError(PizzeriaError, LookupError):
    status_code = 404
    default_message = "Not found"


class AuthorizationError(PizzeriaError):
    status_code = 403
    default_message = "Access denied"


class UnauthenticatedError(PizzeriaError):
    status_code = 401
    default_message = "Unauthorized"


class PersistenceError(PizzeriaError):
    status_code = 500
    default_message = "Failed to save changes"
