"""Error taxonomy shared by services and routes.

Services raise these; a single exception handler in main.py turns them
into `{"error": message}` responses with the matching status code.
"""


class PortalError(Exception):
    """Base class for every error the API reports to clients."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(PortalError):
    """Malformed or missing input, or an invalid enum value."""

    status_code = 400
    default_message = "Invalid request"


class AuthenticationError(PortalError):
    """Missing/invalid/expired token or bad credentials."""

    status_code = 401
    default_message = "Unauthorized"


class AuthorizationError(PortalError):
    """Authenticated, but wrong role or not the resource owner."""

    status_code = 403
    default_message = "Forbidden"


class NotFoundError(PortalError):
    status_code = 404
    default_message = "Not found"


class ConflictError(PortalError):
    """Uniqueness violation (e.g. duplicate email)."""

    status_code = 409
    default_message = "Conflict"


class ServerError(PortalError):
    status_code = 500
