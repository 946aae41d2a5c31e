"""API error taxonomy. Every error renders as {success: false, message, error?}."""


class APIError(Exception):
    status_code = 500

    def __init__(self, message: str, error: str | None = None, **extra):
        super().__init__(message)
        self.message = message
        self.error = error
        self.extra = extra

    def to_dict(self) -> dict:
        body = {"success": False, "message": self.message}
        if self.error:
            body["error"] = self.error
        body.update(self.extra)
        return body


class AuthenticationFailure(APIError):
    """Missing, malformed, invalid or expired credential."""

    status_code = 401


class AuthorizationMismatch(APIError):
    """Authenticated identity does not own the target record."""

    status_code = 403


class ValidationFailure(APIError):
    status_code = 400


class NotFound(APIError):
    status_code = 404


class PersistenceFailure(APIError):
    status_code = 500


class NotificationFailure(APIError):
    """Email delivery failed. Never fatal for the operation that triggered it."""

    status_code = 500
