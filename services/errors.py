# services/errors.py


class ServiceError(Exception):
    """Base class for failures reported back to the caller.

    Each subclass maps to one HTTP status. ``reason`` is the machine-readable
    string clients branch on; ``message`` is shown to people.
    """

    status_code = 500
    reason = "internal_error"

    def __init__(self, message, reason=None):
        super().__init__(message)
        self.message = message
        if reason:
            self.reason = reason

    def to_response(self):
        return {"success": False, "message": self.message, "reason": self.reason}, self.status_code


class ValidationError(ServiceError):
    status_code = 400
    reason = "validation_error"


class AuthenticationError(ServiceError):
    status_code = 401
    reason = "invalid_credentials"


class AuthorizationError(ServiceError):
    status_code = 403
    reason = "admin_required"


class NotFoundError(ServiceError):
    status_code = 404
    reason = "not_found"


class DependencyUnavailable(ServiceError):
    status_code = 500
    reason = "email_unconfigured"
