"""
Service-level errors.

Every error carries a message and the HTTP status it maps to, so routers
never have to translate them by hand; ``main.py`` registers one handler
for the whole hierarchy.
"""


class ServiceError(Exception):
    status_code = 400

    def __init__(self, message: str, status_code: int = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    @property
    def error_type(self) -> str:
        return type(self).__name__


class ValidationError(ServiceError):
    status_code = 422


class NotFoundError(ServiceError):
    status_code = 404


class AuthorizationError(ServiceError):
    status_code = 403


class ConflictError(ServiceError):
    status_code = 409


class AlreadyApprovedError(ConflictError):
    pass


class DuplicateReportError(ConflictError):
    pass


class NotDeactivatedError(ConflictError):
    pass


class ReportAlreadyHandledError(ConflictError):
    pass


class InactiveError(ConflictError):
    pass


class SelfReportError(ServiceError):
    status_code = 400


class PostInactiveError(ServiceError):
    status_code = 400


class PostUnapprovedError(ServiceError):
    status_code = 400


class InvalidStatusError(ServiceError):
    status_code = 422


class UploadError(ServiceError):
    status_code = 400


class TransientError(ServiceError):
    """Persistence or network failure worth retrying."""

    status_code = 503
