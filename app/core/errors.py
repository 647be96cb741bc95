"""Domain errors raised by the moderation services.

Each error carries the HTTP status and a stable ``code`` that the API layer
renders, so services never import FastAPI.
"""

from typing import Optional


class ModerationError(Exception):
    status_code: int = 400
    code: str = 'moderation_error'

    def __init__(self, message: str, *, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class ValidationError(ModerationError):
    status_code = 400
    code = 'validation_error'


class DuplicateReport(ModerationError):
    status_code = 409
    code = 'duplicate_report'


class NotFound(ModerationError):
    status_code = 404
    code = 'not_found'


class AuthorizationError(ModerationError):
    status_code = 403
    code = 'forbidden'


class UnsupportedTarget(ModerationError):
    status_code = 422
    code = 'unsupported_target'


class InvalidTransition(ModerationError):
    status_code = 409
    code = 'invalid_transition'


class ConflictError(ModerationError):
    status_code = 409
    code = 'conflict'


class PartialFailure(ModerationError):
    """The audit record was written but a secondary mutation could not be applied.

    Never aborts an operation or reaches the HTTP layer; the executor converts it
    into a warning.
    """

    code = 'partial_failure'
