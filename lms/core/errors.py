"""Domain error taxonomy.

Services raise these; the HTTP layer maps them to status codes with a
single exception handler registered in lms.main.  Empty results (a
student with no enrollments) are never errors.
"""

from __future__ import annotations


class LMSError(Exception):
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(LMSError):
    """Identifier does not resolve, is soft-deleted, or has the wrong role."""

    status_code = 404


class ForbiddenError(LMSError):
    status_code = 403


class ConflictError(LMSError):
    status_code = 409


class InvalidInputError(LMSError):
    status_code = 400


class DataAccessError(LMSError):
    """The entity store failed.  The original exception is chained."""

    status_code = 500

    def __init__(self, operation: str, message: str = "Internal server error") -> None:
        super().__init__(message)
        self.operation = operation
