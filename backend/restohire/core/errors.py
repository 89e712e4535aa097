"""
Service-level error taxonomy.

Services raise these; the app-level exception handlers in ``main`` turn
them into ``{"error": ...}`` JSON responses with the matching status code.
"""

from fastapi import status


class ServiceError(Exception):
    """Base class for expected business-rule failures."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "INTERNAL_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"


class ForbiddenError(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"


class InvalidInputError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "INVALID_INPUT"


class InvalidStateError(InvalidInputError):
    """The referenced record exists but is not in a state that allows the action."""

    code = "INVALID_STATE"


class ConflictError(InvalidInputError):
    """The action would duplicate a record guarded by a uniqueness rule."""

    code = "CONFLICT"
