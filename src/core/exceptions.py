"""Custom exception classes for the classroom backend.

This module defines the business error taxonomy raised by the managers and
translated into HTTP responses at the application boundary.
"""


class ClassroomError(Exception):
    """Base exception for all classroom backend errors."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(ClassroomError):
    """Raised when a referenced entity does not exist."""

    status_code = 404

    def __init__(self, entity: str, key: str):
        """Initialize the exception.

        Args:
            entity: Kind of entity that was looked up, e.g. ``"Course"``.
            key: The business key that was not found.
        """
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} '{key}' not found")


class ForbiddenError(ClassroomError):
    """Raised when an authenticated caller lacks permission for an action."""

    status_code = 403


class ConflictError(ClassroomError):
    """Raised when a state-machine precondition is violated."""

    status_code = 409


class InvalidArgumentError(ClassroomError):
    """Raised when input data is malformed or out of range."""

    status_code = 400


class InternalError(ClassroomError):
    """Raised when storage or an unexpected failure prevents an operation."""

    status_code = 500
