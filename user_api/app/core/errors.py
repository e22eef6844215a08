"""
Domain exceptions shared by the repository, service and API layers.

Only the API layer turns these into HTTP responses; the message of
each exception is what the client sees, so it must never contain SQL
or driver details.
"""


class UserAPIError(Exception):
    """Base class for all domain errors."""

    default_message = "internal error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message)


class NotFoundError(UserAPIError):
    """The referenced user does not exist."""

    default_message = "user not found"


class ValidationError(UserAPIError):
    """A business rule or input-shape rule was violated."""

    default_message = "validation failed"


class DuplicateEmailError(ValidationError):
    """Another user already owns the email.

    Raised both by the service pre-check and when the storage unique
    constraint rejects a write.
    """

    default_message = "email already exists"


class StorageError(UserAPIError):
    """The database failed to complete an operation."""

    default_message = "storage failure"
