"""Exceptions raised by the observability services.

The API layer maps each class to an HTTP status; see ``observatory.main``.
"""


class ObservabilityError(Exception):
    """Base exception for observability errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ObservabilityError):
    """A required field is missing or an enum value is not recognized."""

    status_code = 400


class InvalidTransitionError(ValidationError):
    """An incident status change is not allowed from its current status."""

    pass


class NotFoundError(ObservabilityError):
    """A referenced entity does not exist."""

    status_code = 404


class StoreFailure(ObservabilityError):
    """The backing data store rejected a read or write."""

    pass


class ConfigurationError(ObservabilityError):
    """Backend credentials are absent."""

    def __init__(self, message: str = "Server not configured"):
        super().__init__(message)
