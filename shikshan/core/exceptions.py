from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ConfigurationError(ServiceError):
    """A required setting (credential, URL) is missing."""


class MigrationError(ServiceError):
    """A migration failed; the run stops at the failing migration."""

    def __init__(self, message: str, migration: str) -> None:
        super().__init__(message)
        self.migration = migration


class InvalidTransitionError(ServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_409_CONFLICT)


class PaymentError(ServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_400_BAD_REQUEST)


class DatabaseConnectionError(ServiceError):
    """Connectivity failure with a human-readable cause."""

    def __init__(self, message: str, cause: str) -> None:
        super().__init__(message, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.cause = cause


class AppendOnlyError(ServiceError):
    """Attempt to modify or delete an append-only history row."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_409_CONFLICT)
