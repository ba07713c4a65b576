"""Exception hierarchy for user-storage."""

from typing import Optional


class StorageError(Exception):
    """Base exception for all user-storage errors."""

    pass


class ValidationError(StorageError):
    """Raised when validation fails."""

    pass


class ConfigurationError(StorageError):
    """Raised when the storage configuration cannot serve a request."""

    pass


class CredentialError(StorageError):
    """Raised when caller credentials cannot be resolved."""

    pass


class ProviderError(StorageError):
    """Raised when the object storage provider rejects a call."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause
