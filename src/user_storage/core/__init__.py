"""Core utilities and shared components for user-storage."""

from .config import Settings, settings
from .exceptions import (
    ConfigurationError,
    CredentialError,
    ProviderError,
    StorageError,
    ValidationError,
)
from .observability import get_logger, get_tracer, set_span_attributes

__all__ = [
    "Settings",
    "settings",
    "StorageError",
    "ValidationError",
    "ConfigurationError",
    "CredentialError",
    "ProviderError",
    "get_logger",
    "get_tracer",
    "set_span_attributes",
]
