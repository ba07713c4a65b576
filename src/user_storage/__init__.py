"""Per-identity object storage on top of S3.

This package wraps S3-compatible object storage behind four asynchronous
operations: get a presigned URL, put, remove and list. Object keys are
scoped by access level, ``public/`` for shared objects and
``private/{identity_id}/`` for objects owned by the current caller.

Recommended Usage:
    >>> from user_storage import StorageFacade, CognitoIdentityProvider
    >>> storage = StorageFacade(
    ...     {"bucket": "user-files", "region": "us-east-1"},
    ...     credential_provider=CognitoIdentityProvider("us-east-1:pool-id"),
    ... )
    >>> await storage.put("notes.txt", b"hello", {"level": "private"})
    >>> items = await storage.list("", {"level": "private"})
"""

__version__ = "0.1.0"

from .core.exceptions import (
    ConfigurationError,
    CredentialError,
    ProviderError,
    StorageError,
    ValidationError,
)
from .identity import (
    CognitoIdentityProvider,
    CredentialProvider,
    SessionCredentialProvider,
    StaticCredentialProvider,
)
from .schemas import (
    AccessLevel,
    CredentialSet,
    ListPage,
    ObjectMetadata,
    StorageConfig,
    StorageOptions,
)
from .storage import StorageFacade

__all__ = [
    # Facade
    "StorageFacade",
    # Schemas
    "AccessLevel",
    "CredentialSet",
    "ListPage",
    "ObjectMetadata",
    "StorageConfig",
    "StorageOptions",
    # Identity providers
    "CognitoIdentityProvider",
    "CredentialProvider",
    "SessionCredentialProvider",
    "StaticCredentialProvider",
    # Errors
    "StorageError",
    "ValidationError",
    "ConfigurationError",
    "CredentialError",
    "ProviderError",
]
