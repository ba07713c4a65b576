"""Identity providers for caller credentials."""

from .providers import (
    CognitoIdentityProvider,
    CredentialProvider,
    SessionCredentialProvider,
    StaticCredentialProvider,
)

__all__ = [
    "CognitoIdentityProvider",
    "CredentialProvider",
    "SessionCredentialProvider",
    "StaticCredentialProvider",
]
