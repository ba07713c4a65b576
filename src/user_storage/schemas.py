"""Configuration and result schemas for user-storage."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

AccessLevel = Literal["public", "private"]


class CredentialSet(BaseModel):
    """Short-lived credentials for the current caller."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    identity_id: Optional[str] = Field(
        default=None,
        alias="identityId",
        description="Identity the credentials were issued for",
    )
    access_key_id: str = Field(
        ..., alias="accessKeyId", description="AWS access key ID"
    )
    secret_access_key: str = Field(
        ..., alias="secretAccessKey", description="AWS secret access key"
    )
    session_token: Optional[str] = Field(
        default=None, alias="sessionToken", description="AWS session token"
    )
    authenticated: bool = Field(
        default=False, description="Whether the identity came from a login"
    )
    expiration: Optional[datetime] = Field(
        default=None, description="When the credentials stop being valid"
    )

    def is_expired(self, margin_seconds: int = 0) -> bool:
        """Return True when the credentials are expired or about to be."""
        if self.expiration is None:
            return False
        expiration = self.expiration
        if expiration.tzinfo is None:
            expiration = expiration.replace(tzinfo=timezone.utc)
        now = datetime.now(timezone.utc)
        return now + timedelta(seconds=margin_seconds) >= expiration


class StorageConfig(BaseModel):
    """Facade configuration, shallow-merged on every configure() call."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    bucket: Optional[str] = Field(default=None, description="S3 bucket name")
    region: Optional[str] = Field(default=None, description="AWS region")
    credentials: Optional[CredentialSet] = Field(
        default=None, description="Resolved caller credentials"
    )
    endpoint_url: Optional[str] = Field(
        default=None, description="Custom S3 endpoint URL"
    )
    level: Optional[AccessLevel] = Field(
        default=None, description="Default access level for operations"
    )
    content_type: Optional[str] = Field(
        default=None, alias="contentType", description="Default upload content type"
    )


class StorageOptions(BaseModel):
    """Per-call options, merged over the facade configuration."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    # None falls through to the public prefix
    level: Optional[AccessLevel] = None
    content_type: Optional[str] = Field(default=None, alias="contentType")
    expires: Optional[int] = Field(
        default=None, gt=0, description="Presigned URL lifetime in seconds"
    )


@dataclass(frozen=True)
class ObjectMetadata:
    """Metadata for one listed object, keyed relative to its access level."""

    key: str
    e_tag: Optional[str]
    last_modified: Optional[datetime]
    size: int


@dataclass(frozen=True)
class ListPage:
    """A single page of listing results."""

    items: list[ObjectMetadata] = field(default_factory=list)
    next_token: Optional[str] = None
    is_truncated: bool = False
