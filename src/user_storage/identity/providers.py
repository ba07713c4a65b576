"""Identity providers that supply short-lived credentials for the caller.

A provider has two halves: ``current_credentials`` performs the (possibly
remote) lookup and returns the raw provider response, and
``essential_credentials`` projects that response onto a ``CredentialSet``.
The facade only keeps the projection.
"""

import asyncio
from datetime import datetime
from typing import Any, Mapping, Optional, Protocol

import boto3

from user_storage.core import get_logger
from user_storage.schemas import CredentialSet

logger = get_logger(__name__)


class CredentialProvider(Protocol):
    """Protocol for resolving credentials of the current caller."""

    async def current_credentials(self) -> Mapping[str, Any]:
        """Fetch raw credentials for the current caller."""
        ...

    def essential_credentials(self, raw: Mapping[str, Any]) -> CredentialSet:
        """Extract the fields the storage facade needs."""
        ...


class CognitoIdentityProvider:
    """Credentials from an Amazon Cognito identity pool.

    Guest access is used when no ``logins`` are given; otherwise the logins
    map (provider name to token) authenticates the identity.
    """

    def __init__(
        self,
        identity_pool_id: str,
        region_name: Optional[str] = None,
        logins: Optional[Mapping[str, str]] = None,
        endpoint_url: Optional[str] = None,
    ):
        self.identity_pool_id = identity_pool_id
        self.region_name = region_name or identity_pool_id.split(":", 1)[0]
        self.logins = dict(logins or {})
        self.endpoint_url = endpoint_url
        self._identity_id: Optional[str] = None

    def _create_client(self):
        kwargs: dict[str, Any] = {"region_name": self.region_name}
        if self.endpoint_url:
            kwargs["endpoint_url"] = self.endpoint_url
        return boto3.client("cognito-identity", **kwargs)  # type: ignore

    def _fetch(self) -> Mapping[str, Any]:
        client = self._create_client()

        request: dict[str, Any] = {}
        if self.logins:
            request["Logins"] = self.logins

        if self._identity_id is None:
            response = client.get_id(IdentityPoolId=self.identity_pool_id, **request)
            self._identity_id = response["IdentityId"]
            logger.info("Cognito identity resolved", identity_id=self._identity_id)

        response = client.get_credentials_for_identity(
            IdentityId=self._identity_id, **request
        )
        return {**response, "Authenticated": bool(self.logins)}

    async def current_credentials(self) -> Mapping[str, Any]:
        return await asyncio.to_thread(self._fetch)

    def essential_credentials(self, raw: Mapping[str, Any]) -> CredentialSet:
        credentials = raw["Credentials"]
        return CredentialSet(
            identity_id=raw.get("IdentityId"),
            access_key_id=credentials["AccessKeyId"],
            secret_access_key=credentials["SecretKey"],
            session_token=credentials.get("SessionToken"),
            authenticated=bool(raw.get("Authenticated", False)),
            expiration=credentials.get("Expiration"),
        )


class SessionCredentialProvider:
    """Credentials from the boto3 credential chain or a named profile."""

    def __init__(self, identity_id: str, aws_profile: Optional[str] = None):
        self.identity_id = identity_id
        self.aws_profile = aws_profile

    def _fetch(self) -> Mapping[str, Any]:
        if self.aws_profile:
            session = boto3.Session(profile_name=self.aws_profile)
        else:
            session = boto3.Session()

        credentials = session.get_credentials()
        if credentials is None:
            raise RuntimeError("No AWS credentials found in the credential chain")

        frozen = credentials.get_frozen_credentials()
        logger.debug("Session credentials resolved", profile=self.aws_profile)
        return {
            "IdentityId": self.identity_id,
            "AccessKeyId": frozen.access_key,
            "SecretKey": frozen.secret_key,
            "SessionToken": frozen.token,
        }

    async def current_credentials(self) -> Mapping[str, Any]:
        return await asyncio.to_thread(self._fetch)

    def essential_credentials(self, raw: Mapping[str, Any]) -> CredentialSet:
        return CredentialSet(
            identity_id=raw["IdentityId"],
            access_key_id=raw["AccessKeyId"],
            secret_access_key=raw["SecretKey"],
            session_token=raw.get("SessionToken"),
            authenticated=True,
        )


class StaticCredentialProvider:
    """Fixed credentials, mostly useful for tests and scripts."""

    def __init__(
        self,
        identity_id: Optional[str],
        access_key_id: str,
        secret_access_key: str,
        session_token: Optional[str] = None,
        expiration: Optional[datetime] = None,
        authenticated: bool = True,
    ):
        self._raw = {
            "IdentityId": identity_id,
            "AccessKeyId": access_key_id,
            "SecretKey": secret_access_key,
            "SessionToken": session_token,
            "Expiration": expiration,
            "Authenticated": authenticated,
        }

    async def current_credentials(self) -> Mapping[str, Any]:
        return dict(self._raw)

    def essential_credentials(self, raw: Mapping[str, Any]) -> CredentialSet:
        return CredentialSet(
            identity_id=raw.get("IdentityId"),
            access_key_id=raw["AccessKeyId"],
            secret_access_key=raw["SecretKey"],
            session_token=raw.get("SessionToken"),
            authenticated=bool(raw.get("Authenticated", False)),
            expiration=raw.get("Expiration"),
        )
