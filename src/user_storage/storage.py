"""Storage facade over S3 with per-identity key prefixes.

Every operation follows the same sequence: check the bucket, resolve
credentials, merge call options over the configuration, compute the
access-level prefix, then make exactly one provider call on a fresh client.

Example:
    >>> from user_storage import StorageFacade, CognitoIdentityProvider
    >>> storage = StorageFacade(
    ...     {"Storage": {"bucket": "user-files", "region": "eu-west-1"}},
    ...     credential_provider=CognitoIdentityProvider("eu-west-1:pool-id"),
    ... )
    >>> url = await storage.get("avatar.png", {"level": "private"})
"""

import asyncio
from typing import Any, BinaryIO, Callable, Mapping, Optional, TypeVar, Union

import pydantic

from user_storage.core import get_logger, get_tracer, set_span_attributes
from user_storage.core.config import Settings, settings as default_settings
from user_storage.core.exceptions import (
    ConfigurationError,
    CredentialError,
    ProviderError,
    ValidationError,
)
from user_storage.identity import CredentialProvider
from user_storage.objectstorage.clients import S3ClientConfig, S3ClientManager
from user_storage.objectstorage.keys import access_level_prefix, strip_prefix
from user_storage.schemas import (
    CredentialSet,
    ListPage,
    ObjectMetadata,
    StorageConfig,
    StorageOptions,
)

logger = get_logger(__name__)
tracer = get_tracer(__name__)

LEGACY_BUCKET_KEY = "aws_user_files_s3_bucket"
LEGACY_REGION_KEY = "aws_user_files_s3_bucket_region"

T = TypeVar("T")
Content = Union[bytes, str, BinaryIO]


class StorageFacade:
    """Get, put, remove and list objects scoped by access level."""

    def __init__(
        self,
        config: Optional[Mapping[str, Any]] = None,
        credential_provider: Optional[CredentialProvider] = None,
        settings: Optional[Settings] = None,
    ):
        """Initialize the storage facade.

        Args:
            config: Initial configuration, see configure()
            credential_provider: Source of caller credentials
            settings: Settings override, defaults to the environment settings
        """
        self.settings = settings or default_settings
        self.credential_provider = credential_provider
        self._config = StorageConfig()
        self._credentials_task: Optional[asyncio.Future] = None
        self.configure(config)

    @property
    def config(self) -> StorageConfig:
        return self._config

    def configure(self, config: Optional[Mapping[str, Any]]) -> StorageConfig:
        """Merge configuration into the current configuration.

        A nested ``Storage`` section is used when present, otherwise the
        mapping itself. The legacy ``aws_user_files_s3_bucket`` form replaces
        the input with just ``bucket`` and ``region``. Top-level keys override
        existing ones.

        Args:
            config: Configuration mapping, or None to leave it unchanged

        Returns:
            The resulting configuration
        """
        logger.debug("Configuring storage")
        if not config:
            return self._config

        conf = config.get("Storage") or config
        if conf.get(LEGACY_BUCKET_KEY):
            conf = {
                "bucket": conf[LEGACY_BUCKET_KEY],
                "region": conf.get(LEGACY_REGION_KEY),
            }

        merged = {**self._config.model_dump(exclude_unset=True), **conf}
        try:
            self._config = StorageConfig.model_validate(merged)
        except pydantic.ValidationError as e:
            raise ValidationError(f"Invalid storage configuration: {e}") from e

        return self._config

    async def get(self, key: str, options: Optional[Mapping[str, Any]] = None) -> str:
        """Get a presigned download URL for an object.

        Args:
            key: Object key relative to the access level
            options: {"level": "public"|"private", "expires": seconds}

        Returns:
            Time-limited presigned URL

        Raises:
            ConfigurationError: If no bucket is configured
            CredentialError: If credentials cannot be resolved
            ProviderError: If URL signing fails
        """
        with tracer.start_as_current_span("storage.get"):
            bucket = self._require_bucket()
            credentials = await self._ensure_credentials()
            opts = self._merge_options(options)
            path = self._prefix(opts, credentials) + key
            self._trace_call(bucket, path, opts)
            logger.debug("Getting object URL", key=key, path=path)

            manager = self._create_client_manager(bucket, credentials)
            expires = opts.expires or self.settings.url_expires_in

            url = await self._call_provider(
                "get",
                path,
                manager.client.generate_presigned_url,
                "get_object",
                Params={"Bucket": bucket, "Key": path},
                ExpiresIn=expires,
            )
            logger.debug("Presigned URL generated", path=path, expires_in=expires)
            return url

    async def put(
        self,
        key: str,
        content: Content,
        options: Optional[Mapping[str, Any]] = None,
    ) -> dict[str, Any]:
        """Upload content to an object.

        Args:
            key: Object key relative to the access level
            content: Bytes, text, or a binary file object
            options: {"level": "public"|"private", "contentType": MIME type}

        Returns:
            Provider response for the upload

        Raises:
            ConfigurationError: If no bucket is configured
            CredentialError: If credentials cannot be resolved
            ProviderError: If the upload fails
        """
        with tracer.start_as_current_span("storage.put"):
            bucket = self._require_bucket()
            credentials = await self._ensure_credentials()
            opts = self._merge_options(options)
            content_type = opts.content_type or self.settings.default_content_type
            path = self._prefix(opts, credentials) + key
            self._trace_call(bucket, path, opts)
            logger.debug("Putting object", key=key, path=path, content_type=content_type)

            manager = self._create_client_manager(bucket, credentials)
            response = await self._call_provider(
                "put",
                path,
                manager.client.put_object,
                Bucket=bucket,
                Key=path,
                Body=content,
                ContentType=content_type,
            )
            logger.info("Object uploaded", bucket=bucket, path=path)
            return response

    async def remove(
        self, key: str, options: Optional[Mapping[str, Any]] = None
    ) -> dict[str, Any]:
        """Remove an object.

        Deleting a key that does not exist succeeds if the provider says so.

        Raises:
            ConfigurationError: If no bucket is configured
            CredentialError: If credentials cannot be resolved
            ProviderError: If the deletion fails
        """
        with tracer.start_as_current_span("storage.remove"):
            bucket = self._require_bucket()
            credentials = await self._ensure_credentials()
            opts = self._merge_options(options)
            path = self._prefix(opts, credentials) + key
            self._trace_call(bucket, path, opts)

            manager = self._create_client_manager(bucket, credentials)
            response = await self._call_provider(
                "remove",
                path,
                manager.client.delete_object,
                Bucket=bucket,
                Key=path,
            )
            logger.info("Object removed", bucket=bucket, path=path)
            return response

    async def list(
        self, path: str = "", options: Optional[Mapping[str, Any]] = None
    ) -> list[ObjectMetadata]:
        """List every object under a path, following continuation tokens.

        Args:
            path: Key prefix relative to the access level
            options: {"level": "public"|"private"}

        Returns:
            Object metadata with keys relative to the access level

        Raises:
            ConfigurationError: If no bucket is configured
            CredentialError: If credentials cannot be resolved
            ProviderError: If listing fails
        """
        with tracer.start_as_current_span("storage.list"):
            bucket = self._require_bucket()
            credentials = await self._ensure_credentials()
            opts = self._merge_options(options)
            prefix = self._prefix(opts, credentials)
            full_prefix = prefix + path
            self._trace_call(bucket, full_prefix, opts)

            manager = self._create_client_manager(bucket, credentials)

            def collect() -> list[ObjectMetadata]:
                items = []
                paginator = manager.client.get_paginator("list_objects_v2")
                for page in paginator.paginate(Bucket=bucket, Prefix=full_prefix):
                    items.extend(
                        _to_metadata(obj, prefix) for obj in page.get("Contents", [])
                    )
                return items

            items = await self._call_provider("list", full_prefix, collect)
            logger.info(
                "Objects listed",
                bucket=bucket,
                prefix=full_prefix,
                object_count=len(items),
            )
            return items

    async def list_page(
        self,
        path: str = "",
        options: Optional[Mapping[str, Any]] = None,
        continuation_token: Optional[str] = None,
        max_keys: int = 1000,
    ) -> ListPage:
        """List a single page of objects under a path.

        Pass ``next_token`` from the returned page as ``continuation_token``
        to fetch the following page.
        """
        with tracer.start_as_current_span("storage.list_page"):
            bucket = self._require_bucket()
            credentials = await self._ensure_credentials()
            opts = self._merge_options(options)
            prefix = self._prefix(opts, credentials)
            full_prefix = prefix + path
            self._trace_call(bucket, full_prefix, opts)

            manager = self._create_client_manager(bucket, credentials)
            params: dict[str, Any] = {
                "Bucket": bucket,
                "Prefix": full_prefix,
                "MaxKeys": max_keys,
            }
            if continuation_token:
                params["ContinuationToken"] = continuation_token

            response = await self._call_provider(
                "list_page", full_prefix, manager.client.list_objects_v2, **params
            )
            items = [_to_metadata(obj, prefix) for obj in response.get("Contents", [])]
            return ListPage(
                items=items,
                next_token=response.get("NextContinuationToken"),
                is_truncated=bool(response.get("IsTruncated", False)),
            )

    def _require_bucket(self) -> str:
        bucket = self._config.bucket
        if not bucket:
            raise ConfigurationError("No bucket in storage configuration")
        return bucket

    async def _ensure_credentials(self) -> CredentialSet:
        """Return cached credentials, fetching them if absent or expiring.

        Concurrent callers share a single in-flight fetch.
        """
        credentials = self._config.credentials
        if credentials is not None and not credentials.is_expired(
            self.settings.credential_refresh_margin
        ):
            return credentials

        task = self._credentials_task
        if task is None or task.done():
            task = asyncio.ensure_future(self._fetch_credentials())
            self._credentials_task = task

        try:
            return await asyncio.shield(task)
        finally:
            if task.done() and self._credentials_task is task:
                self._credentials_task = None

    async def _fetch_credentials(self) -> CredentialSet:
        if self.credential_provider is None:
            raise CredentialError("No credential provider configured")

        try:
            raw = await self.credential_provider.current_credentials()
            credentials = self.credential_provider.essential_credentials(raw)
        except Exception as e:
            logger.error("Failed to resolve credentials", error=str(e))
            raise CredentialError(f"Failed to resolve credentials: {e}") from e

        logger.debug(
            "Credentials resolved for storage",
            identity_id=credentials.identity_id,
            authenticated=credentials.authenticated,
        )
        self._config = self._config.model_copy(update={"credentials": credentials})
        return credentials

    def _merge_options(self, options: Optional[Mapping[str, Any]]) -> StorageOptions:
        defaults = self._config.model_dump(exclude={"credentials"}, exclude_none=True)
        try:
            return StorageOptions.model_validate({**defaults, **(options or {})})
        except pydantic.ValidationError as e:
            raise ValidationError(f"Invalid storage options: {e}") from e

    def _trace_call(self, bucket: str, path: str, options: StorageOptions) -> None:
        set_span_attributes(bucket=bucket, key=path, level=options.level or "public")

    def _prefix(self, options: StorageOptions, credentials: CredentialSet) -> str:
        return access_level_prefix(options.level, credentials.identity_id)

    def _create_client_manager(
        self, bucket: str, credentials: CredentialSet
    ) -> S3ClientManager:
        config = S3ClientConfig.from_credentials(
            bucket,
            credentials,
            region_name=self._config.region,
            endpoint_url=self._config.endpoint_url,
            api_version=self.settings.s3_api_version,
        )
        return S3ClientManager(config)

    async def _call_provider(
        self, operation: str, path: str, func: Callable[..., T], *args, **kwargs
    ) -> T:
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except Exception as e:
            error_msg = f"Storage {operation} failed for '{path}': {e}"
            logger.error(error_msg, error=str(e))
            raise ProviderError(error_msg, cause=e) from e


def _to_metadata(obj: Mapping[str, Any], prefix: str) -> ObjectMetadata:
    return ObjectMetadata(
        key=strip_prefix(obj["Key"], prefix),
        e_tag=obj.get("ETag"),
        last_modified=obj.get("LastModified"),
        size=obj.get("Size", 0),
    )
