"""Tests for configuration schemas and facade configuration."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError as PydanticValidationError

from user_storage import StorageFacade
from user_storage.core.exceptions import ValidationError
from user_storage.schemas import CredentialSet, StorageConfig, StorageOptions


def _credentials(**overrides):
    values = {
        "identity_id": "id1",
        "access_key_id": "key",
        "secret_access_key": "secret",
    }
    values.update(overrides)
    return CredentialSet(**values)


class TestCredentialSet:
    """Test credential expiry handling."""

    def test_without_expiration_never_expires(self):
        assert _credentials().is_expired(margin_seconds=3600) is False

    def test_future_expiration(self):
        creds = _credentials(
            expiration=datetime.now(timezone.utc) + timedelta(hours=1)
        )
        assert creds.is_expired() is False
        assert creds.is_expired(margin_seconds=60) is False

    def test_expiration_within_margin(self):
        creds = _credentials(
            expiration=datetime.now(timezone.utc) + timedelta(seconds=30)
        )
        assert creds.is_expired() is False
        assert creds.is_expired(margin_seconds=60) is True

    def test_past_expiration(self):
        creds = _credentials(
            expiration=datetime.now(timezone.utc) - timedelta(seconds=1)
        )
        assert creds.is_expired() is True

    def test_naive_expiration_treated_as_utc(self):
        naive = datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(minutes=5)
        assert _credentials(expiration=naive).is_expired() is True

    def test_credentials_are_frozen(self):
        creds = _credentials()
        with pytest.raises(PydanticValidationError):
            creds.identity_id = "other"


class TestStorageOptions:
    """Test per-call options."""

    def test_defaults(self):
        opts = StorageOptions()
        assert opts.level is None
        assert opts.content_type is None
        assert opts.expires is None

    def test_content_type_alias(self):
        opts = StorageOptions.model_validate({"contentType": "text/plain"})
        assert opts.content_type == "text/plain"

    def test_invalid_level(self):
        with pytest.raises(PydanticValidationError):
            StorageOptions(level="protected")

    def test_unknown_keys_ignored(self):
        opts = StorageOptions.model_validate({"bucket": "b1", "level": "private"})
        assert opts.level == "private"


class TestConfigure:
    """Test configuration merging on the facade."""

    def test_top_level_fields(self):
        storage = StorageFacade()
        config = storage.configure({"bucket": "b1", "region": "r1"})

        assert config.bucket == "b1"
        assert config.region == "r1"

    def test_nested_storage_section(self):
        storage = StorageFacade()
        config = storage.configure(
            {"Auth": {"identityPoolId": "x"}, "Storage": {"bucket": "b1"}}
        )

        assert config.bucket == "b1"
        assert not hasattr(config, "Auth")

    def test_legacy_combined_config(self):
        storage = StorageFacade()
        config = storage.configure(
            {
                "aws_user_files_s3_bucket": "B",
                "aws_user_files_s3_bucket_region": "R",
                "aws_project_region": "ignored",
            }
        )

        assert config.bucket == "B"
        assert config.region == "R"
        assert not hasattr(config, "aws_project_region")

    def test_merge_is_shallow_last_write_wins(self):
        storage = StorageFacade({"bucket": "b1", "region": "r1"})
        config = storage.configure({"bucket": "b2"})

        assert config.bucket == "b2"
        assert config.region == "r1"

    def test_configure_is_idempotent(self):
        storage = StorageFacade()
        first = storage.configure({"bucket": "b1", "region": "r1", "level": "private"})
        second = storage.configure({"bucket": "b1", "region": "r1", "level": "private"})

        assert first == second

    def test_none_leaves_configuration_unchanged(self):
        storage = StorageFacade({"bucket": "b1"})
        assert storage.configure(None).bucket == "b1"

    def test_extra_keys_are_kept(self):
        storage = StorageFacade()
        config = storage.configure({"bucket": "b1", "track": True})

        assert config.model_extra == {"track": True}

    def test_content_type_alias(self):
        storage = StorageFacade()
        config = storage.configure({"contentType": "image/png"})

        assert config.content_type == "image/png"

    def test_invalid_level_rejected(self):
        storage = StorageFacade()
        with pytest.raises(ValidationError, match="Invalid storage configuration"):
            storage.configure({"level": "everyone"})

    def test_configure_keeps_credentials(self):
        storage = StorageFacade()
        storage.configure({"credentials": _credentials().model_dump()})
        config = storage.configure({"bucket": "b1"})

        assert isinstance(config.credentials, CredentialSet)
        assert config.credentials.identity_id == "id1"

    def test_configure_camel_case_credentials(self):
        storage = StorageFacade()
        config = storage.configure(
            {
                "credentials": {
                    "identityId": "id1",
                    "accessKeyId": "key",
                    "secretAccessKey": "secret",
                    "sessionToken": "token",
                    "authenticated": True,
                }
            }
        )

        assert config.credentials == _credentials(
            session_token="token", authenticated=True
        )

    def test_storage_config_defaults(self):
        config = StorageConfig()
        assert config.bucket is None
        assert config.region is None
        assert config.credentials is None
