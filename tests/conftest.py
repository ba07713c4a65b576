"""Test configuration and fixtures for user-storage."""

import asyncio

import boto3
import pytest
from moto import mock_aws

from user_storage.identity import StaticCredentialProvider

BUCKET = "test-bucket"
REGION = "us-east-1"


class CountingCredentialProvider(StaticCredentialProvider):
    """Static provider that records how often credentials are fetched."""

    def __init__(self, *args, delay: float = 0.0, **kwargs):
        super().__init__(*args, **kwargs)
        self.calls = 0
        self.delay = delay

    async def current_credentials(self):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        return await super().current_credentials()


class FailingCredentialProvider(StaticCredentialProvider):
    """Provider whose lookup always fails."""

    def __init__(self, error: Exception):
        super().__init__("unused", "unused", "unused")
        self.error = error

    async def current_credentials(self):
        raise self.error


@pytest.fixture
def aws_credentials(monkeypatch):
    """Fake AWS credentials so nothing reaches a real account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", REGION)


@pytest.fixture
def s3_client(aws_credentials):
    """Mocked S3 with an empty test bucket."""
    with mock_aws():
        client = boto3.client("s3", region_name=REGION)
        client.create_bucket(Bucket=BUCKET)
        yield client


@pytest.fixture
def credential_provider():
    """Counting provider for identity 'id1'."""
    return CountingCredentialProvider(
        identity_id="id1",
        access_key_id="test_key",
        secret_access_key="test_secret",
    )
