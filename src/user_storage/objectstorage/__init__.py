"""Object storage helpers for S3-compatible services."""

from .clients import S3ClientConfig, S3ClientManager
from .keys import access_level_prefix, strip_prefix

__all__ = [
    "S3ClientConfig",
    "S3ClientManager",
    "access_level_prefix",
    "strip_prefix",
]
