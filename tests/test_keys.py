"""Tests for access-level key prefixes."""

import pytest

from user_storage.core.exceptions import ValidationError
from user_storage.objectstorage.keys import access_level_prefix, strip_prefix


class TestAccessLevelPrefix:
    """Test prefix computation."""

    @pytest.mark.parametrize("identity_id", ["id1", "us-east-1:abc-123", None])
    def test_public_prefix(self, identity_id):
        assert access_level_prefix("public", identity_id) == "public/"

    def test_missing_level_is_public(self):
        assert access_level_prefix(None, "id1") == "public/"

    @pytest.mark.parametrize("identity_id", ["id1", "us-east-1:abc-123"])
    def test_private_prefix(self, identity_id):
        assert access_level_prefix("private", identity_id) == f"private/{identity_id}/"

    def test_private_without_identity(self):
        with pytest.raises(ValidationError, match="identity id"):
            access_level_prefix("private", None)

    def test_invalid_level(self):
        with pytest.raises(ValidationError, match="Invalid access level"):
            access_level_prefix("protected", "id1")


class TestStripPrefix:
    """Test prefix stripping."""

    def test_strips_leading_prefix(self):
        assert strip_prefix("public/dir/a", "public/") == "dir/a"

    def test_key_without_prefix_unchanged(self):
        assert strip_prefix("other/a", "public/") == "other/a"

    def test_empty_prefix(self):
        assert strip_prefix("public/a", "") == "public/a"
