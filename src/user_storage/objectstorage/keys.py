"""Object key prefixes derived from access levels.

Public objects live under ``public/``. Private objects live under
``private/{identity_id}/`` so each identity only sees its own keys.
"""

from typing import Optional

from user_storage.core.exceptions import ValidationError

PUBLIC_PREFIX = "public/"
PRIVATE_PREFIX = "private/"


def access_level_prefix(level: Optional[str], identity_id: Optional[str]) -> str:
    """Compute the key prefix for an access level.

    Args:
        level: "public", "private", or None (treated as public)
        identity_id: Identity of the caller, required for private objects

    Returns:
        Key prefix ending in "/"

    Raises:
        ValidationError: If the level is unknown or private has no identity
    """
    if level is None or level == "public":
        return PUBLIC_PREFIX

    if level == "private":
        if not identity_id:
            raise ValidationError("Private access level requires an identity id")
        return f"{PRIVATE_PREFIX}{identity_id}/"

    raise ValidationError(
        f"Invalid access level: {level}. Must be 'public' or 'private'"
    )


def strip_prefix(key: str, prefix: str) -> str:
    """Return key relative to prefix."""
    if prefix and key.startswith(prefix):
        return key[len(prefix) :]
    return key
