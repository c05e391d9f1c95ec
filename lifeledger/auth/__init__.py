"""Identity package."""

from lifeledger.auth.identity import (
    CURRENT_USER_KEY,
    USERS_KEY,
    IdentityResolver,
)

__all__ = ["CURRENT_USER_KEY", "USERS_KEY", "IdentityResolver"]
