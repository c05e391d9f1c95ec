"""
Identity Models for LifeLedger

A User row is the authoritative record of a local or federated account.
CurrentUser is the lightweight snapshot kept for the active session;
it never carries the password hash.
"""

from datetime import datetime
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Stored as password_hash for federated accounts. Never verifies.
FEDERATED_PASSWORD_SENTINEL = "!federated"

LOCAL_USER_PREFIX = "user_"
FEDERATED_USER_PREFIX = "sso_"


def new_user_id(prefix: str = LOCAL_USER_PREFIX) -> str:
    """Create a user id with the given account-type prefix."""
    return f"{prefix}{uuid4().hex}"


class User(BaseModel):
    """
    A registered account.

    Email is stored lowercase; uniqueness is checked case-insensitively
    by the identity resolver.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(
        default_factory=new_user_id,
        description="Stable user identifier"
    )
    email: str = Field(
        ...,
        min_length=3,
        max_length=320,
        description="Login email (lowercase)"
    )
    password_hash: str = Field(
        ...,
        description="KDF hash, or the federated sentinel"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Display name"
    )
    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the account was created"
    )

    @field_validator('email')
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.lower()

    @property
    def is_federated(self) -> bool:
        return self.password_hash == FEDERATED_PASSWORD_SENTINEL

    def to_current_user(self) -> "CurrentUser":
        return CurrentUser(id=self.id, email=self.email, name=self.name)


class CurrentUser(BaseModel):
    """Session snapshot of the resolved user."""

    id: str
    email: str
    name: str


class FederatedProfile(BaseModel):
    """Profile supplied by the external sign-in provider."""
    model_config = ConfigDict(str_strip_whitespace=True)

    email: str = Field(..., min_length=3)
    name: str = Field(..., min_length=1)
    image: Optional[str] = None


class AuthResult(BaseModel):
    """Outcome of a register or login attempt."""

    success: bool
    error: Optional[str] = None
    user: Optional[CurrentUser] = None
