"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores build these from
rows; routes turn them into response models.

Layer rule: no imports from api/ or records/.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass
class UserIdentity:
    """A staff member as read from the user_profiles table.

    Profiles are provisioned outside this service and are read-only here.
    role is always lowercase once it has passed through the row mapper.
    """

    id: int
    username: str
    role: str  # "admin", "manager", "user"
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    department: str | None = None


@dataclass
class UserProfile(UserIdentity):
    """UserIdentity plus the contact and status fields returned by GET /user."""

    position: str | None = None
    phone_number: str | None = None
    is_active: bool = True


@dataclass
class TokenClaims:
    """The verified payload of a session token.

    Validity is fully determined by signature and expiry; there is no
    server-side session record behind these claims.
    """

    id: int
    username: str
    role: str
    email: str | None
    issued_at: datetime
    expires_at: datetime


@dataclass
class LoginResult:
    """Outcome of a successful credential check: who logged in, and their token."""

    identity: UserIdentity
    token: str
