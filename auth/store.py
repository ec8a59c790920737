"""
auth/store.py -- SQLAlchemy Core read layer for user profiles.

Pattern: Repository + Data Mapper (same as records/store.py).
UserStore is the repository; _row_to_identity / _row_to_profile are the
mappers. Route and dependency code never touches SQL directly.

The user_profiles table belongs to an external provisioning process. This
store only reads it. The Table definition below describes the expected
columns and is created (checkfirst) so development and test databases
can be bootstrapped; it never alters an existing table.

Name-column compatibility shim:
  Deployed user_profiles tables have been created with first_name/last_name,
  with quoted "firstName"/"lastName", and with unquoted firstName (which
  PostgreSQL folds to firstname). The credential and profile queries select
  every column and the mappers coalesce the name fields from those casings
  in a fixed order. This is the only place that tolerates column drift.

Security:
  All queries use bound parameters. No f-strings in SQL.
  Passwords are compared in plaintext against the stored column. This is a
  known gap inherited from the provisioning process (no hashes to verify
  against), not an oversight in this layer.

Layer rule: no imports from api/ or records/.
"""

from __future__ import annotations

from collections.abc import Mapping

from sqlalchemy import Boolean, Column, Integer, MetaData, String, Table, Text, text, true
from sqlalchemy.engine import Engine

from auth.models import UserIdentity, UserProfile
from core.database import checkout

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

user_profiles = Table(
    "user_profiles",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(255), nullable=False, unique=True),
    Column("email", String(255)),
    Column("password", Text, nullable=False),  # plaintext, see module docstring
    Column("role", String(30), nullable=False, server_default="user"),
    Column("first_name", String(255)),
    Column("last_name", String(255)),
    Column("department", String(100)),
    Column("position", String(255)),
    Column("phone_number", String(50)),
    Column("is_active", Boolean, nullable=False, server_default=true()),
)

# Lookup order for the name columns (compatibility shim, see module docstring).
_FIRST_NAME_SOURCES = ("first_name", "firstName", "firstname")
_LAST_NAME_SOURCES = ("last_name", "lastName", "lastname")

_FIND_BY_CREDENTIALS = text("SELECT * FROM user_profiles WHERE username = :username AND password = :password")
_GET_BY_ID = text("SELECT * FROM user_profiles WHERE id = :user_id")


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Read-only repository for user profiles.

    Usage:
        store = UserStore(engine)
        identity = store.find_by_credentials("admin", "admin1")
        profile = store.get_user(identity.id)
    """

    def __init__(self, engine: Engine, create_schema: bool = True) -> None:
        self.engine = engine
        if create_schema:
            with checkout(self.engine, "Failed to prepare user store") as conn:
                user_profiles.create(conn, checkfirst=True)
                conn.commit()

    def find_by_credentials(self, username: str, password: str) -> UserIdentity | None:
        """Return the identity whose username AND password match exactly, else None."""
        with checkout(self.engine, "Login failed") as conn:
            row = conn.execute(_FIND_BY_CREDENTIALS, {"username": username, "password": password}).fetchone()
        return _row_to_identity(row._mapping) if row is not None else None

    def get_user(self, user_id: int) -> UserProfile | None:
        """Look up a profile by primary key. Returns None if it no longer exists.

        Tokens outlive deleted profiles, so GET /user calls this on every
        request to catch that drift at read time.
        """
        with checkout(self.engine, "Failed to get user data") as conn:
            row = conn.execute(_GET_BY_ID, {"user_id": user_id}).fetchone()
        return _row_to_profile(row._mapping) if row is not None else None


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _coalesce(row: Mapping, sources: tuple[str, ...]) -> str | None:
    for key in sources:
        value = row.get(key)
        if value is not None and value != "":
            return value
    return None


def _row_to_identity(row: Mapping) -> UserIdentity:
    return UserIdentity(
        id=row["id"],
        username=row["username"],
        role=(row.get("role") or "").lower(),
        email=row.get("email"),
        first_name=_coalesce(row, _FIRST_NAME_SOURCES),
        last_name=_coalesce(row, _LAST_NAME_SOURCES),
        department=row.get("department"),
    )


def _row_to_profile(row: Mapping) -> UserProfile:
    identity = _row_to_identity(row)
    is_active = _coalesce(row, ("is_active", "isActive", "isactive"))
    return UserProfile(
        id=identity.id,
        username=identity.username,
        role=identity.role,
        email=identity.email,
        first_name=identity.first_name,
        last_name=identity.last_name,
        department=identity.department,
        position=row.get("position"),
        phone_number=_coalesce(row, ("phone_number", "phoneNumber", "phonenumber")),
        is_active=True if is_active is None else bool(is_active),
    )
