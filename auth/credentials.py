"""
auth/credentials.py -- Username/password login.

login() is the whole credential flow:
  1. Reject missing username or password with ValidationError (400) before
     the store is touched.
  2. Look up exactly one profile matching username AND password.
  3. No match -> AuthenticationError (401). The same message is used whether
     the username is unknown or the password is wrong.
  4. Match -> issue a token for the identity.

Store failures surface as StoreError (500) from the store layer unchanged.

Layer rule: no imports from api/ or records/.
"""

from __future__ import annotations

import logging

from auth.models import LoginResult
from auth.store import UserStore
from auth.tokens import issue_token
from core.errors import AuthenticationError, ValidationError

logger = logging.getLogger("cvregistry.auth")


def login(store: UserStore, username: str | None, password: str | None) -> LoginResult:
    """Verify credentials against the user store and issue a session token."""
    if not username or not password:
        raise ValidationError("Username and password are required")

    identity = store.find_by_credentials(username, password)
    if identity is None:
        logger.info("Login failed for username=%r", username)
        raise AuthenticationError("Invalid credentials")

    logger.info("Login succeeded for user_id=%s role=%s", identity.id, identity.role)
    return LoginResult(identity=identity, token=issue_token(identity))
