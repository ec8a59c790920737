"""
auth/tokens.py -- Session token issuance and verification.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with JWT_SECRET and carry
       id, username, role, email, iat and exp. Verification returns None on any
       failure -- the session guard turns that into a 401.

  Expiry: absolute, TOKEN_EXPIRE_SECONDS (24h) after issuance. Tokens are
       stateless; there is no revocation list and no refresh.

  JWT_SECRET: sourced from core.config.get_settings(). Settings refuses to
       start without one, so there is no fallback signing key.

Layer rule: no imports from api/ or records/. Import from core/ is allowed --
core/ is the kernel and has no reverse dependencies.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from auth.models import TokenClaims, UserIdentity
from core.config import get_settings

logger = logging.getLogger("cvregistry.auth")

_ALGORITHM = "HS256"

_REQUIRED_CLAIMS = ("id", "username", "role", "iat", "exp")


def issue_token(identity: UserIdentity, issued_at: datetime | None = None) -> str:
    """Encode a signed JWT for a verified identity.

    Args:
        identity:  The user whose credentials were just checked.
        issued_at: Issuance time (UTC). Defaults to now; expiry is always
                   issued_at + Settings.token_expire_seconds.
    """
    settings = get_settings()
    now = issued_at or datetime.now(timezone.utc)
    payload = {
        "id": identity.id,
        "username": identity.username,
        "role": (identity.role or "").lower(),
        "email": identity.email,
        "iat": now,
        "exp": now + timedelta(seconds=settings.token_expire_seconds),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=_ALGORITHM)


def verify_token(token: str) -> TokenClaims | None:
    """Decode and verify a JWT. Returns the claims or None on any failure.

    Returning None (rather than raising) keeps the caller simple: any invalid
    token is treated as unauthenticated, never as a system error.
    """
    if not token:
        return None
    try:
        payload = jwt.decode(token, get_settings().jwt_secret, algorithms=[_ALGORITHM])
    except JWTError as exc:
        logger.debug("Token rejected: %s", exc)
        return None

    if any(payload.get(claim) is None for claim in _REQUIRED_CLAIMS):
        return None
    try:
        return TokenClaims(
            id=int(payload["id"]),
            username=str(payload["username"]),
            role=str(payload["role"]),
            email=payload.get("email"),
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
    except (TypeError, ValueError, OverflowError):
        return None
