"""
auth/dependencies.py -- Session guard: FastAPI Depends() helpers for authentication.

One auth method: an `Authorization: Bearer <token>` header carrying a session
token from POST /login.

authenticate() is the soft variant (returns None on failure) and works on any
header mapping. get_current_identity() wraps it for FastAPI and raises
AuthenticationError (401) if the request is not authenticated.

A missing header, a header without the "Bearer " prefix, and a token that
fails verification all produce the same rejection. Callers cannot tell which
one happened.

Preflight OPTIONS requests never reach these helpers; api/main.py answers
them before routing.

Layer rule: no imports from api/ or records/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from fastapi import Request

from auth.models import TokenClaims
from auth.tokens import verify_token
from core.errors import AuthenticationError

logger = logging.getLogger("cvregistry.auth")

_BEARER_PREFIX = "Bearer "


def _authorization_header(headers: Mapping[str, str]) -> str | None:
    """Case-insensitive lookup of the Authorization header."""
    for name, value in headers.items():
        if name.lower() == "authorization":
            return value
    return None


def authenticate(headers: Mapping[str, str]) -> TokenClaims | None:
    """Return the verified token claims for these request headers, or None.

    Never raises -- callers that need a hard 401 should use get_current_identity().
    """
    auth_header = _authorization_header(headers)
    if not auth_header or not auth_header.startswith(_BEARER_PREFIX):
        return None
    return verify_token(auth_header[len(_BEARER_PREFIX) :])


def get_current_identity(request: Request) -> TokenClaims:
    """Require authentication. Raises AuthenticationError (401) if the request is not authenticated.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(identity: TokenClaims = Depends(get_current_identity)): ...
    """
    claims = authenticate(request.headers)
    if claims is None:
        logger.debug("Rejected unauthenticated %s %s", request.method, request.url.path)
        raise AuthenticationError("Authentication required")
    return claims
