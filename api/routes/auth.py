"""
api/routes/auth.py -- Login and profile REST endpoints.

Routes:
  POST /login   -- password login; returns identity + bearer token
  POST /logout  -- acknowledges logout; tokens are stateless, the client discards it
  GET  /user    -- profile of the token's user (requires auth)

Security:
  Cache-Control: no-store on login responses (they carry a token).
  GET /user re-reads the profile on every call: a token stays valid after its
  profile is deleted, so a missing row is reported as 401 "User not found".
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.models import LoginRequest, LoginResponse, MessageResponse, UserResponse
from auth.credentials import login as verify_login
from auth.dependencies import get_current_identity
from auth.models import TokenClaims
from auth.store import UserStore
from core.errors import AuthenticationError

# Auth policy:
# - POST /login:  public -- login endpoint must be unauthenticated
# - POST /logout: public -- there is no server-side session to end
# - GET  /user:   requires auth (get_current_identity)
router = APIRouter()


@router.post("/login", response_model=LoginResponse)
def login(request: Request, body: LoginRequest | None = None) -> JSONResponse:
    """Authenticate with username and password.

    A missing body is treated like missing fields (400), not a schema error.

    Include the returned token in later requests as: Authorization: Bearer <token>
    """
    user_store: UserStore = request.app.state.user_store
    body = body or LoginRequest()
    result = verify_login(user_store, body.username, body.password)
    resp = JSONResponse(
        status_code=200,
        content=LoginResponse.from_identity(result.identity, result.token).model_dump(by_alias=True),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/logout", response_model=MessageResponse)
async def logout() -> MessageResponse:
    """Acknowledge logout. The token simply expires; nothing is revoked server-side."""
    return MessageResponse(message="Logged out successfully")


@router.get("/user", response_model=UserResponse, response_model_by_alias=True)
def current_user(request: Request, identity: TokenClaims = Depends(get_current_identity)) -> UserResponse:
    """Return the stored profile for the authenticated token."""
    user_store: UserStore = request.app.state.user_store
    profile = user_store.get_user(identity.id)
    if profile is None:
        raise AuthenticationError("User not found")
    return UserResponse.from_profile(profile)
