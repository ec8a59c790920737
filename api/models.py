"""
API request and response models for the CV registry REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py, which
own the internal domain representation. Route handlers map between the two.

The wire format uses camelCase (firstName, phoneNumber, isActive) because the
browser client consumes it directly. Attributes stay snake_case and carry the
wire name as an alias; responses are dumped with by_alias=True.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from auth.models import UserIdentity, UserProfile

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Request body for POST /login.

    Both fields are optional and unbounded at the schema level. A missing field
    becomes the 400 "Username and password are required" from
    auth.credentials.login, and any present value, however long, is simply
    checked against the store (401 "Invalid credentials" on no match).
    """

    username: Optional[str] = None
    password: Optional[str] = None


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class LoginResponse(_WireModel):
    """Identity plus session token returned by POST /login."""

    id: int
    username: str
    email: Optional[str] = None
    role: str
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    department: Optional[str] = None
    token: str

    @classmethod
    def from_identity(cls, identity: UserIdentity, token: str) -> "LoginResponse":
        return cls(
            id=identity.id,
            username=identity.username,
            email=identity.email,
            role=identity.role,
            first_name=identity.first_name,
            last_name=identity.last_name,
            department=identity.department,
            token=token,
        )


class UserResponse(_WireModel):
    """Profile returned by GET /user."""

    id: int
    username: str
    email: Optional[str] = None
    role: str
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    department: Optional[str] = None
    position: Optional[str] = None
    phone_number: Optional[str] = Field(default=None, alias="phoneNumber")
    is_active: bool = Field(default=True, alias="isActive")

    @classmethod
    def from_profile(cls, profile: UserProfile) -> "UserResponse":
        return cls(
            id=profile.id,
            username=profile.username,
            email=profile.email,
            role=profile.role,
            first_name=profile.first_name,
            last_name=profile.last_name,
            department=profile.department,
            position=profile.position,
            phone_number=profile.phone_number,
            is_active=profile.is_active,
        )


class MessageResponse(BaseModel):
    """Plain acknowledgement, e.g. POST /logout."""

    message: str


class ErrorResponse(BaseModel):
    """Body of every non-2xx response.

    error is only present on store failures, and only when
    EXPOSE_STORE_ERRORS is enabled.
    """

    message: str
    error: Optional[str] = None


class HealthResponse(BaseModel):
    """Response for GET /health."""

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=lambda: {"app": "ok"})
