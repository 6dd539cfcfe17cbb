"""
API request and response models for the employee auth REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py, which
own the internal domain representation. Route handlers map between the two.

Length limits mirror the users table columns so an over-long value is a 422
here rather than a database error later.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from auth.models import Profile

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Deliberately loose: one "@", no whitespace, a dot in the domain part.
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Request body for POST /api/v1/auth/login. login is a username or an email."""

    login: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=1024)


class UserCreate(BaseModel):
    """Request body for POST /api/v1/users.

    Whitespace is stripped before the length checks run, so "  " fails
    min_length rather than creating a blank username.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    username: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=255, pattern=EMAIL_PATTERN)


class ProfileUpdate(BaseModel):
    """Request body for PUT /api/v1/users/me. Omit new_password to keep the current one."""

    name: str = Field(min_length=1, max_length=100)
    new_password: Optional[str] = Field(default=None, max_length=1024)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class LoginResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    access_token: str
    token_type: str = "bearer"
    expires_in: int


class UserCreatedResponse(BaseModel):
    """Response for POST /api/v1/users.

    email_sent is False when the user was created but the password email
    failed; the account exists and needs manual follow-up.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    email_sent: bool = True


class MeResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    username: str
    name: str
    email: str

    @classmethod
    def from_profile(cls, profile: Profile) -> "MeResponse":
        return cls(username=profile.username, name=profile.name, email=profile.email)


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]
