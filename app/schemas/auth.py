"""Authentication schemas."""

import re
from datetime import date
from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, Field

from app.models.user import Gender
from app.schemas.user import UserRead


def validate_email_lenient(v: str) -> str:
    """Validate email with lenient rules that allow .local domains for testing."""
    if not v or "@" not in v:
        raise ValueError("Invalid email address")
    # Basic email pattern that allows .local and other test domains
    pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
    if not re.match(pattern, v):
        raise ValueError("Invalid email address format")
    return v.lower()


LenientEmail = Annotated[str, AfterValidator(validate_email_lenient)]


class RegisterRequest(BaseModel):
    """Self-registration for patients and doctors.

    Admin accounts are never self-registered.
    """

    email: LenientEmail
    password: str = Field(min_length=8, max_length=128)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    role: Literal["patient", "doctor"] = "patient"
    phone: str | None = Field(default=None, max_length=20)
    date_of_birth: date | None = None
    gender: Gender | None = None

    # Doctor-only
    specialization: str | None = Field(default=None, max_length=100)
    license_number: str | None = Field(default=None, max_length=50)
    years_of_experience: int | None = Field(default=None, ge=0, le=80)
    consultation_fee: float | None = Field(default=None, ge=0)


class LoginRequest(BaseModel):
    """Login request with email and password."""

    email: LenientEmail
    password: str = Field(min_length=1, max_length=128)


class RefreshRequest(BaseModel):
    """Exchange a refresh token for a new token pair."""

    refresh_token: str


class LogoutRequest(BaseModel):
    """Refresh token to revoke; omit it to sign out every session."""

    refresh_token: str | None = None


class TokenResponse(BaseModel):
    """JWT token response."""

    access_token: str
    refresh_token: str | None = None
    token_type: str = "bearer"
    expires_in: int  # seconds
    user: UserRead | None = None


class ProfileUpdate(BaseModel):
    """Fields a user may change on their own profile."""

    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    phone: str | None = Field(default=None, max_length=20)
    date_of_birth: date | None = None
    gender: Gender | None = None

    # Doctor-only, ignored for other roles
    specialization: str | None = Field(default=None, max_length=100)
    bio: str | None = Field(default=None, max_length=2000)
    consultation_fee: float | None = Field(default=None, ge=0)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(min_length=1, max_length=128)
    new_password: str = Field(min_length=8, max_length=128)
