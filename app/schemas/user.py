"""User schemas."""

from datetime import date, datetime

from pydantic import BaseModel, Field

from app.models.user import UserRole


class UserRead(BaseModel):
    """Schema for reading a user's profile."""

    id: str
    email: str
    role: UserRole
    first_name: str
    last_name: str
    full_name: str
    phone: str | None = None
    date_of_birth: date | None = None
    gender: str | None = None
    is_active: bool
    last_login_at: datetime | None = None

    specialization: str | None = None
    license_number: str | None = None
    years_of_experience: int | None = None
    bio: str | None = None
    consultation_fee: float | None = None
    is_verified: bool = False

    created_at: datetime

    model_config = {"from_attributes": True}


class UserSummary(BaseModel):
    """Compact user reference embedded in other responses."""

    id: str
    first_name: str
    last_name: str
    role: UserRole

    model_config = {"from_attributes": True}


class DoctorRead(BaseModel):
    """Public doctor listing for booking."""

    id: str
    first_name: str
    last_name: str
    specialization: str | None = None
    years_of_experience: int | None = None
    bio: str | None = None
    consultation_fee: float | None = None

    model_config = {"from_attributes": True}


class UserAdminUpdate(BaseModel):
    """Fields an admin may change on any account."""

    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    role: UserRole | None = None
    is_active: bool | None = None
