"""Administration schemas."""

from pydantic import BaseModel


class UserCounts(BaseModel):
    total: int
    patients: int
    doctors: int
    admins: int


class AppointmentCounts(BaseModel):
    total: int
    pending: int
    completed: int


class AdminStats(BaseModel):
    """Platform overview for the admin dashboard."""

    users: UserCounts
    appointments: AppointmentCounts
    triages: int
