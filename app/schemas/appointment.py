"""Appointment schemas."""

from datetime import date, datetime

from pydantic import BaseModel, Field

from app.models.scheduling import AppointmentStatus, AppointmentType


class AppointmentCreate(BaseModel):
    """Patient booking request."""

    doctor_id: str
    appointment_date: date
    appointment_time: str = Field(pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    appointment_type: AppointmentType = AppointmentType.CONSULTATION
    reason: str = Field(min_length=1, max_length=1000)
    symptoms: list[str] = Field(default_factory=list)


class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus
    cancellation_reason: str | None = Field(default=None, max_length=1000)
    notes: str | None = Field(default=None, max_length=5000)


class Medication(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    dosage: str | None = None
    frequency: str | None = None
    duration: str | None = None


class Prescription(BaseModel):
    """Prescription written when a consultation completes."""

    medications: list[Medication] = Field(default_factory=list)
    advice: str | None = Field(default=None, max_length=5000)
    follow_up_date: date | None = None


class AppointmentRead(BaseModel):
    id: str
    patient_id: str
    doctor_id: str
    appointment_date: date
    appointment_time: str
    duration_minutes: int
    appointment_type: AppointmentType
    status: AppointmentStatus
    reason: str
    symptoms: list[str]
    notes: str | None
    prescription: dict | None
    cancelled_at: datetime | None
    cancelled_by: str | None
    cancellation_reason: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
