"""Medical record schemas."""

from datetime import date, datetime

from pydantic import BaseModel, Field

from app.models.medical_record import RecordType


class RecordCreate(BaseModel):
    """Schema for a doctor adding a record to a patient's history."""

    patient_id: str
    record_type: RecordType
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=10000)
    record_date: date | None = None
    related_appointment_id: str | None = None
    details: dict = Field(default_factory=dict)
    is_private: bool = False
    tags: list[str] = Field(default_factory=list)


class RecordUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, min_length=1, max_length=10000)
    record_date: date | None = None
    details: dict | None = None
    is_private: bool | None = None
    tags: list[str] | None = None


class RecordRead(BaseModel):
    id: str
    patient_id: str
    doctor_id: str | None
    related_appointment_id: str | None
    record_type: RecordType
    title: str
    description: str
    record_date: date
    details: dict
    is_private: bool
    tags: list[str]
    created_at: datetime
    updated_at: datetime | None

    model_config = {"from_attributes": True}
