"""Triage schemas."""

from datetime import datetime
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field

from app.models.triage import TriageStatus
from app.rules.models import RiskLevel, Severity, Urgency


class SymptomIn(BaseModel):
    """A reported symptom.

    name and severity are required by the triage service, which reports a
    missing one as a validation error rather than a schema error.
    """

    name: str | None = Field(default=None, max_length=200)
    severity: Severity | None = None
    duration: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=2000)


class BloodPressureIn(BaseModel):
    systolic: float | None = Field(default=None, ge=0)
    diastolic: float | None = Field(default=None, ge=0)


class VitalSignsIn(BaseModel):
    """Optional measured vitals. Omitted fields are not measured."""

    temperature: float | None = Field(default=None, ge=0)  # Fahrenheit
    heart_rate: float | None = Field(
        default=None, ge=0, validation_alias=AliasChoices("heart_rate", "heartRate")
    )
    blood_pressure: BloodPressureIn | None = Field(
        default=None, validation_alias=AliasChoices("blood_pressure", "bloodPressure")
    )
    respiratory_rate: float | None = Field(
        default=None, ge=0, validation_alias=AliasChoices("respiratory_rate", "respiratoryRate")
    )
    oxygen_saturation: float | None = Field(
        default=None,
        ge=0,
        le=100,
        validation_alias=AliasChoices("oxygen_saturation", "oxygenSaturation"),
    )


class TriageCreate(BaseModel):
    """Schema for submitting symptoms for assessment."""

    symptoms: list[SymptomIn] = Field(default_factory=list)
    vital_signs: VitalSignsIn | None = Field(
        default=None, validation_alias=AliasChoices("vital_signs", "vitalSigns")
    )
    additional_notes: str | None = Field(
        default=None,
        max_length=5000,
        validation_alias=AliasChoices("additional_notes", "additionalNotes"),
    )


class TriageReview(BaseModel):
    """Doctor review of a triage. PENDING is never a valid target."""

    doctor_notes: str = Field(
        min_length=1,
        max_length=10000,
        validation_alias=AliasChoices("doctor_notes", "doctorNotes"),
    )
    status: Literal["reviewed", "completed"] | None = None


class TriageRead(BaseModel):
    """Schema for reading a triage with its assessment."""

    id: str
    patient_id: str
    symptoms: list[dict]
    vital_signs: dict | None
    additional_notes: str | None

    risk_level: RiskLevel
    urgency: Urgency
    recommendations: list[str]
    possible_conditions: list[str]
    immediate_actions: list[str]
    rules_fired: list[str]
    ruleset_version: str | None
    ruleset_hash: str | None

    status: TriageStatus
    reviewed_by: str | None
    reviewed_at: datetime | None
    doctor_notes: str | None

    created_at: datetime
    updated_at: datetime | None

    model_config = {"from_attributes": True}


class TriageStats(BaseModel):
    """Triage counts grouped by risk level, status and urgency."""

    total: int
    by_risk_level: dict[str, int]
    by_status: dict[str, int]
    by_urgency: dict[str, int]
