"""Appointment model for patient bookings with doctors."""

from datetime import date, datetime
from enum import Enum

from sqlalchemy import Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSON, UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, TimestampMixin


class AppointmentType(str, Enum):
    """Kind of visit."""

    CONSULTATION = "consultation"
    FOLLOW_UP = "follow-up"
    EMERGENCY = "emergency"
    ROUTINE_CHECKUP = "routine-checkup"


class AppointmentStatus(str, Enum):
    """Appointment lifecycle status."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no-show"


class Appointment(Base, TimestampMixin):
    """Appointment between a patient and a doctor."""

    __tablename__ = "appointments"

    patient_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    doctor_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    appointment_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        index=True,
    )
    # "HH:MM" in the doctor's local time
    appointment_time: Mapped[str] = mapped_column(
        String(5),
        nullable=False,
    )
    duration_minutes: Mapped[int] = mapped_column(
        Integer,
        default=30,
        nullable=False,
    )
    appointment_type: Mapped[AppointmentType] = mapped_column(
        String(30),
        default=AppointmentType.CONSULTATION.value,
        nullable=False,
    )
    status: Mapped[AppointmentStatus] = mapped_column(
        String(20),
        default=AppointmentStatus.PENDING.value,
        nullable=False,
        index=True,
    )
    reason: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    symptoms: Mapped[list[str]] = mapped_column(
        JSON,
        default=list,
        nullable=False,
    )
    notes: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    # {"medications": [...], "advice": str, "follow_up_date": iso date}
    prescription: Mapped[dict | None] = mapped_column(
        JSON,
        nullable=True,
    )
    # Cancellation tracking
    cancelled_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    cancelled_by: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        nullable=True,
    )
    cancellation_reason: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    def has_participant(self, user_id: str) -> bool:
        return user_id in (self.patient_id, self.doctor_id)

    def __repr__(self) -> str:
        return f"<Appointment {self.id[:8]}... {self.appointment_date} status={self.status}>"
