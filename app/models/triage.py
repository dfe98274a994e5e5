"""Triage model for patient symptom assessments."""

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import JSON, UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, TimestampMixin


class TriageStatus(str, Enum):
    """Triage workflow status.

    A triage starts PENDING and is moved once by a doctor to REVIEWED or
    COMPLETED. Nothing moves it back to PENDING.
    """

    PENDING = "pending"
    REVIEWED = "reviewed"
    COMPLETED = "completed"


class Triage(Base, TimestampMixin):
    """One patient-submitted symptom assessment and its later review.

    The assessment columns are written once at submission from the
    classifier output and are never updated afterwards.
    """

    __tablename__ = "triages"

    patient_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Ordered list of {name, severity, duration, description}
    symptoms: Mapped[list[dict]] = mapped_column(
        JSON,
        nullable=False,
    )
    vital_signs: Mapped[dict | None] = mapped_column(
        JSON,
        nullable=True,
    )
    additional_notes: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    # Assessment
    risk_level: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        index=True,
    )
    urgency: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        index=True,
    )
    recommendations: Mapped[list[str]] = mapped_column(
        JSON,
        default=list,
        nullable=False,
    )
    possible_conditions: Mapped[list[str]] = mapped_column(
        JSON,
        default=list,
        nullable=False,
    )
    immediate_actions: Mapped[list[str]] = mapped_column(
        JSON,
        default=list,
        nullable=False,
    )
    ruleset_version: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
    )
    ruleset_hash: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
    )
    rules_fired: Mapped[list[str]] = mapped_column(
        JSON,
        default=list,
        nullable=False,
    )

    # Review
    status: Mapped[TriageStatus] = mapped_column(
        String(20),
        default=TriageStatus.PENDING.value,
        nullable=False,
        index=True,
    )
    reviewed_by: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    doctor_notes: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Triage {self.id[:8]}... risk={self.risk_level} status={self.status}>"
