"""Database models for CareBridge."""

from app.models.chat import Chat, ChatMessage, ChatMessageType
from app.models.medical_record import MedicalRecord, RecordType
from app.models.scheduling import Appointment, AppointmentStatus, AppointmentType
from app.models.triage import Triage, TriageStatus
from app.models.user import Gender, User, UserRole

__all__ = [
    # Accounts
    "User",
    "UserRole",
    "Gender",
    # Triage
    "Triage",
    "TriageStatus",
    # Chat
    "Chat",
    "ChatMessage",
    "ChatMessageType",
    # Scheduling
    "Appointment",
    "AppointmentStatus",
    "AppointmentType",
    # Records
    "MedicalRecord",
    "RecordType",
]
