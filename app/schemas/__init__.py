"""Pydantic schemas for request/response validation."""

from app.schemas.admin import AdminStats
from app.schemas.appointment import (
    AppointmentCreate,
    AppointmentRead,
    AppointmentStatusUpdate,
    Prescription,
)
from app.schemas.auth import (
    ChangePasswordRequest,
    LoginRequest,
    ProfileUpdate,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
)
from app.schemas.chat import ChatMessageCreate, ChatMessageRead, ChatRead, ChatStart
from app.schemas.common import MessageResponse, Page, Pagination
from app.schemas.record import RecordCreate, RecordRead, RecordUpdate
from app.schemas.triage import TriageCreate, TriageRead, TriageReview, TriageStats
from app.schemas.user import DoctorRead, UserAdminUpdate, UserRead, UserSummary

__all__ = [
    "RegisterRequest",
    "LoginRequest",
    "RefreshRequest",
    "TokenResponse",
    "ProfileUpdate",
    "ChangePasswordRequest",
    "UserRead",
    "UserSummary",
    "DoctorRead",
    "UserAdminUpdate",
    "Page",
    "Pagination",
    "MessageResponse",
    "TriageCreate",
    "TriageRead",
    "TriageReview",
    "TriageStats",
    "ChatStart",
    "ChatRead",
    "ChatMessageCreate",
    "ChatMessageRead",
    "AppointmentCreate",
    "AppointmentRead",
    "AppointmentStatusUpdate",
    "Prescription",
    "RecordCreate",
    "RecordRead",
    "RecordUpdate",
    "AdminStats",
]
