"""Business logic services."""

from app.services.admin import AdminService
from app.services.auth import AuthService
from app.services.chat import ChatService
from app.services.rbac import Permission, RBACService
from app.services.records import MedicalRecordService
from app.services.scheduling import SchedulingService
from app.services.triage import TriageService

__all__ = [
    "AdminService",
    "AuthService",
    "ChatService",
    "MedicalRecordService",
    "Permission",
    "RBACService",
    "SchedulingService",
    "TriageService",
]
