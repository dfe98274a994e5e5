"""Role-Based Access Control (RBAC) service.

Three roles: patients act on their own data, doctors review and treat,
admins manage accounts and see everything without acting clinically.
"""

from enum import Enum

from app.models.user import UserRole


class Permission(str, Enum):
    """Available permissions in the system."""

    # Triage
    TRIAGE_SUBMIT = "triage:submit"
    TRIAGE_READ_OWN = "triage:read:own"
    TRIAGE_READ_ALL = "triage:read:all"
    TRIAGE_REVIEW = "triage:review"

    # Messaging
    CHAT = "chat"

    # Appointments
    APPOINTMENTS_BOOK = "appointments:book"
    APPOINTMENTS_READ = "appointments:read"
    APPOINTMENTS_PRESCRIBE = "appointments:prescribe"

    # Medical records
    RECORDS_READ_OWN = "records:read:own"
    RECORDS_READ_ALL = "records:read:all"
    RECORDS_WRITE = "records:write"

    # User management
    USERS_READ = "users:read"
    USERS_WRITE = "users:write"

    # System administration
    ADMIN_ALL = "admin:all"


# Role to permissions mapping
ROLE_PERMISSIONS: dict[UserRole, set[Permission]] = {
    UserRole.PATIENT: {
        Permission.TRIAGE_SUBMIT,
        Permission.TRIAGE_READ_OWN,
        Permission.CHAT,
        Permission.APPOINTMENTS_BOOK,
        Permission.APPOINTMENTS_READ,
        Permission.RECORDS_READ_OWN,
    },
    UserRole.DOCTOR: {
        Permission.TRIAGE_READ_ALL,
        Permission.TRIAGE_REVIEW,
        Permission.CHAT,
        Permission.APPOINTMENTS_READ,
        Permission.APPOINTMENTS_PRESCRIBE,
        Permission.RECORDS_READ_ALL,
        Permission.RECORDS_WRITE,
    },
    UserRole.ADMIN: {
        # Admins oversee but never review triages or write clinical records
        Permission.TRIAGE_READ_ALL,
        Permission.CHAT,
        Permission.APPOINTMENTS_READ,
        Permission.RECORDS_READ_ALL,
        Permission.USERS_READ,
        Permission.USERS_WRITE,
        Permission.ADMIN_ALL,
    },
}


def _normalize(role: UserRole | str) -> UserRole | None:
    # Roles come back from the database as plain strings
    try:
        return UserRole(role)
    except ValueError:
        return None


class RBACService:
    """Service for checking role-based permissions."""

    @staticmethod
    def get_permissions(role: UserRole | str) -> set[Permission]:
        """Get all permissions for a role.

        Args:
            role: User role

        Returns:
            Set of permissions granted to the role
        """
        return ROLE_PERMISSIONS.get(_normalize(role), set())

    @staticmethod
    def has_permission(role: UserRole | str, permission: Permission) -> bool:
        """Check if a role has a specific permission.

        Args:
            role: User role to check
            permission: Permission to verify

        Returns:
            True if role has permission
        """
        return permission in RBACService.get_permissions(role)

    @staticmethod
    def has_any_permission(role: UserRole | str, permissions: list[Permission]) -> bool:
        """Check if a role has any of the specified permissions."""
        role_permissions = RBACService.get_permissions(role)
        return any(p in role_permissions for p in permissions)

    @staticmethod
    def has_all_permissions(role: UserRole | str, permissions: list[Permission]) -> bool:
        """Check if a role has all specified permissions.

        Args:
            role: User role to check
            permissions: List of permissions (all must match)

        Returns:
            True if role has all permissions
        """
        role_permissions = RBACService.get_permissions(role)
        return all(p in role_permissions for p in permissions)
