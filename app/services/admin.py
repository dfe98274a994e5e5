"""Administrative account management service."""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundError, ValidationError
from app.core.logging import audit_logger
from app.models.scheduling import Appointment, AppointmentStatus
from app.models.triage import Triage
from app.models.user import User, UserRole
from app.schemas.user import UserAdminUpdate

logger = logging.getLogger(__name__)


class AdminService:
    """Service for admin dashboards and account changes.

    Deactivating or deleting a user only affects future sign-ins and
    future realtime connections; open connections stay up.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def stats(self) -> dict:
        """Platform overview counts."""

        async def count(model, *conditions) -> int:
            return await self.session.scalar(
                select(func.count()).select_from(model).where(*conditions)
            ) or 0

        live_user = (User.is_active.is_(True), User.is_deleted.is_(False))

        return {
            "users": {
                "total": await count(User, *live_user),
                "patients": await count(User, User.role == UserRole.PATIENT.value, *live_user),
                "doctors": await count(User, User.role == UserRole.DOCTOR.value, *live_user),
                "admins": await count(User, User.role == UserRole.ADMIN.value, *live_user),
            },
            "appointments": {
                "total": await count(Appointment),
                "pending": await count(
                    Appointment, Appointment.status == AppointmentStatus.PENDING.value
                ),
                "completed": await count(
                    Appointment, Appointment.status == AppointmentStatus.COMPLETED.value
                ),
            },
            "triages": await count(Triage),
        }

    async def list_users(
        self,
        role: UserRole | str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[User], int]:
        """Non-deleted users, newest first, optionally filtered by role."""
        conditions = [User.is_deleted.is_(False)]
        if role:
            conditions.append(User.role == UserRole(role).value)

        total = await self.session.scalar(select(func.count()).select_from(User).where(*conditions))
        result = await self.session.execute(
            select(User)
            .where(*conditions)
            .order_by(User.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def _get_or_404(self, user_id: str) -> User:
        user = await self.session.scalar(
            select(User).where(User.id == user_id, User.is_deleted.is_(False))
        )
        if not user:
            raise NotFoundError("User not found")
        return user

    async def update_user(self, user_id: str, admin_id: str, data: UserAdminUpdate) -> User:
        user = await self._get_or_404(user_id)

        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if "role" in changes:
            changes["role"] = UserRole(changes["role"]).value
        for field, value in changes.items():
            setattr(user, field, value)

        await self.session.commit()
        await self.session.refresh(user)

        audit_logger.log(
            action="USER_UPDATED",
            actor_id=admin_id,
            entity_type="user",
            entity_id=user.id,
            metadata={"fields": sorted(changes)},
        )
        return user

    async def toggle_status(self, user_id: str, admin_id: str) -> User:
        """Flip a user's active flag.

        Raises:
            ValidationError: If an admin tries to deactivate themselves
        """
        if user_id == admin_id:
            raise ValidationError("Cannot change your own account status")

        user = await self._get_or_404(user_id)
        user.is_active = not user.is_active
        await self.session.commit()
        await self.session.refresh(user)

        audit_logger.log(
            action="USER_ACTIVATED" if user.is_active else "USER_DEACTIVATED",
            actor_id=admin_id,
            entity_type="user",
            entity_id=user.id,
        )
        return user

    async def verify_doctor(self, doctor_id: str, admin_id: str) -> User:
        user = await self._get_or_404(doctor_id)
        if UserRole(user.role) != UserRole.DOCTOR:
            raise NotFoundError("Doctor not found")

        user.is_verified = True
        await self.session.commit()
        await self.session.refresh(user)

        audit_logger.log(
            action="DOCTOR_VERIFIED",
            actor_id=admin_id,
            entity_type="user",
            entity_id=user.id,
        )
        return user

    async def delete_user(self, user_id: str, admin_id: str) -> None:
        """Soft delete an account; it can no longer sign in.

        Raises:
            ValidationError: If an admin tries to delete themselves
        """
        if user_id == admin_id:
            raise ValidationError("Cannot delete your own account")

        user = await self._get_or_404(user_id)
        user.soft_delete(deleted_by_id=admin_id)
        user.is_active = False
        await self.session.commit()

        audit_logger.log(
            action="USER_DELETED",
            actor_id=admin_id,
            entity_type="user",
            entity_id=user.id,
        )
        logger.info(f"User {user_id[:8]} soft-deleted by {admin_id[:8]}")
