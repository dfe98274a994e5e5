"""Appointment booking and consultation service."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ForbiddenError, NotFoundError, ValidationError
from app.core.logging import audit_logger
from app.models.scheduling import Appointment, AppointmentStatus
from app.models.user import User, UserRole
from app.schemas.appointment import AppointmentCreate, Prescription
from app.utils.time import utc_now

logger = logging.getLogger(__name__)


class SchedulingService:
    """Service for booking appointments and recording their outcome."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _active_doctor(self, doctor_id: str) -> User | None:
        return await self.session.scalar(
            select(User).where(
                User.id == doctor_id,
                User.role == UserRole.DOCTOR.value,
                User.is_active.is_(True),
                User.is_deleted.is_(False),
            )
        )

    async def _get_or_404(self, appointment_id: str) -> Appointment:
        appointment = await self.session.scalar(
            select(Appointment).where(Appointment.id == appointment_id)
        )
        if not appointment:
            raise NotFoundError("Appointment not found")
        return appointment

    async def book(self, patient_id: str, data: AppointmentCreate) -> Appointment:
        """Book a pending appointment with an active doctor.

        Args:
            patient_id: Booking patient
            data: Booking details

        Returns:
            Created Appointment

        Raises:
            NotFoundError: If the doctor does not exist or is unavailable
        """
        if not await self._active_doctor(data.doctor_id):
            raise NotFoundError("Doctor not found or unavailable")

        appointment = Appointment(
            patient_id=patient_id,
            doctor_id=data.doctor_id,
            appointment_date=data.appointment_date,
            appointment_time=data.appointment_time,
            appointment_type=data.appointment_type.value,
            status=AppointmentStatus.PENDING.value,
            reason=data.reason,
            symptoms=list(data.symptoms),
        )
        self.session.add(appointment)
        await self.session.commit()
        await self.session.refresh(appointment)

        logger.info(
            f"Appointment {appointment.id[:8]} booked for {data.appointment_date} "
            f"{data.appointment_time}"
        )
        return appointment

    async def list_for(self, user: User) -> list[Appointment]:
        """Appointments seen from the user's side, latest first."""
        query = select(Appointment)
        role = UserRole(user.role)
        if role == UserRole.DOCTOR:
            query = query.where(Appointment.doctor_id == user.id)
        elif role == UserRole.PATIENT:
            query = query.where(Appointment.patient_id == user.id)

        result = await self.session.execute(
            query.order_by(
                Appointment.appointment_date.desc(),
                Appointment.appointment_time.desc(),
            )
        )
        return list(result.scalars().all())

    async def list_doctors(self) -> list[User]:
        """Verified, active doctors available for booking."""
        result = await self.session.execute(
            select(User)
            .where(
                User.role == UserRole.DOCTOR.value,
                User.is_verified.is_(True),
                User.is_active.is_(True),
                User.is_deleted.is_(False),
            )
            .order_by(User.last_name, User.first_name)
        )
        return list(result.scalars().all())

    async def update_status(
        self,
        appointment_id: str,
        user: User,
        status: AppointmentStatus,
        cancellation_reason: str | None = None,
        notes: str | None = None,
    ) -> Appointment:
        """Change an appointment's status.

        Raises:
            NotFoundError: If the appointment does not exist
            ForbiddenError: If the user is neither a participant nor an admin
        """
        appointment = await self._get_or_404(appointment_id)

        if UserRole(user.role) != UserRole.ADMIN and not appointment.has_participant(user.id):
            raise ForbiddenError("Not authorized to update this appointment")

        status = AppointmentStatus(status)
        if status == AppointmentStatus.CANCELLED:
            appointment.cancelled_by = user.id
            appointment.cancellation_reason = cancellation_reason
            appointment.cancelled_at = utc_now()
        if notes is not None:
            appointment.notes = notes

        appointment.status = status.value
        await self.session.commit()
        await self.session.refresh(appointment)
        return appointment

    async def prescribe(
        self,
        appointment_id: str,
        doctor_id: str,
        prescription: Prescription,
    ) -> Appointment:
        """Attach a prescription and mark the appointment completed.

        Raises:
            NotFoundError: If the appointment does not exist
            ForbiddenError: If the doctor is not the appointment's doctor
            ValidationError: If the appointment was cancelled
        """
        appointment = await self._get_or_404(appointment_id)

        if appointment.doctor_id != doctor_id:
            raise ForbiddenError("Only the appointment's doctor can prescribe")
        if appointment.status == AppointmentStatus.CANCELLED.value:
            raise ValidationError("Cannot prescribe for a cancelled appointment")

        appointment.prescription = prescription.model_dump(mode="json")
        appointment.status = AppointmentStatus.COMPLETED.value
        await self.session.commit()
        await self.session.refresh(appointment)

        audit_logger.log(
            action="PRESCRIPTION_ADDED",
            actor_id=doctor_id,
            entity_type="appointment",
            entity_id=appointment.id,
            metadata={"medications": len(prescription.medications)},
        )
        return appointment
