"""Appointment endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from app.api.deps import DbSession, require_permissions
from app.models.user import User
from app.schemas.appointment import (
    AppointmentCreate,
    AppointmentRead,
    AppointmentStatusUpdate,
    Prescription,
)
from app.schemas.user import DoctorRead
from app.services.rbac import Permission
from app.services.scheduling import SchedulingService

router = APIRouter()


@router.post(
    "",
    response_model=AppointmentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Book appointment",
)
async def book_appointment(
    data: AppointmentCreate,
    session: DbSession,
    user: Annotated[User, Depends(require_permissions(Permission.APPOINTMENTS_BOOK))],
) -> AppointmentRead:
    """Book an appointment with an active doctor.

    Raises:
        NotFoundError: If the doctor does not exist or is unavailable
    """
    appointment = await SchedulingService(session).book(user.id, data)
    return AppointmentRead.model_validate(appointment)


@router.get(
    "/mine",
    response_model=list[AppointmentRead],
    summary="My appointments",
)
async def list_my_appointments(
    session: DbSession,
    user: Annotated[User, Depends(require_permissions(Permission.APPOINTMENTS_READ))],
) -> list[AppointmentRead]:
    appointments = await SchedulingService(session).list_for(user)
    return [AppointmentRead.model_validate(a) for a in appointments]


@router.get(
    "/doctors",
    response_model=list[DoctorRead],
    summary="Available doctors",
    dependencies=[Depends(require_permissions(Permission.APPOINTMENTS_READ))],
)
async def list_doctors(session: DbSession) -> list[DoctorRead]:
    doctors = await SchedulingService(session).list_doctors()
    return [DoctorRead.model_validate(d) for d in doctors]


@router.put(
    "/{appointment_id}/status",
    response_model=AppointmentRead,
    summary="Update appointment status",
)
async def update_appointment_status(
    appointment_id: str,
    data: AppointmentStatusUpdate,
    session: DbSession,
    user: Annotated[User, Depends(require_permissions(Permission.APPOINTMENTS_READ))],
) -> AppointmentRead:
    """Confirm, cancel, complete or mark a no-show.

    Raises:
        NotFoundError: If the appointment does not exist
        ForbiddenError: If the caller is neither a participant nor an admin
    """
    appointment = await SchedulingService(session).update_status(
        appointment_id=appointment_id,
        user=user,
        status=data.status,
        cancellation_reason=data.cancellation_reason,
        notes=data.notes,
    )
    return AppointmentRead.model_validate(appointment)


@router.put(
    "/{appointment_id}/prescription",
    response_model=AppointmentRead,
    summary="Add prescription",
    description="Attach a prescription and complete the appointment",
)
async def add_prescription(
    appointment_id: str,
    data: Prescription,
    session: DbSession,
    user: Annotated[User, Depends(require_permissions(Permission.APPOINTMENTS_PRESCRIBE))],
) -> AppointmentRead:
    appointment = await SchedulingService(session).prescribe(appointment_id, user.id, data)
    return AppointmentRead.model_validate(appointment)
