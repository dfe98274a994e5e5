"""Medical record endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from app.api.deps import CurrentUser, DbSession, require_permissions
from app.models.user import User
from app.schemas.record import RecordCreate, RecordRead, RecordUpdate
from app.services.rbac import Permission
from app.services.records import MedicalRecordService

router = APIRouter()

RecordWriter = Annotated[User, Depends(require_permissions(Permission.RECORDS_WRITE))]


@router.post(
    "",
    response_model=RecordRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add medical record",
)
async def create_record(data: RecordCreate, session: DbSession, user: RecordWriter) -> RecordRead:
    """Add a record to a patient's history.

    Raises:
        NotFoundError: If the patient does not exist
    """
    record = await MedicalRecordService(session).create(user.id, data)
    return RecordRead.model_validate(record)


@router.get(
    "/mine",
    response_model=list[RecordRead],
    summary="My medical records",
    description="The caller's own non-private records",
)
async def list_my_records(
    session: DbSession,
    user: Annotated[User, Depends(require_permissions(Permission.RECORDS_READ_OWN))],
) -> list[RecordRead]:
    records = await MedicalRecordService(session).list_mine(user.id)
    return [RecordRead.model_validate(r) for r in records]


@router.get(
    "/patient/{patient_id}",
    response_model=list[RecordRead],
    summary="Patient medical records",
)
async def list_patient_records(
    patient_id: str,
    session: DbSession,
    user: CurrentUser,
) -> list[RecordRead]:
    """Records for one patient.

    Patients may only list their own, and never see private records.
    """
    records = await MedicalRecordService(session).list_for_patient(patient_id, user)
    return [RecordRead.model_validate(r) for r in records]


@router.get(
    "/{record_id}",
    response_model=RecordRead,
    summary="Get medical record",
)
async def get_record(record_id: str, session: DbSession, user: CurrentUser) -> RecordRead:
    record = await MedicalRecordService(session).get(record_id, user)
    return RecordRead.model_validate(record)


@router.put(
    "/{record_id}",
    response_model=RecordRead,
    summary="Update medical record",
)
async def update_record(
    record_id: str,
    data: RecordUpdate,
    session: DbSession,
    user: RecordWriter,
) -> RecordRead:
    record = await MedicalRecordService(session).update(record_id, user, data)
    return RecordRead.model_validate(record)
