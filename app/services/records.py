"""Medical record service."""

from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ForbiddenError, NotFoundError
from app.core.logging import audit_logger
from app.models.medical_record import MedicalRecord
from app.models.user import User, UserRole
from app.schemas.record import RecordCreate, RecordUpdate


class MedicalRecordService:
    """Service for patient medical history.

    Patients only ever see their own non-private records. Doctors and
    admins see everything.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, doctor_id: str, data: RecordCreate) -> MedicalRecord:
        """Add a record to a patient's history.

        Raises:
            NotFoundError: If the patient does not exist
        """
        patient = await self.session.scalar(
            select(User).where(
                User.id == data.patient_id,
                User.role == UserRole.PATIENT.value,
                User.is_deleted.is_(False),
            )
        )
        if not patient:
            raise NotFoundError("Patient not found")

        record = MedicalRecord(
            patient_id=data.patient_id,
            doctor_id=doctor_id,
            related_appointment_id=data.related_appointment_id,
            record_type=data.record_type.value,
            title=data.title,
            description=data.description,
            record_date=data.record_date or date.today(),
            details=data.details,
            is_private=data.is_private,
            tags=list(data.tags),
        )
        self.session.add(record)
        await self.session.commit()
        await self.session.refresh(record)

        audit_logger.log(
            action="RECORD_CREATED",
            actor_id=doctor_id,
            entity_type="medical_record",
            entity_id=record.id,
            metadata={"patient_id": data.patient_id, "record_type": record.record_type},
        )
        return record

    async def _list(self, patient_id: str, include_private: bool) -> list[MedicalRecord]:
        query = select(MedicalRecord).where(
            MedicalRecord.patient_id == patient_id,
            MedicalRecord.is_deleted.is_(False),
        )
        if not include_private:
            query = query.where(MedicalRecord.is_private.is_(False))

        result = await self.session.execute(
            query.order_by(MedicalRecord.record_date.desc(), MedicalRecord.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_mine(self, patient_id: str) -> list[MedicalRecord]:
        return await self._list(patient_id, include_private=False)

    async def list_for_patient(self, patient_id: str, user: User) -> list[MedicalRecord]:
        """Records for one patient as visible to the requesting user.

        Raises:
            ForbiddenError: If a patient asks for someone else's history
        """
        if UserRole(user.role) == UserRole.PATIENT:
            if user.id != patient_id:
                raise ForbiddenError("Not authorized to view these records")
            return await self._list(patient_id, include_private=False)

        return await self._list(patient_id, include_private=True)

    async def get(self, record_id: str, user: User) -> MedicalRecord:
        """Fetch a single record.

        Raises:
            NotFoundError: If the record does not exist
            ForbiddenError: If a patient asks for another patient's record
                or a private one
        """
        record = await self.session.scalar(
            select(MedicalRecord).where(
                MedicalRecord.id == record_id,
                MedicalRecord.is_deleted.is_(False),
            )
        )
        if not record:
            raise NotFoundError("Medical record not found")

        if UserRole(user.role) == UserRole.PATIENT and (
            record.patient_id != user.id or record.is_private
        ):
            raise ForbiddenError("Not authorized to view this record")

        return record

    async def update(self, record_id: str, doctor: User, data: RecordUpdate) -> MedicalRecord:
        record = await self.get(record_id, doctor)

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(record, field, value)

        await self.session.commit()
        await self.session.refresh(record)

        audit_logger.log(
            action="RECORD_UPDATED",
            actor_id=doctor.id,
            entity_type="medical_record",
            entity_id=record.id,
        )
        return record
