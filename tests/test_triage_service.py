"""Tests for triage submission and doctor review."""

from datetime import timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ForbiddenError, NotFoundError, ValidationError
from app.models.triage import TriageStatus
from app.models.user import User, UserRole
from app.rules.engine import get_classifier
from app.services.triage import TriageService
from app.utils.time import as_utc, utc_now


@pytest.fixture
def service(async_session: AsyncSession) -> TriageService:
    return TriageService(async_session)


class TestSubmit:
    """Tests for triage submission."""

    async def test_submit_stores_assessment(
        self, service: TriageService, patient_user: User
    ) -> None:
        triage = await service.submit(
            patient_id=patient_user.id,
            symptoms=[{"name": "Chest Pain", "severity": "moderate"}],
            additional_notes="Started an hour ago",
        )

        assert triage.id is not None
        assert triage.patient_id == patient_user.id
        assert triage.status == TriageStatus.PENDING.value
        assert triage.risk_level == "critical"
        assert triage.urgency == "emergency"
        assert triage.rules_fired == ["CRITICAL_SYMPTOM"]
        assert triage.symptoms[0]["name"] == "Chest Pain"
        assert triage.reviewed_by is None
        assert triage.reviewed_at is None

    async def test_submit_records_ruleset_version_and_hash(
        self, service: TriageService, patient_user: User
    ) -> None:
        classifier = get_classifier()

        triage = await service.submit(
            patient_id=patient_user.id,
            symptoms=[{"name": "rash", "severity": "mild"}],
        )

        assert triage.ruleset_version == classifier.ruleset_version
        assert triage.ruleset_hash == classifier.ruleset_hash

    async def test_unmeasured_vitals_are_not_stored(
        self, service: TriageService, patient_user: User
    ) -> None:
        triage = await service.submit(
            patient_id=patient_user.id,
            symptoms=[{"name": "headache", "severity": "mild"}],
            vital_signs={
                "temperature": 104,
                "heart_rate": None,
                "blood_pressure": {"systolic": None, "diastolic": None},
            },
        )

        assert triage.vital_signs == {"temperature": 104}
        assert triage.risk_level == "high"
        assert triage.urgency == "urgent"

    async def test_empty_symptoms_rejected(
        self, service: TriageService, patient_user: User
    ) -> None:
        with pytest.raises(ValidationError) as exc:
            await service.submit(patient_id=patient_user.id, symptoms=[])

        assert exc.value.detail == "At least one symptom is required"

    @pytest.mark.parametrize(
        "symptom",
        [
            {"name": "cough"},
            {"severity": "mild"},
            {"name": "   ", "severity": "mild"},
        ],
    )
    async def test_incomplete_symptom_rejected(
        self, service: TriageService, patient_user: User, symptom: dict
    ) -> None:
        with pytest.raises(ValidationError) as exc:
            await service.submit(
                patient_id=patient_user.id,
                symptoms=[{"name": "rash", "severity": "mild"}, symptom],
            )

        assert exc.value.detail == "Symptom 2 must have a name and severity"

    async def test_unknown_severity_rejected(
        self, service: TriageService, patient_user: User
    ) -> None:
        with pytest.raises(ValidationError):
            await service.submit(
                patient_id=patient_user.id,
                symptoms=[{"name": "rash", "severity": "excruciating"}],
            )


class TestReview:
    """Tests for doctor review."""

    async def _submit(self, service: TriageService, patient: User):
        return await service.submit(
            patient_id=patient.id,
            symptoms=[{"name": "cough", "severity": "mild"}],
        )

    async def test_review_sets_reviewer_and_time(
        self, service: TriageService, patient_user: User, doctor_user: User
    ) -> None:
        triage = await self._submit(service, patient_user)

        reviewed = await service.review(triage.id, doctor_user.id, "Rest and fluids")

        assert reviewed.status == TriageStatus.REVIEWED.value
        assert reviewed.reviewed_by == doctor_user.id
        assert reviewed.doctor_notes == "Rest and fluids"
        assert as_utc(reviewed.reviewed_at) >= as_utc(reviewed.created_at)

    async def test_review_does_not_change_assessment(
        self, service: TriageService, patient_user: User, doctor_user: User
    ) -> None:
        triage = await self._submit(service, patient_user)
        before = (triage.risk_level, triage.urgency, list(triage.recommendations))

        reviewed = await service.review(triage.id, doctor_user.id, "Seen", status="completed")

        assert reviewed.status == TriageStatus.COMPLETED.value
        assert (reviewed.risk_level, reviewed.urgency, reviewed.recommendations) == before

    async def test_second_review_replaces_notes(
        self,
        service: TriageService,
        patient_user: User,
        doctor_user: User,
        user_factory,
    ) -> None:
        second_doctor = await user_factory("second.doctor@carebridge.local", UserRole.DOCTOR)
        triage = await self._submit(service, patient_user)
        await service.review(triage.id, doctor_user.id, "First look")

        reviewed = await service.review(triage.id, second_doctor.id, "Second opinion")

        assert reviewed.doctor_notes == "Second opinion"
        assert reviewed.reviewed_by == second_doctor.id

    async def test_review_back_to_pending_rejected(
        self, service: TriageService, patient_user: User, doctor_user: User
    ) -> None:
        triage = await self._submit(service, patient_user)

        with pytest.raises(ValidationError):
            await service.review(triage.id, doctor_user.id, "Notes", status="pending")

    async def test_review_unknown_triage(
        self, service: TriageService, doctor_user: User
    ) -> None:
        with pytest.raises(NotFoundError) as exc:
            await service.review(
                "00000000-0000-0000-0000-000000000000", doctor_user.id, "Notes"
            )

        assert exc.value.detail == "Triage not found"


class TestVisibility:
    """Tests for reading triages."""

    async def test_patient_cannot_read_other_patients_triage(
        self, service: TriageService, patient_user: User, other_patient: User
    ) -> None:
        triage = await service.submit(
            patient_id=patient_user.id,
            symptoms=[{"name": "rash", "severity": "mild"}],
        )

        with pytest.raises(ForbiddenError):
            await service.get(triage.id, other_patient)

    async def test_doctor_can_read_any_triage(
        self, service: TriageService, patient_user: User, doctor_user: User
    ) -> None:
        triage = await service.submit(
            patient_id=patient_user.id,
            symptoms=[{"name": "rash", "severity": "mild"}],
        )

        fetched = await service.get(triage.id, doctor_user)

        assert fetched.id == triage.id

    async def test_list_mine_only_returns_own(
        self, service: TriageService, patient_user: User, other_patient: User
    ) -> None:
        for name in ("rash", "cough"):
            await service.submit(
                patient_id=patient_user.id, symptoms=[{"name": name, "severity": "mild"}]
            )
        await service.submit(
            patient_id=other_patient.id, symptoms=[{"name": "fatigue", "severity": "mild"}]
        )

        triages, total = await service.list_mine(patient_user.id)

        assert total == 2
        assert {t.patient_id for t in triages} == {patient_user.id}

    async def test_list_all_filters(
        self, service: TriageService, patient_user: User, doctor_user: User
    ) -> None:
        critical = await service.submit(
            patient_id=patient_user.id, symptoms=[{"name": "seizure", "severity": "mild"}]
        )
        await service.submit(
            patient_id=patient_user.id, symptoms=[{"name": "runny nose", "severity": "mild"}]
        )
        await service.review(critical.id, doctor_user.id, "Sent to ER")

        by_risk, risk_total = await service.list_all(risk_level="critical")
        pending, pending_total = await service.list_all(status="pending")

        assert risk_total == 1
        assert by_risk[0].id == critical.id
        assert pending_total == 1
        assert pending[0].risk_level == "low"

    async def test_lists_are_newest_first(
        self,
        service: TriageService,
        async_session: AsyncSession,
        patient_user: User,
    ) -> None:
        names = ("rash", "cough", "fatigue")
        triages = [
            await service.submit(
                patient_id=patient_user.id, symptoms=[{"name": name, "severity": "mild"}]
            )
            for name in names
        ]
        # submission order differs from creation time order
        base = utc_now() - timedelta(days=1)
        for triage, offset in zip(triages, (2, 0, 1)):
            triage.created_at = base + timedelta(hours=offset)
        await async_session.commit()

        mine, _ = await service.list_mine(patient_user.id)
        everything, _ = await service.list_all()

        expected = [triages[0].id, triages[2].id, triages[1].id]
        assert [t.id for t in mine] == expected
        assert [t.id for t in everything] == expected

    async def test_stats_are_zero_filled(
        self, service: TriageService, patient_user: User
    ) -> None:
        await service.submit(
            patient_id=patient_user.id, symptoms=[{"name": "cough", "severity": "mild"}]
        )

        stats = await service.stats()

        assert stats["total"] == 1
        assert stats["by_risk_level"] == {"low": 0, "medium": 1, "high": 0, "critical": 0}
        assert stats["by_status"] == {"pending": 1, "reviewed": 0, "completed": 0}
        assert stats["by_urgency"]["routine"] == 1
