"""Triage service orchestrating symptom classification and review."""

import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ForbiddenError, NotFoundError, ValidationError
from app.core.logging import audit_logger
from app.models.triage import Triage, TriageStatus
from app.models.user import User, UserRole
from app.rules.engine import SymptomClassifier, get_classifier
from app.rules.models import RiskLevel, Severity, Symptom, Urgency, VitalSigns
from app.utils.time import utc_now

logger = logging.getLogger(__name__)


def _compact(data: dict[str, Any] | None) -> dict[str, Any] | None:
    """Drop unmeasured (None) readings, recursing into nested dicts."""
    if not data:
        return None
    cleaned: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            value = _compact(value)
        if value is not None:
            cleaned[key] = value
    return cleaned or None


class TriageService:
    """Service for submitting and reviewing triages.

    Orchestrates:
    1. Input validation
    2. Classifier evaluation
    3. Persistence of the assessment with its ruleset version and hash
    4. Doctor review
    """

    def __init__(
        self,
        session: AsyncSession,
        classifier: SymptomClassifier | None = None,
    ) -> None:
        """Initialize triage service.

        Args:
            session: Database session
            classifier: Classifier to use (defaults to the configured ruleset)
        """
        self.session = session
        self.classifier = classifier or get_classifier()

    async def submit(
        self,
        patient_id: str,
        symptoms: list[dict[str, Any]],
        vital_signs: dict[str, Any] | None = None,
        additional_notes: str | None = None,
    ) -> Triage:
        """Assess symptoms and persist a pending triage.

        Args:
            patient_id: Submitting patient
            symptoms: Reported symptoms, each with name and severity
            vital_signs: Optional vitals
            additional_notes: Free text from the patient

        Returns:
            The persisted Triage

        Raises:
            ValidationError: If symptoms are empty or malformed
        """
        parsed = self._parse_symptoms(symptoms)
        vitals_data = _compact(vital_signs)
        assessment = self.classifier.assess(parsed, VitalSigns.from_dict(vitals_data))

        triage = Triage(
            patient_id=patient_id,
            symptoms=[s.to_dict() for s in parsed],
            vital_signs=vitals_data,
            additional_notes=additional_notes,
            risk_level=assessment.risk_level.value,
            urgency=assessment.urgency.value,
            recommendations=list(assessment.recommendations),
            possible_conditions=list(assessment.possible_conditions),
            immediate_actions=list(assessment.immediate_actions),
            rules_fired=list(assessment.rules_fired),
            ruleset_version=self.classifier.ruleset_version,
            ruleset_hash=self.classifier.ruleset_hash,
            status=TriageStatus.PENDING.value,
        )
        self.session.add(triage)
        await self.session.commit()
        await self.session.refresh(triage)

        audit_logger.log(
            action="TRIAGE_SUBMITTED",
            actor_id=patient_id,
            entity_type="triage",
            entity_id=triage.id,
            metadata={
                "risk_level": triage.risk_level,
                "urgency": triage.urgency,
                "rules_fired": triage.rules_fired,
                "ruleset_version": triage.ruleset_version,
            },
        )
        if assessment.risk_level is RiskLevel.CRITICAL:
            logger.warning(f"Critical triage {triage.id[:8]} submitted by patient {patient_id[:8]}")

        return triage

    def _parse_symptoms(self, symptoms: list[dict[str, Any]]) -> list[Symptom]:
        if not symptoms:
            raise ValidationError("At least one symptom is required")

        parsed = []
        for position, raw in enumerate(symptoms, start=1):
            name = (raw.get("name") or "").strip()
            severity = raw.get("severity")
            if not name or not severity:
                raise ValidationError(f"Symptom {position} must have a name and severity")
            try:
                severity = Severity(severity)
            except ValueError:
                raise ValidationError(f"Symptom {position} has an unknown severity: {severity}")
            parsed.append(
                Symptom(
                    name=name,
                    severity=severity,
                    duration=raw.get("duration"),
                    description=raw.get("description"),
                )
            )
        return parsed

    async def _get_or_404(self, triage_id: str) -> Triage:
        result = await self.session.execute(select(Triage).where(Triage.id == triage_id))
        triage = result.scalar_one_or_none()
        if not triage:
            raise NotFoundError("Triage not found")
        return triage

    async def review(
        self,
        triage_id: str,
        doctor_id: str,
        doctor_notes: str,
        status: TriageStatus | str | None = None,
    ) -> Triage:
        """Record a doctor's review.

        A reviewed triage may be reviewed again; the later review
        replaces the notes, reviewer and timestamp.

        Args:
            triage_id: Triage to review
            doctor_id: Reviewing doctor
            doctor_notes: Review notes
            status: Target status, REVIEWED when omitted

        Returns:
            Updated Triage

        Raises:
            NotFoundError: If the triage does not exist
            ValidationError: If the target status is PENDING or unknown
        """
        triage = await self._get_or_404(triage_id)

        try:
            new_status = TriageStatus(status) if status else TriageStatus.REVIEWED
        except ValueError:
            raise ValidationError(f"Unknown triage status: {status}")
        if new_status is TriageStatus.PENDING:
            raise ValidationError("A triage cannot be moved back to pending")

        previous_status = triage.status
        triage.reviewed_by = doctor_id
        triage.reviewed_at = utc_now()
        triage.doctor_notes = doctor_notes
        triage.status = new_status.value

        await self.session.commit()
        await self.session.refresh(triage)

        audit_logger.log(
            action="TRIAGE_REVIEWED",
            actor_id=doctor_id,
            entity_type="triage",
            entity_id=triage.id,
            metadata={"from_status": previous_status, "to_status": new_status.value},
        )
        return triage

    async def get(self, triage_id: str, requesting_user: User) -> Triage:
        """Fetch a triage visible to the requesting user.

        Raises:
            NotFoundError: If the triage does not exist
            ForbiddenError: If a patient asks for someone else's triage
        """
        triage = await self._get_or_404(triage_id)

        if UserRole(requesting_user.role) == UserRole.PATIENT and triage.patient_id != requesting_user.id:
            raise ForbiddenError("Not authorized to view this triage")

        return triage

    async def list_mine(
        self,
        patient_id: str,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[Triage], int]:
        """A patient's triages, newest first, plus the total count."""
        return await self._paginate([Triage.patient_id == patient_id], page, limit)

    async def list_all(
        self,
        status: TriageStatus | str | None = None,
        risk_level: RiskLevel | str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[Triage], int]:
        """All triages with optional status and risk filters, newest first."""
        conditions = []
        if status:
            conditions.append(Triage.status == TriageStatus(status).value)
        if risk_level:
            conditions.append(Triage.risk_level == RiskLevel(risk_level).value)
        return await self._paginate(conditions, page, limit)

    async def _paginate(
        self,
        conditions: list,
        page: int,
        limit: int,
    ) -> tuple[list[Triage], int]:
        total = await self.session.scalar(
            select(func.count()).select_from(Triage).where(*conditions)
        )
        result = await self.session.execute(
            select(Triage)
            .where(*conditions)
            .order_by(Triage.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def stats(self) -> dict[str, Any]:
        """Counts by risk level, status and urgency, plus the total."""

        async def grouped(column, values) -> dict[str, int]:
            result = await self.session.execute(
                select(column, func.count()).group_by(column)
            )
            counts = {value: 0 for value in values}
            counts.update({key: count for key, count in result.all()})
            return counts

        total = await self.session.scalar(select(func.count()).select_from(Triage))

        return {
            "total": total or 0,
            "by_risk_level": await grouped(Triage.risk_level, [r.value for r in RiskLevel]),
            "by_status": await grouped(Triage.status, [s.value for s in TriageStatus]),
            "by_urgency": await grouped(Triage.urgency, [u.value for u in Urgency]),
        }
