"""Symptom triage endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from app.api.deps import CurrentUser, DbSession, PageParams, require_permissions
from app.models.triage import TriageStatus
from app.models.user import User
from app.rules.models import RiskLevel
from app.schemas.common import Page, Pagination
from app.schemas.triage import TriageCreate, TriageRead, TriageReview, TriageStats
from app.services.rbac import Permission
from app.services.triage import TriageService

router = APIRouter()


def _page(triages, total: int, page: int, limit: int) -> Page[TriageRead]:
    return Page[TriageRead](
        items=[TriageRead.model_validate(t) for t in triages],
        pagination=Pagination.build(total, page, limit),
    )


@router.post(
    "",
    response_model=TriageRead,
    status_code=status.HTTP_201_CREATED,
    summary="Submit symptoms",
    description="Assess reported symptoms and vitals and store a pending triage",
)
async def submit_triage(
    data: TriageCreate,
    session: DbSession,
    user: Annotated[User, Depends(require_permissions(Permission.TRIAGE_SUBMIT))],
) -> TriageRead:
    """Submit symptoms for a deterministic risk assessment.

    Args:
        data: Symptoms, optional vitals and notes
        session: Database session
        user: Submitting patient

    Returns:
        The stored triage with its assessment

    Raises:
        ValidationError: If symptoms are empty or a symptom lacks name or severity
    """
    triage = await TriageService(session).submit(
        patient_id=user.id,
        symptoms=[s.model_dump() for s in data.symptoms],
        vital_signs=data.vital_signs.model_dump() if data.vital_signs else None,
        additional_notes=data.additional_notes,
    )
    return TriageRead.model_validate(triage)


@router.get(
    "/mine",
    response_model=Page[TriageRead],
    summary="My triages",
)
async def list_my_triages(
    session: DbSession,
    pagination: PageParams,
    user: Annotated[User, Depends(require_permissions(Permission.TRIAGE_READ_OWN))],
) -> Page[TriageRead]:
    page, limit = pagination
    triages, total = await TriageService(session).list_mine(user.id, page, limit)
    return _page(triages, total, page, limit)


@router.get(
    "/stats",
    response_model=TriageStats,
    summary="Triage statistics",
    dependencies=[Depends(require_permissions(Permission.TRIAGE_READ_ALL))],
)
async def triage_stats(session: DbSession) -> TriageStats:
    return TriageStats(**await TriageService(session).stats())


@router.get(
    "/all",
    response_model=Page[TriageRead],
    summary="All triages",
    description="Doctor and admin view with optional status and risk filters",
    dependencies=[Depends(require_permissions(Permission.TRIAGE_READ_ALL))],
)
async def list_all_triages(
    session: DbSession,
    pagination: PageParams,
    status_filter: Annotated[TriageStatus | None, Query(alias="status")] = None,
    risk_level: Annotated[RiskLevel | None, Query()] = None,
) -> Page[TriageRead]:
    """List all triages, newest first.

    Args:
        session: Database session
        pagination: Page and page size
        status_filter: Only triages in this status
        risk_level: Only triages at this risk level

    Returns:
        Page of triages
    """
    page, limit = pagination
    triages, total = await TriageService(session).list_all(
        status=status_filter,
        risk_level=risk_level,
        page=page,
        limit=limit,
    )
    return _page(triages, total, page, limit)


@router.get(
    "/{triage_id}",
    response_model=TriageRead,
    summary="Get triage",
)
async def get_triage(
    triage_id: str,
    session: DbSession,
    user: CurrentUser,
) -> TriageRead:
    """Get a triage by ID.

    Patients can only see their own; doctors and admins can see any.

    Raises:
        NotFoundError: If the triage doesn't exist
        ForbiddenError: If a patient requests someone else's triage
    """
    triage = await TriageService(session).get(triage_id, user)
    return TriageRead.model_validate(triage)


@router.put(
    "/{triage_id}/review",
    response_model=TriageRead,
    summary="Review triage",
    description="Doctor review; status defaults to reviewed",
)
async def review_triage(
    triage_id: str,
    data: TriageReview,
    session: DbSession,
    user: Annotated[User, Depends(require_permissions(Permission.TRIAGE_REVIEW))],
) -> TriageRead:
    """Record a doctor's review of a triage.

    Raises:
        NotFoundError: If the triage doesn't exist
    """
    triage = await TriageService(session).review(
        triage_id=triage_id,
        doctor_id=user.id,
        doctor_notes=data.doctor_notes,
        status=data.status,
    )
    return TriageRead.model_validate(triage)
