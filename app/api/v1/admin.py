"""Administration endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from app.api.deps import DbSession, PageParams, require_permissions
from app.models.user import User, UserRole
from app.schemas.admin import AdminStats
from app.schemas.common import MessageResponse, Page, Pagination
from app.schemas.user import UserAdminUpdate, UserRead
from app.services.admin import AdminService
from app.services.rbac import Permission

router = APIRouter()

AdminUser = Annotated[User, Depends(require_permissions(Permission.ADMIN_ALL))]


@router.get(
    "/stats",
    response_model=AdminStats,
    summary="Platform statistics",
)
async def admin_stats(session: DbSession, admin: AdminUser) -> AdminStats:
    return AdminStats(**await AdminService(session).stats())


@router.get(
    "/users",
    response_model=Page[UserRead],
    summary="List users",
)
async def list_users(
    session: DbSession,
    admin: AdminUser,
    pagination: PageParams,
    role: Annotated[UserRole | None, Query()] = None,
) -> Page[UserRead]:
    page, limit = pagination
    users, total = await AdminService(session).list_users(role=role, page=page, limit=limit)
    return Page[UserRead](
        items=[UserRead.model_validate(u) for u in users],
        pagination=Pagination.build(total, page, limit),
    )


@router.put(
    "/users/{user_id}",
    response_model=UserRead,
    summary="Update user",
)
async def update_user(
    user_id: str,
    data: UserAdminUpdate,
    session: DbSession,
    admin: AdminUser,
) -> UserRead:
    user = await AdminService(session).update_user(user_id, admin.id, data)
    return UserRead.model_validate(user)


@router.put(
    "/users/{user_id}/toggle-status",
    response_model=UserRead,
    summary="Activate or deactivate user",
    description="Affects future sign-ins and connections only",
)
async def toggle_user_status(user_id: str, session: DbSession, admin: AdminUser) -> UserRead:
    user = await AdminService(session).toggle_status(user_id, admin.id)
    return UserRead.model_validate(user)


@router.put(
    "/doctors/{doctor_id}/verify",
    response_model=UserRead,
    summary="Verify doctor",
)
async def verify_doctor(doctor_id: str, session: DbSession, admin: AdminUser) -> UserRead:
    """Mark a doctor as verified so patients can book them.

    Raises:
        NotFoundError: If the user does not exist or is not a doctor
    """
    user = await AdminService(session).verify_doctor(doctor_id, admin.id)
    return UserRead.model_validate(user)


@router.delete(
    "/users/{user_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete user",
    description="Soft delete; the account can no longer sign in",
)
async def delete_user(user_id: str, session: DbSession, admin: AdminUser) -> MessageResponse:
    await AdminService(session).delete_user(user_id, admin.id)
    return MessageResponse(message="User deleted successfully")
