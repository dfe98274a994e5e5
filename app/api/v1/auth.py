"""Authentication and profile endpoints."""

from fastapi import APIRouter, status

from app.api.deps import CurrentUser, DbSession
from app.schemas.auth import (
    ChangePasswordRequest,
    LoginRequest,
    LogoutRequest,
    ProfileUpdate,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
)
from app.schemas.common import MessageResponse
from app.schemas.user import UserRead
from app.services.auth import AuthService

router = APIRouter()


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Self-registration for patients and doctors",
)
async def register(data: RegisterRequest, session: DbSession) -> TokenResponse:
    """Create an account and sign it in.

    Args:
        data: Registration details
        session: Database session

    Returns:
        Access and refresh tokens with the new profile

    Raises:
        ValidationError: If the email is already registered
    """
    auth_service = AuthService(session)
    user = await auth_service.register(data)
    tokens = await auth_service.create_tokens(user)
    return TokenResponse(**tokens, user=UserRead.model_validate(user))


@router.post(
    "/login",
    response_model=TokenResponse,
    status_code=status.HTTP_200_OK,
    summary="Login",
    description="Authenticate with email and password",
)
async def login(credentials: LoginRequest, session: DbSession) -> TokenResponse:
    """Authenticate a user and return JWT tokens.

    Raises:
        UnauthorizedError: If credentials are invalid or the account is disabled
    """
    auth_service = AuthService(session)
    user = await auth_service.authenticate(credentials.email, credentials.password)
    tokens = await auth_service.create_tokens(user)
    return TokenResponse(**tokens, user=UserRead.model_validate(user))


@router.post(
    "/refresh",
    response_model=TokenResponse,
    status_code=status.HTTP_200_OK,
    summary="Refresh access token",
)
async def refresh(data: RefreshRequest, session: DbSession) -> TokenResponse:
    tokens = await AuthService(session).refresh(data.refresh_token)
    return TokenResponse(**tokens)


@router.post(
    "/logout",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Logout",
    description="Revoke a refresh token, or all of them when none is sent",
)
async def logout(data: LogoutRequest, user: CurrentUser, session: DbSession) -> MessageResponse:
    await AuthService(session).logout(user, data.refresh_token)
    return MessageResponse(message="Logged out successfully")


@router.get(
    "/me",
    response_model=UserRead,
    summary="Current user profile",
)
async def get_me(user: CurrentUser) -> UserRead:
    return UserRead.model_validate(user)


@router.put(
    "/me",
    response_model=UserRead,
    summary="Update profile",
)
async def update_me(data: ProfileUpdate, user: CurrentUser, session: DbSession) -> UserRead:
    user = await AuthService(session).update_profile(user, data)
    return UserRead.model_validate(user)


@router.put(
    "/change-password",
    response_model=MessageResponse,
    summary="Change password",
)
async def change_password(
    data: ChangePasswordRequest,
    user: CurrentUser,
    session: DbSession,
) -> MessageResponse:
    """Change the current user's password.

    Raises:
        ValidationError: If the current password does not match
    """
    await AuthService(session).change_password(user, data.current_password, data.new_password)
    return MessageResponse(message="Password changed successfully")
