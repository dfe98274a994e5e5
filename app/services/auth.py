"""Authentication and account service."""

import logging
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import UnauthorizedError, ValidationError
from app.core.logging import audit_logger
from app.core.security import (
    REFRESH_TOKEN,
    create_access_token,
    create_refresh_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from app.models.user import User, UserRole
from app.schemas.auth import ProfileUpdate, RegisterRequest
from app.utils.time import utc_now

logger = logging.getLogger(__name__)

DOCTOR_ONLY_PROFILE_FIELDS = ("specialization", "bio", "consultation_fee")

# Concurrent sign-ins per account that can each refresh
MAX_REFRESH_TOKENS = 10


class AuthService:
    """Service for handling authentication operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_user_by_id(self, user_id: str) -> User | None:
        """Get user by ID.

        Args:
            user_id: UUID of the user

        Returns:
            User or None
        """
        result = await self.session.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str) -> User | None:
        result = await self.session.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    # --- Registration & Login ---

    async def register(self, data: RegisterRequest) -> User:
        """Create a patient or doctor account.

        Args:
            data: Registration payload

        Returns:
            Created User

        Raises:
            ValidationError: If the email is already registered
        """
        if await self.get_user_by_email(data.email):
            raise ValidationError("Email already registered")

        user = User(
            email=data.email.lower(),
            hashed_password=hash_password(data.password),
            role=data.role,
            first_name=data.first_name,
            last_name=data.last_name,
            phone=data.phone,
            date_of_birth=data.date_of_birth,
            gender=data.gender.value if data.gender else None,
            is_active=True,
        )
        if user.role == UserRole.DOCTOR:
            user.specialization = data.specialization
            user.license_number = data.license_number
            user.years_of_experience = data.years_of_experience
            user.consultation_fee = data.consultation_fee
            user.is_verified = False

        self.session.add(user)
        await self.session.commit()
        await self.session.refresh(user)

        logger.info(f"Registered {data.role} account {user.id[:8]}")
        return user

    async def authenticate(self, email: str, password: str) -> User:
        """Authenticate a user with email and password.

        Args:
            email: Account email address
            password: Plain text password

        Returns:
            Authenticated User, with last_login_at updated

        Raises:
            UnauthorizedError: If credentials are wrong or the account
                is inactive or deleted
        """
        user = await self.get_user_by_email(email)

        if not user or not verify_password(password, user.hashed_password):
            raise UnauthorizedError("Invalid email or password")

        if not user.can_sign_in:
            raise UnauthorizedError("Account is disabled")

        user.last_login_at = utc_now()
        await self.session.commit()
        await self.session.refresh(user)

        return user

    async def create_tokens(self, user: User) -> dict:
        """Issue an access and refresh token pair for a user.

        The refresh token's id is stored on the user so it can be revoked.
        Only the newest MAX_REFRESH_TOKENS stay valid.
        """
        role = user.role.value if hasattr(user.role, "value") else user.role
        token_id = uuid4().hex
        user.refresh_token_ids = [*(user.refresh_token_ids or []), token_id][-MAX_REFRESH_TOKENS:]
        await self.session.commit()

        return {
            "access_token": create_access_token(
                subject=user.id,
                additional_claims={"role": role},
            ),
            "refresh_token": create_refresh_token(user.id, token_id),
            "token_type": "bearer",
            "expires_in": settings.access_token_expire_minutes * 60,
        }

    async def refresh(self, refresh_token: str) -> dict:
        """Exchange a refresh token for a new token pair.

        The presented refresh token is spent: its id is revoked and a new
        one issued.

        Raises:
            UnauthorizedError: If the token is invalid, revoked, or the
                account can no longer sign in
        """
        payload = decode_access_token(refresh_token, expected_type=REFRESH_TOKEN)
        if not payload:
            raise UnauthorizedError("Invalid refresh token")

        user = await self.get_user_by_id(payload["sub"])
        if not user or not user.can_sign_in:
            raise UnauthorizedError("Account is disabled")

        token_id = payload.get("jti")
        if token_id not in (user.refresh_token_ids or []):
            raise UnauthorizedError("Invalid refresh token")

        user.refresh_token_ids = [t for t in user.refresh_token_ids if t != token_id]
        return await self.create_tokens(user)

    async def logout(self, user: User, refresh_token: str | None = None) -> None:
        """Revoke one refresh token, or every one when none is given.

        A token that is expired, malformed or belongs to someone else
        revokes nothing.
        """
        if refresh_token is None:
            user.refresh_token_ids = []
        else:
            payload = decode_access_token(refresh_token, expected_type=REFRESH_TOKEN)
            if not payload or payload["sub"] != user.id:
                return
            user.refresh_token_ids = [
                t for t in (user.refresh_token_ids or []) if t != payload.get("jti")
            ]
        await self.session.commit()

        audit_logger.log(
            action="LOGOUT",
            actor_id=user.id,
            entity_type="user",
            entity_id=user.id,
            metadata={"all_sessions": refresh_token is None},
        )

    # --- Profile ---

    async def update_profile(self, user: User, data: ProfileUpdate) -> User:
        """Apply a partial profile update.

        Doctor-only fields are ignored for other roles.
        """
        changes = data.model_dump(exclude_unset=True)
        if user.role != UserRole.DOCTOR:
            for field in DOCTOR_ONLY_PROFILE_FIELDS:
                changes.pop(field, None)
        if "gender" in changes and changes["gender"] is not None:
            changes["gender"] = changes["gender"].value

        for field, value in changes.items():
            setattr(user, field, value)

        await self.session.commit()
        await self.session.refresh(user)
        return user

    async def change_password(self, user: User, current_password: str, new_password: str) -> None:
        """Replace a user's password.

        Raises:
            ValidationError: If the current password does not match
        """
        if not verify_password(current_password, user.hashed_password):
            raise ValidationError("Current password is incorrect")

        user.hashed_password = hash_password(new_password)
        await self.session.commit()

        audit_logger.log(
            action="PASSWORD_CHANGED",
            actor_id=user.id,
            entity_type="user",
            entity_id=user.id,
        )
