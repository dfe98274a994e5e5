"""Connection authentication for the realtime channel."""

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.errors import UnauthorizedError
from app.core.logging import audit_logger
from app.core.security import decode_access_token
from app.db.session import AsyncSessionLocal
from app.models.user import UserRole
from app.services.auth import AuthService


@dataclass(frozen=True)
class ConnectionIdentity:
    user_id: str
    role: UserRole


class ConnectionAuthenticator:
    """Gate run once per connection attempt, before any handler attaches.

    A connection admitted here stays admitted for its lifetime even if
    the account is later deactivated.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        self.session_factory = session_factory or AsyncSessionLocal

    async def authenticate(self, token: str | None) -> ConnectionIdentity:
        """Resolve a connect-time token to the account it belongs to.

        Args:
            token: Access token supplied by the client

        Returns:
            Identity of the connecting user

        Raises:
            UnauthorizedError: If the token is missing, invalid or expired,
                or the account is missing, inactive or deleted
        """
        if not token:
            raise self._reject("Authentication token required", None)

        payload = decode_access_token(token)
        if not payload:
            raise self._reject("Invalid or expired token", None)

        async with self.session_factory() as session:
            user = await AuthService(session).get_user_by_id(payload["sub"])

        if not user or not user.can_sign_in:
            raise self._reject("User not found or inactive", payload["sub"])

        audit_logger.log(
            action="REALTIME_CONNECTED",
            actor_id=user.id,
            entity_type="connection",
            entity_id=None,
        )
        return ConnectionIdentity(user_id=user.id, role=UserRole(user.role))

    def _reject(self, reason: str, user_id: str | None) -> UnauthorizedError:
        audit_logger.log(
            action="REALTIME_REJECTED",
            actor_id=user_id,
            entity_type="connection",
            entity_id=None,
            metadata={"reason": reason},
        )
        return UnauthorizedError(reason)
