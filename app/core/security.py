"""Security utilities for authentication and authorization."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings

# Password hashing context using bcrypt
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a hashed password."""
    return pwd_context.verify(plain_password, hashed_password)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return pwd_context.hash(password)


def create_access_token(
    subject: str,
    token_type: str = ACCESS_TOKEN,
    expires_delta: timedelta | None = None,
    additional_claims: dict | None = None,
) -> str:
    """Create a signed JWT.

    Args:
        subject: The subject of the token (user ID)
        token_type: Type of token (access or refresh)
        expires_delta: Optional custom expiration time
        additional_claims: Optional additional claims to include

    Returns:
        Encoded JWT token string
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)

    now = datetime.now(timezone.utc)

    to_encode = {
        "sub": subject,
        "type": token_type,
        "exp": now + expires_delta,
        "iat": now,
    }

    if additional_claims:
        to_encode.update(additional_claims)

    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def create_refresh_token(subject: str, token_id: str | None = None) -> str:
    """Create a long-lived refresh token for a user.

    The token_id becomes the jti claim, which is what logout revokes.
    """
    return create_access_token(
        subject=subject,
        token_type=REFRESH_TOKEN,
        expires_delta=timedelta(days=settings.refresh_token_expire_days),
        additional_claims={"jti": token_id or uuid4().hex},
    )


def decode_access_token(token: str, expected_type: str = ACCESS_TOKEN) -> dict | None:
    """Decode and validate a JWT.

    Expired tokens, bad signatures and tokens of the wrong type all
    decode to None.

    Args:
        token: The JWT token string
        expected_type: Required value of the "type" claim

    Returns:
        Decoded token payload or None if invalid
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None

    if payload.get("type") != expected_type or not payload.get("sub"):
        return None

    return payload
