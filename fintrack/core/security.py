# fintrack/core/security.py
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from passlib.context import CryptContext

from .config import Settings
from .errors import InternalError, TokenExpired, Unauthorized

# Argon2 is memory-hard and salted; passlib picks the parameters
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


@dataclass(frozen=True)
class TokenClaims:
    user_id: uuid.UUID
    email: str


def get_password_hash(password: str) -> str:
    try:
        return pwd_context.hash(password)
    except (ValueError, TypeError) as e:
        raise InternalError(f"Failed to hash password: {e}")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError) as e:
        # Stored value is not a hash we recognise
        raise InternalError(f"Invalid password hash: {e}")


def create_access_token(
    user_id: uuid.UUID,
    email: str,
    settings: Settings,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a JWT access token carrying the user id (``sub``) and email
    """
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    payload = {
        "sub": str(user_id),
        "email": email,
        "iat": now,
        "exp": now + expires_delta,
    }
    try:
        return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    except jwt.PyJWTError as e:
        raise InternalError(f"Failed to create token: {e}")


def decode_access_token(token: str, settings: Settings) -> TokenClaims:
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise TokenExpired()
    except jwt.InvalidTokenError:
        raise Unauthorized()

    try:
        user_id = uuid.UUID(payload["sub"])
    except (TypeError, ValueError):
        raise Unauthorized()

    return TokenClaims(user_id=user_id, email=payload.get("email", ""))
