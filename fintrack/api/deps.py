# fintrack/api/deps.py
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.core.config import Settings
from fintrack.core.database import AppContext, get_app_context, get_async_session
from fintrack.core.errors import Unauthorized
from fintrack.core.security import decode_access_token
from fintrack.crud.user import get_user_by_id
from fintrack.models.user import User

# Missing credentials are reported through our own error envelope
optional_security = HTTPBearer(auto_error=False)


def get_settings_dep(context: AppContext = Depends(get_app_context)) -> Settings:
    return context.settings


async def get_current_user(
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings_dep),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security),
) -> User:
    """
    Resolve the user from the ``Authorization: Bearer <token>`` header.

    Raises Unauthorized when the header is missing or the user no longer
    exists, TokenExpired when the token is past its ``exp``.
    """
    if credentials is None or not credentials.credentials:
        raise Unauthorized()

    claims = decode_access_token(credentials.credentials, settings)

    user = await get_user_by_id(claims.user_id, db)
    if user is None:
        raise Unauthorized()
    return user
