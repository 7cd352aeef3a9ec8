# fintrack/api/v1/routes/auth.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.api.deps import get_current_user, get_settings_dep
from fintrack.core.config import Settings
from fintrack.core.database import get_async_session
from fintrack.crud.user import authenticate_user, register_user
from fintrack.models.user import User
from fintrack.schemas.common import APIResponse, MessageResponse
from fintrack.schemas.user import AuthResponse, UserLogin, UserRead, UserRegister

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_in: UserRegister,
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings_dep),
):
    """Create an account with a starter Cash wallet and return a token"""
    token, user = await register_user(user_in, settings, db)
    return AuthResponse(
        message="Registration successful! Welcome to FinTrack 🎉",
        token=token,
        user=UserRead.model_validate(user),
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    credentials: UserLogin,
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings_dep),
):
    token, user = await authenticate_user(credentials.username_or_email, credentials.password, settings, db)
    return AuthResponse(message="Login successful! 🚀", token=token, user=UserRead.model_validate(user))


@router.get("/me", response_model=APIResponse[UserRead])
async def me(user: User = Depends(get_current_user)):
    return APIResponse(data=UserRead.model_validate(user))


# Tokens are stateless; the client just drops it
@router.post("/logout", response_model=MessageResponse)
async def logout():
    return MessageResponse(message="Logout successful!")
