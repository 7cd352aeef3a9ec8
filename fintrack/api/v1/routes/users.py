# fintrack/api/v1/routes/users.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.api.deps import get_current_user
from fintrack.core.database import get_async_session
from fintrack.crud.user import update_profile
from fintrack.models.user import User
from fintrack.schemas.common import APIResponse
from fintrack.schemas.user import UserRead, UserUpdate

router = APIRouter(prefix="/users", tags=["User Management"])


# 1) GET /users/me
@router.get("/me", response_model=APIResponse[UserRead])
async def read_own_profile(user: User = Depends(get_current_user)):
    """Get current user's profile"""
    return APIResponse(data=UserRead.model_validate(user))


# 2) PATCH /users/me
@router.patch("/me", response_model=APIResponse[UserRead])
async def update_own_profile(
    user_update: UserUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    """Update the name and/or password; a new password needs the current one"""
    user = await update_profile(user, user_update, db)
    return APIResponse(message="Profile updated", data=UserRead.model_validate(user))
