# fintrack/api/v1/routes/categories.py
import uuid
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.api.deps import get_current_user
from fintrack.core.database import get_async_session
from fintrack.crud.category import (
    create_category_for_user,
    delete_category,
    get_categories_for_user,
    get_category_by_id,
    get_owned_category,
    update_category,
)
from fintrack.models.user import User
from fintrack.schemas.category import CategoryCreate, CategoryRead, CategoryUpdate
from fintrack.schemas.common import APIResponse, MessageResponse

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=APIResponse[List[CategoryRead]])
async def read_categories(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    categories = await get_categories_for_user(user.id, db)
    return APIResponse(data=[CategoryRead.model_validate(c) for c in categories])


@router.post("", response_model=APIResponse[CategoryRead], status_code=status.HTTP_201_CREATED)
async def create_category(
    cat_in: CategoryCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    category = await create_category_for_user(user.id, cat_in, db)
    return APIResponse(message="Category created", data=CategoryRead.model_validate(category))


@router.get("/{category_id}", response_model=APIResponse[CategoryRead])
async def read_category(
    category_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    category = await get_category_by_id(category_id, user.id, db)
    return APIResponse(data=CategoryRead.model_validate(category))


@router.put("/{category_id}", response_model=APIResponse[CategoryRead])
async def update_category_endpoint(
    category_id: uuid.UUID,
    cat_in: CategoryUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    category = await get_owned_category(category_id, user.id, db)
    category = await update_category(category, cat_in, db)
    return APIResponse(message="Category updated", data=CategoryRead.model_validate(category))


@router.delete("/{category_id}", response_model=MessageResponse)
async def delete_category_endpoint(
    category_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    category = await get_owned_category(category_id, user.id, db)
    await delete_category(category, user.id, db)
    return MessageResponse(message="Category deleted")
