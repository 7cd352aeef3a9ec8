# fintrack/api/v1/routes/budgets.py
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.api.deps import get_current_user
from fintrack.core.database import get_async_session
from fintrack.crud.budget import (
    build_budget_usage,
    copy_budgets,
    create_budget_for_user,
    delete_budget,
    get_budget_by_id,
    list_budget_usage,
    update_budget,
)
from fintrack.models.user import User
from fintrack.schemas.budget import BudgetCopy, BudgetCreate, BudgetRead, BudgetUpdate
from fintrack.schemas.common import APIResponse, MessageResponse

router = APIRouter(prefix="/budgets", tags=["budgets"])


@router.get("", response_model=APIResponse[List[BudgetRead]])
async def read_budgets(
    month: Optional[int] = Query(None),
    year: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Budgets with their usage, optionally for a single month and/or year"""
    return APIResponse(data=await list_budget_usage(user.id, db, month=month, year=year))


@router.post("", response_model=APIResponse[BudgetRead], status_code=status.HTTP_201_CREATED)
async def create_budget(
    budget_in: BudgetCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    budget = await create_budget_for_user(user.id, budget_in, db)
    return APIResponse(message="Budget created", data=await build_budget_usage(budget, db))


# Declared before /{budget_id} so "copy" is not read as an id
@router.post("/copy", response_model=APIResponse[List[BudgetRead]], status_code=status.HTTP_201_CREATED)
async def copy_budgets_endpoint(
    copy_in: BudgetCopy,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    copies = await copy_budgets(user.id, copy_in, db)
    return APIResponse(
        message=f"Copied {len(copies)} budgets to {copy_in.target_month}/{copy_in.target_year}",
        data=[await build_budget_usage(budget, db) for budget in copies],
    )


@router.get("/{budget_id}", response_model=APIResponse[BudgetRead])
async def read_budget(
    budget_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    budget = await get_budget_by_id(budget_id, user.id, db)
    return APIResponse(data=await build_budget_usage(budget, db))


@router.put("/{budget_id}", response_model=APIResponse[BudgetRead])
async def update_budget_endpoint(
    budget_id: uuid.UUID,
    budget_in: BudgetUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    budget = await get_budget_by_id(budget_id, user.id, db)
    budget = await update_budget(budget, budget_in, db)
    return APIResponse(message="Budget updated", data=await build_budget_usage(budget, db))


@router.delete("/{budget_id}", response_model=MessageResponse)
async def delete_budget_endpoint(
    budget_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    budget = await get_budget_by_id(budget_id, user.id, db)
    await delete_budget(budget, db)
    return MessageResponse(message="Budget deleted")
