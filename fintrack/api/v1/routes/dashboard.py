# fintrack/api/v1/routes/dashboard.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.api.deps import get_current_user
from fintrack.core.database import get_async_session
from fintrack.crud.dashboard import get_monthly_stats, get_summary, get_top_expense_categories
from fintrack.models.user import User
from fintrack.schemas.common import APIResponse
from fintrack.schemas.dashboard import CategorySpending, DashboardSummary, MonthlyStat

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/summary", response_model=APIResponse[DashboardSummary])
async def get_dashboard_summary(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """
    Balance across live wallets, lifetime and this-month income/expense,
    wallet and transaction counts.
    """
    return APIResponse(data=await get_summary(user.id, db))


@router.get("/monthly", response_model=APIResponse[List[MonthlyStat]])
async def get_dashboard_monthly(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return APIResponse(data=await get_monthly_stats(user.id, db))


@router.get("/categories", response_model=APIResponse[List[CategorySpending]])
@router.get("/by-category", response_model=APIResponse[List[CategorySpending]])
async def get_dashboard_categories(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    return APIResponse(data=await get_top_expense_categories(user.id, db))
