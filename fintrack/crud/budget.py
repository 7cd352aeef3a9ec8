# fintrack/crud/budget.py
import logging
import uuid
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import desc, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.core.database import utcnow
from fintrack.core.errors import NotFound, ValidationError
from fintrack.crud.category import get_category_by_id
from fintrack.models.budget import Budget
from fintrack.models.transaction import Transaction, TransactionType
from fintrack.schemas.budget import BudgetCopy, BudgetCreate, BudgetRead, BudgetUpdate
from fintrack.utils.budgeting import (
    compute_usage,
    month_bounds,
    validate_alert_threshold,
    validate_amount,
    validate_month,
    validate_year,
)
from fintrack.utils.money import to_money

logger = logging.getLogger(__name__)

DEFAULT_ALERT_THRESHOLD = 80
DUPLICATE_BUDGET_MESSAGE = "A budget for this category and period already exists"


async def get_budgets_for_user(
    user_id: uuid.UUID,
    db: AsyncSession,
    month: Optional[int] = None,
    year: Optional[int] = None,
) -> List[Budget]:
    query = select(Budget).where(Budget.user_id == user_id, Budget.deleted_at.is_(None))
    if month is not None:
        query = query.where(Budget.month == month)
    if year is not None:
        query = query.where(Budget.year == year)
    query = query.order_by(desc(Budget.year), desc(Budget.month), desc(Budget.created_at))
    result = await db.execute(query)
    return list(result.unique().scalars().all())


async def get_budget_by_id(budget_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Budget:
    result = await db.execute(
        select(Budget).where(
            Budget.id == budget_id,
            Budget.user_id == user_id,
            Budget.deleted_at.is_(None),
        )
    )
    budget = result.unique().scalar_one_or_none()
    if budget is None:
        raise NotFound("Budget")
    return budget


async def budget_exists(
    user_id: uuid.UUID,
    category_id: Optional[uuid.UUID],
    month: int,
    year: int,
    db: AsyncSession,
    exclude_id: Optional[uuid.UUID] = None,
) -> bool:
    """Is the (user, category-or-null, month, year) slot taken by a live budget?"""
    query = select(Budget.id).where(
        Budget.user_id == user_id,
        Budget.month == month,
        Budget.year == year,
        Budget.deleted_at.is_(None),
    )
    # NULL only matches NULL
    if category_id is None:
        query = query.where(Budget.category_id.is_(None))
    else:
        query = query.where(Budget.category_id == category_id)
    if exclude_id is not None:
        query = query.where(Budget.id != exclude_id)

    result = await db.execute(query.limit(1))
    return result.scalar_one_or_none() is not None


async def get_used_amount(
    user_id: uuid.UUID,
    category_id: Optional[uuid.UUID],
    month: int,
    year: int,
    db: AsyncSession,
) -> Decimal:
    """Sum of the user's expenses in the month, restricted to the category when given."""
    start, end = month_bounds(month, year)
    query = select(func.coalesce(func.sum(Transaction.amount), 0)).where(
        Transaction.user_id == user_id,
        Transaction.transaction_type == TransactionType.expense.value,
        Transaction.date >= start,
        Transaction.date < end,
    )
    if category_id is not None:
        query = query.where(Transaction.category_id == category_id)

    used = (await db.execute(query)).scalar_one()
    return to_money(used or 0)


async def build_budget_usage(budget: Budget, db: AsyncSession) -> BudgetRead:
    used_amount = await get_used_amount(budget.user_id, budget.category_id, budget.month, budget.year, db)
    usage = compute_usage(budget.amount, used_amount, budget.alert_threshold)

    category_name = None
    if budget.category is not None and budget.category.deleted_at is None:
        category_name = budget.category.name

    return BudgetRead(
        id=budget.id,
        category_id=budget.category_id,
        category_name=category_name,
        amount=float(budget.amount),
        month=budget.month,
        year=budget.year,
        is_active=budget.is_active,
        alert_threshold=budget.alert_threshold,
        used_amount=float(usage.used_amount),
        remaining_amount=float(usage.remaining_amount),
        usage_percentage=usage.usage_percentage,
        is_over_budget=usage.is_over_budget,
        should_alert=usage.should_alert,
        created_at=budget.created_at,
        updated_at=budget.updated_at,
    )


async def list_budget_usage(
    user_id: uuid.UUID,
    db: AsyncSession,
    month: Optional[int] = None,
    year: Optional[int] = None,
) -> List[BudgetRead]:
    budgets = await get_budgets_for_user(user_id, db, month=month, year=year)
    return [await build_budget_usage(budget, db) for budget in budgets]


async def _reload(budget_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Budget:
    result = await db.execute(
        select(Budget)
        .where(Budget.id == budget_id, Budget.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    return result.unique().scalar_one()


async def _commit_unique(db: AsyncSession, message: str) -> None:
    """Commit, reporting a unique index clash from a concurrent write as a validation error."""
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ValidationError(message)


async def create_budget_for_user(user_id: uuid.UUID, budget_in: BudgetCreate, db: AsyncSession) -> Budget:
    amount = validate_amount(budget_in.amount)
    validate_month(budget_in.month)
    validate_year(budget_in.year)
    validate_alert_threshold(budget_in.alert_threshold)

    if budget_in.category_id is not None:
        await get_category_by_id(budget_in.category_id, user_id, db)

    if await budget_exists(user_id, budget_in.category_id, budget_in.month, budget_in.year, db):
        raise ValidationError(DUPLICATE_BUDGET_MESSAGE)

    budget = Budget(
        user_id=user_id,
        category_id=budget_in.category_id,
        amount=amount,
        month=budget_in.month,
        year=budget_in.year,
        is_active=True if budget_in.is_active is None else budget_in.is_active,
        alert_threshold=(
            DEFAULT_ALERT_THRESHOLD if budget_in.alert_threshold is None else budget_in.alert_threshold
        ),
    )
    db.add(budget)
    await _commit_unique(db, DUPLICATE_BUDGET_MESSAGE)
    return await _reload(budget.id, user_id, db)


async def update_budget(budget: Budget, budget_in: BudgetUpdate, db: AsyncSession) -> Budget:
    if budget_in.amount is not None:
        new_amount = validate_amount(budget_in.amount)
    if budget_in.month is not None:
        validate_month(budget_in.month)
    if budget_in.year is not None:
        validate_year(budget_in.year)
    validate_alert_threshold(budget_in.alert_threshold)

    # Compare the merged row, not the patch, against the stored one
    new_category_id = budget_in.category_id if budget_in.category_id is not None else budget.category_id
    new_month = budget_in.month if budget_in.month is not None else budget.month
    new_year = budget_in.year if budget_in.year is not None else budget.year

    if new_category_id != budget.category_id:
        await get_category_by_id(new_category_id, budget.user_id, db)

    if (new_category_id, new_month, new_year) != (budget.category_id, budget.month, budget.year):
        if await budget_exists(budget.user_id, new_category_id, new_month, new_year, db, exclude_id=budget.id):
            raise ValidationError(DUPLICATE_BUDGET_MESSAGE)

    budget.category_id = new_category_id
    budget.month = new_month
    budget.year = new_year
    if budget_in.amount is not None:
        budget.amount = new_amount
    if budget_in.is_active is not None:
        budget.is_active = budget_in.is_active
    if budget_in.alert_threshold is not None:
        budget.alert_threshold = budget_in.alert_threshold
    budget.updated_at = utcnow()

    budget_id, user_id = budget.id, budget.user_id
    db.add(budget)
    await _commit_unique(db, DUPLICATE_BUDGET_MESSAGE)
    return await _reload(budget_id, user_id, db)


async def delete_budget(budget: Budget, db: AsyncSession) -> None:
    result = await db.execute(
        update(Budget)
        .where(Budget.id == budget.id, Budget.deleted_at.is_(None))
        .values(deleted_at=utcnow(), updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.rollback()
        raise NotFound("Budget")
    await db.commit()


async def copy_budgets(user_id: uuid.UUID, copy_in: BudgetCopy, db: AsyncSession) -> List[Budget]:
    """Seed an empty target month with the source month's budgets. All or nothing."""
    validate_month(copy_in.source_month, "Source month")
    validate_month(copy_in.target_month, "Target month")
    validate_year(copy_in.source_year, "Source year")
    validate_year(copy_in.target_year, "Target year")

    source_budgets = await get_budgets_for_user(user_id, db, month=copy_in.source_month, year=copy_in.source_year)
    if not source_budgets:
        raise NotFound(f"Budgets for {copy_in.source_month}/{copy_in.source_year}")

    target_taken = (
        f"Budgets for {copy_in.target_month}/{copy_in.target_year} already exist. "
        "Delete them first or update them instead."
    )
    existing = await get_budgets_for_user(user_id, db, month=copy_in.target_month, year=copy_in.target_year)
    if existing:
        raise ValidationError(target_taken)

    copies = [
        Budget(
            user_id=user_id,
            category_id=source.category_id,
            amount=source.amount,
            month=copy_in.target_month,
            year=copy_in.target_year,
            is_active=source.is_active,
            alert_threshold=source.alert_threshold,
        )
        for source in source_budgets
    ]
    db.add_all(copies)
    await _commit_unique(db, target_taken)

    logger.info(
        f"Copied {len(copies)} budgets for user {user_id} from "
        f"{copy_in.source_month}/{copy_in.source_year} to {copy_in.target_month}/{copy_in.target_year}"
    )
    return [await _reload(budget.id, user_id, db) for budget in copies]
