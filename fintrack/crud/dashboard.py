# fintrack/crud/dashboard.py
import uuid
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import case, desc, extract, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.models.category import Category
from fintrack.models.transaction import Transaction, TransactionType
from fintrack.models.wallet import Wallet
from fintrack.schemas.dashboard import CategorySpending, DashboardSummary, MonthlyStat
from fintrack.utils.budgeting import shift_month
from fintrack.utils.money import to_money

MONTHLY_WINDOW = 12
TOP_CATEGORY_LIMIT = 10


def _first_of_month(today: Optional[date]) -> date:
    today = today or date.today()
    return today.replace(day=1)


async def _sum_amount(db: AsyncSession, user_id: uuid.UUID, transaction_type: TransactionType,
                      since: Optional[date] = None) -> Decimal:
    query = select(func.coalesce(func.sum(Transaction.amount), 0)).where(
        Transaction.user_id == user_id,
        Transaction.transaction_type == transaction_type.value,
    )
    if since is not None:
        query = query.where(Transaction.date >= since)
    return to_money((await db.execute(query)).scalar_one() or 0)


async def get_summary(user_id: uuid.UUID, db: AsyncSession, today: Optional[date] = None) -> DashboardSummary:
    month_start = _first_of_month(today)

    balance_row = (await db.execute(
        select(func.coalesce(func.sum(Wallet.balance), 0), func.count(Wallet.id))
        .where(Wallet.user_id == user_id, Wallet.deleted_at.is_(None))
    )).one()
    total_balance, wallet_count = balance_row

    transaction_count = (await db.execute(
        select(func.count()).select_from(Transaction).where(Transaction.user_id == user_id)
    )).scalar_one()

    return DashboardSummary(
        total_balance=float(to_money(total_balance or 0)),
        total_income=float(await _sum_amount(db, user_id, TransactionType.income)),
        total_expense=float(await _sum_amount(db, user_id, TransactionType.expense)),
        this_month_income=float(await _sum_amount(db, user_id, TransactionType.income, month_start)),
        this_month_expense=float(await _sum_amount(db, user_id, TransactionType.expense, month_start)),
        wallet_count=wallet_count,
        transaction_count=transaction_count,
    )


async def get_monthly_stats(user_id: uuid.UUID, db: AsyncSession, today: Optional[date] = None) -> List[MonthlyStat]:
    """Income and expense per calendar month for the last twelve months, newest first.

    Months without transactions are left out.
    """
    month_start = _first_of_month(today)
    window_year, window_month = shift_month(month_start.year, month_start.month, -(MONTHLY_WINDOW - 1))
    window_start = date(window_year, window_month, 1)

    year_col = extract("year", Transaction.date)
    month_col = extract("month", Transaction.date)
    income = func.sum(case((Transaction.transaction_type == TransactionType.income.value, Transaction.amount), else_=0))
    expense = func.sum(case((Transaction.transaction_type == TransactionType.expense.value, Transaction.amount), else_=0))

    result = await db.execute(
        select(year_col.label("year"), month_col.label("month"), income.label("income"), expense.label("expense"))
        .where(Transaction.user_id == user_id, Transaction.date >= window_start)
        .group_by(year_col, month_col)
        .order_by(desc("year"), desc("month"))
        .limit(MONTHLY_WINDOW)
    )
    return [
        MonthlyStat(
            year=int(row.year),
            month=int(row.month),
            income=float(to_money(row.income or 0)),
            expense=float(to_money(row.expense or 0)),
        )
        for row in result.all()
    ]


async def get_top_expense_categories(
    user_id: uuid.UUID,
    db: AsyncSession,
    today: Optional[date] = None,
) -> List[CategorySpending]:
    """This month's ten biggest expense categories. Uncategorised spend is not listed."""
    month_start = _first_of_month(today)
    total = func.sum(Transaction.amount)

    result = await db.execute(
        select(Category.name, Category.icon, Category.color, total.label("total"))
        .select_from(Transaction)
        .join(Category, Transaction.category_id == Category.id)
        .where(
            Transaction.user_id == user_id,
            Transaction.transaction_type == TransactionType.expense.value,
            Transaction.date >= month_start,
        )
        .group_by(Category.id, Category.name, Category.icon, Category.color)
        .order_by(desc("total"))
        .limit(TOP_CATEGORY_LIMIT)
    )
    return [
        CategorySpending(name=row.name, icon=row.icon, color=row.color, total=float(to_money(row.total or 0)))
        for row in result.all()
    ]
