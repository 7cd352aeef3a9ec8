# fintrack/schemas/dashboard.py
from typing import Optional
from pydantic import BaseModel

class DashboardSummary(BaseModel):
    total_balance: float
    total_income: float
    total_expense: float
    this_month_income: float
    this_month_expense: float
    wallet_count: int
    transaction_count: int

class MonthlyStat(BaseModel):
    month: int
    year: int
    income: float
    expense: float

class CategorySpending(BaseModel):
    name: str
    icon: Optional[str] = None
    color: Optional[str] = None
    total: float
