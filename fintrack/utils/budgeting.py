# fintrack/utils/budgeting.py
import math
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional, Tuple

from fintrack.core.errors import ValidationError
from fintrack.utils.money import MAX_MONEY, to_money, to_stored_money

MIN_YEAR = 2000
MAX_YEAR = 3000


# ────────────────────────────────────────────────────────────────────────────────
# VALIDATION
# ────────────────────────────────────────────────────────────────────────────────
def validate_amount(amount: float) -> Decimal:
    if amount is None or not math.isfinite(amount) or amount <= 0:
        raise ValidationError("Amount must be greater than 0 and a valid number")
    if amount > MAX_MONEY:
        raise ValidationError(f"Amount must not exceed {MAX_MONEY}")
    money = to_stored_money(amount)
    if money <= 0:
        raise ValidationError("Amount must be greater than 0 and a valid number")
    return money


def validate_month(month: int, label: str = "Month") -> int:
    if month < 1 or month > 12:
        raise ValidationError(f"{label} must be between 1 and 12")
    return month


def validate_year(year: int, label: str = "Year") -> int:
    if year < MIN_YEAR or year > MAX_YEAR:
        raise ValidationError(f"{label} must be between {MIN_YEAR} and {MAX_YEAR}")
    return year


def validate_alert_threshold(threshold: Optional[int]) -> Optional[int]:
    if threshold is not None and (threshold < 0 or threshold > 100):
        raise ValidationError("Alert threshold must be between 0 and 100")
    return threshold


# ────────────────────────────────────────────────────────────────────────────────
# CALENDAR HELPERS
# ────────────────────────────────────────────────────────────────────────────────
def month_bounds(month: int, year: int) -> Tuple[date, date]:
    """[first day of the month, first day of the next month)"""
    start = date(year, month, 1)
    if month == 12:
        end = date(year + 1, 1, 1)
    else:
        end = date(year, month + 1, 1)
    return start, end


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


# ────────────────────────────────────────────────────────────────────────────────
# USAGE
# ────────────────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class BudgetUsage:
    used_amount: Decimal
    remaining_amount: Decimal
    usage_percentage: float
    is_over_budget: bool
    should_alert: bool


def compute_usage(amount: Decimal, used_amount: Decimal, alert_threshold: Optional[int]) -> BudgetUsage:
    amount = to_money(amount)
    used = to_money(used_amount)

    if amount > 0:
        usage_percentage = float(used) / float(amount) * 100
    else:
        usage_percentage = 0.0

    return BudgetUsage(
        used_amount=used,
        remaining_amount=amount - used,  # negative once overspent
        usage_percentage=usage_percentage,
        is_over_budget=used > amount,
        should_alert=alert_threshold is not None and usage_percentage >= alert_threshold,
    )
