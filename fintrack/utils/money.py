# fintrack/utils/money.py
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

from fintrack.core.errors import ValidationError

CENT = Decimal("0.01")

# Largest value a Numeric(14, 2) column holds
MAX_MONEY = Decimal("999999999999.99")

Number = Union[int, float, Decimal, str]


def to_money(value: Number) -> Decimal:
    """Quantise to whole cents. Floats go through str() so 0.1 stays 0.10."""
    try:
        if isinstance(value, Decimal):
            amount = value
        else:
            amount = Decimal(str(value))
        if not amount.is_finite():
            raise InvalidOperation
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValidationError("Amount must be a valid number")


def to_stored_money(value: Number) -> Decimal:
    """to_money for values about to be written to a money column."""
    money = to_money(value)
    if abs(money) > MAX_MONEY:
        raise ValidationError(f"Amount must not exceed {MAX_MONEY}")
    return money


def signed_amount(transaction_type: str, amount: Number) -> Decimal:
    """Balance effect of a transaction: +amount for income, -amount for expense."""
    money = to_money(amount)
    return money if transaction_type == "income" else -money
