# fintrack/schemas/budget.py
import uuid
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict

from .common import OptionalUUID

# Numeric ranges are checked by the budget service so every entry point
# (create, update, copy) reports them the same way.
class BudgetCreate(BaseModel):
    category_id: OptionalUUID = None
    amount: float
    month: int
    year: int
    is_active: Optional[bool] = None
    alert_threshold: Optional[int] = None

class BudgetUpdate(BaseModel):
    category_id: OptionalUUID = None
    amount: Optional[float] = None
    month: Optional[int] = None
    year: Optional[int] = None
    is_active: Optional[bool] = None
    alert_threshold: Optional[int] = None

class BudgetCopy(BaseModel):
    source_month: int
    source_year: int
    target_month: int
    target_year: int

class BudgetRead(BaseModel):
    """A budget decorated with its spend for the period."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    category_id: Optional[uuid.UUID] = None
    category_name: Optional[str] = None
    amount: float
    month: int
    year: int
    is_active: bool
    alert_threshold: Optional[int] = None
    used_amount: float
    remaining_amount: float
    usage_percentage: float
    is_over_budget: bool
    should_alert: bool
    created_at: datetime
    updated_at: datetime
