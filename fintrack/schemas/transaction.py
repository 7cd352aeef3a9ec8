# fintrack/schemas/transaction.py
import uuid
from dataclasses import dataclass
import datetime as dt
from typing import Annotated, Optional
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from fintrack.models.transaction import TransactionType
from .common import MONEY_LIMIT, OptionalText, OptionalUUID, blank_to_none

class TransactionCreate(BaseModel):
    wallet_id: OptionalUUID = Field(None, description="Defaults to the user's default wallet")
    category_id: OptionalUUID = None
    category_name: OptionalText = Field(None, max_length=100, description="Resolved or created when no category_id is given")
    transaction_type: TransactionType
    amount: float = Field(..., ge=0.01, le=MONEY_LIMIT, allow_inf_nan=False)
    description: Optional[str] = Field(None, max_length=255)
    date: Optional[dt.date] = Field(None, description="Defaults to today")

class TransactionUpdate(BaseModel):
    wallet_id: OptionalUUID = None
    category_id: OptionalUUID = None
    category_name: OptionalText = Field(None, max_length=100)
    transaction_type: Annotated[Optional[TransactionType], BeforeValidator(blank_to_none)] = None
    amount: Optional[float] = Field(None, ge=0.01, le=MONEY_LIMIT, allow_inf_nan=False)
    description: Optional[str] = Field(None, max_length=255)
    date: Optional[dt.date] = None

class TransactionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    wallet_id: uuid.UUID
    wallet_name: Optional[str] = None
    category_id: Optional[uuid.UUID] = None
    category_name: Optional[str] = None
    transaction_type: TransactionType
    amount: float
    description: Optional[str] = None
    date: dt.date
    created_at: dt.datetime
    updated_at: dt.datetime

@dataclass(frozen=True)
class TransactionFilters:
    wallet_id: Optional[uuid.UUID] = None
    category_id: Optional[uuid.UUID] = None
    transaction_type: Optional[TransactionType] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    limit: int = 50
    offset: int = 0
