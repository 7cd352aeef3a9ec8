# fintrack/schemas/wallet.py
import uuid
from typing import Annotated, Optional
from datetime import datetime
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from fintrack.models.wallet import WalletType
from .common import MONEY_LIMIT, OptionalText, blank_to_none

class WalletCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    wallet_type: WalletType = Field(..., description="cash, bank, credit or e-wallet")
    balance: Optional[float] = Field(
        None, ge=-MONEY_LIMIT, le=MONEY_LIMIT, allow_inf_nan=False, description="Opening balance, 0 when omitted"
    )
    credit_limit: Optional[float] = Field(None, ge=0, le=MONEY_LIMIT, allow_inf_nan=False)
    icon: Optional[str] = None
    color: Optional[str] = None
    is_default: Optional[bool] = None

class WalletUpdate(BaseModel):
    # Empty strings mean "keep the current value"
    name: OptionalText = Field(None, max_length=100)
    wallet_type: Annotated[Optional[WalletType], BeforeValidator(blank_to_none)] = None
    credit_limit: Optional[float] = Field(None, ge=0, le=MONEY_LIMIT, allow_inf_nan=False)
    icon: Optional[str] = None
    color: Optional[str] = None
    is_default: Optional[bool] = None

class WalletRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    wallet_type: str
    balance: float
    credit_limit: Optional[float] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    is_default: bool
    created_at: datetime
    updated_at: datetime

class WalletDeleteResult(BaseModel):
    id: uuid.UUID
    transaction_count: int
