# fintrack/api/v1/routes/transactions.py
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.api.deps import get_current_user
from fintrack.core.database import get_async_session
from fintrack.core.errors import ValidationError
from fintrack.crud.transaction import (
    create_transaction_for_user,
    delete_transaction,
    get_transaction_by_id,
    get_transactions_for_user,
    update_transaction,
)
from fintrack.models.transaction import TransactionType
from fintrack.models.user import User
from fintrack.schemas.common import (
    APIResponse,
    MessageResponse,
    PageMeta,
    PaginatedResponse,
    blank_to_none,
    parse_optional_date,
    parse_optional_uuid,
)
from fintrack.schemas.transaction import TransactionCreate, TransactionFilters, TransactionRead, TransactionUpdate

router = APIRouter(prefix="/transactions", tags=["transactions"])

MAX_PAGE_SIZE = 500


def _parse_transaction_type(value: Optional[str]) -> Optional[TransactionType]:
    value = blank_to_none(value)
    if value is None:
        return None
    try:
        return TransactionType(value.lower())
    except ValueError:
        raise ValidationError("transaction_type must be 'income' or 'expense'")


@router.get("", response_model=PaginatedResponse[TransactionRead])
async def read_transactions(
    wallet_id: Optional[str] = Query(None),
    category_id: Optional[str] = Query(None),
    transaction_type: Optional[str] = Query(None, description="income or expense"),
    start_date: Optional[str] = Query(None, description="YYYY-MM-DD, inclusive"),
    end_date: Optional[str] = Query(None, description="YYYY-MM-DD, inclusive"),
    limit: int = Query(50, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    filters = TransactionFilters(
        wallet_id=parse_optional_uuid(wallet_id, "wallet_id"),
        category_id=parse_optional_uuid(category_id, "category_id"),
        transaction_type=_parse_transaction_type(transaction_type),
        start_date=parse_optional_date(start_date, "start_date"),
        end_date=parse_optional_date(end_date, "end_date"),
        limit=limit,
        offset=offset,
    )
    transactions, total = await get_transactions_for_user(user.id, filters, db)
    return PaginatedResponse(
        data=[TransactionRead.model_validate(tx) for tx in transactions],
        meta=PageMeta(total=total, limit=limit, offset=offset),
    )


@router.post("", response_model=APIResponse[TransactionRead], status_code=status.HTTP_201_CREATED)
async def create_transaction(
    tx_in: TransactionCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    tx = await create_transaction_for_user(user.id, tx_in, db)
    return APIResponse(message="Transaction recorded", data=TransactionRead.model_validate(tx))


@router.get("/{transaction_id}", response_model=APIResponse[TransactionRead])
async def read_transaction(
    transaction_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    tx = await get_transaction_by_id(transaction_id, user.id, db)
    return APIResponse(data=TransactionRead.model_validate(tx))


@router.put("/{transaction_id}", response_model=APIResponse[TransactionRead])
async def update_transaction_endpoint(
    transaction_id: uuid.UUID,
    tx_in: TransactionUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    tx = await get_transaction_by_id(transaction_id, user.id, db)
    tx = await update_transaction(tx, tx_in, db)
    return APIResponse(message="Transaction updated", data=TransactionRead.model_validate(tx))


@router.delete("/{transaction_id}", response_model=MessageResponse)
async def delete_transaction_endpoint(
    transaction_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    tx = await get_transaction_by_id(transaction_id, user.id, db)
    await delete_transaction(tx, db)
    return MessageResponse(message="Transaction deleted")
