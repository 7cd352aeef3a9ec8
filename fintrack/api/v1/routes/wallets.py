# fintrack/api/v1/routes/wallets.py
import uuid
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.api.deps import get_current_user
from fintrack.core.database import get_async_session
from fintrack.crud.wallet import (
    create_wallet_for_user,
    delete_wallet,
    get_wallet_by_id,
    get_wallets_for_user,
    update_wallet,
)
from fintrack.models.user import User
from fintrack.schemas.common import APIResponse
from fintrack.schemas.wallet import WalletCreate, WalletDeleteResult, WalletRead, WalletUpdate

router = APIRouter(prefix="/wallets", tags=["wallets"])


@router.get("", response_model=APIResponse[List[WalletRead]])
async def read_wallets(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    wallets = await get_wallets_for_user(user.id, db)
    return APIResponse(data=[WalletRead.model_validate(w) for w in wallets])


@router.post("", response_model=APIResponse[WalletRead], status_code=status.HTTP_201_CREATED)
async def create_wallet(
    wallet_in: WalletCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    wallet, is_first = await create_wallet_for_user(user.id, wallet_in, db)
    if is_first:
        message = "First wallet created as your default cash wallet"
    else:
        message = "Wallet created"
    return APIResponse(message=message, data=WalletRead.model_validate(wallet))


@router.get("/{wallet_id}", response_model=APIResponse[WalletRead])
async def read_wallet(
    wallet_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    wallet = await get_wallet_by_id(wallet_id, user.id, db)
    return APIResponse(data=WalletRead.model_validate(wallet))


@router.put("/{wallet_id}", response_model=APIResponse[WalletRead])
async def update_wallet_endpoint(
    wallet_id: uuid.UUID,
    wallet_in: WalletUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    wallet = await get_wallet_by_id(wallet_id, user.id, db)
    wallet = await update_wallet(wallet, wallet_in, db)
    return APIResponse(message="Wallet updated", data=WalletRead.model_validate(wallet))


@router.delete("/{wallet_id}", response_model=APIResponse[WalletDeleteResult])
async def delete_wallet_endpoint(
    wallet_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    wallet = await get_wallet_by_id(wallet_id, user.id, db)
    transaction_count = await delete_wallet(wallet, db)
    if transaction_count:
        message = f"Wallet deleted. {transaction_count} transactions are kept in your history."
    else:
        message = "Wallet deleted"
    return APIResponse(
        message=message,
        data=WalletDeleteResult(id=wallet_id, transaction_count=transaction_count),
    )
