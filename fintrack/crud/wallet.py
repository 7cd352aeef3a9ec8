# fintrack/crud/wallet.py
import logging
import uuid
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.core.database import utcnow
from fintrack.core.errors import Conflict, NotFound
from fintrack.crud.locks import lock_user
from fintrack.models.transaction import Transaction
from fintrack.models.wallet import Wallet, WalletType
from fintrack.schemas.common import provided_fields
from fintrack.schemas.wallet import WalletCreate, WalletUpdate
from fintrack.utils.money import to_stored_money

logger = logging.getLogger(__name__)

DEFAULT_WALLET = {"name": "Cash", "wallet_type": WalletType.cash.value, "icon": "💵", "color": "#22c55e"}
DEFAULT_CONFLICT_MESSAGE = "Another request changed the default wallet at the same time, please retry"


async def get_wallets_for_user(user_id: uuid.UUID, db: AsyncSession) -> List[Wallet]:
    """Non-deleted wallets, default first then newest first."""
    result = await db.execute(
        select(Wallet)
        .where(Wallet.user_id == user_id, Wallet.deleted_at.is_(None))
        .order_by(Wallet.is_default.desc(), Wallet.created_at.desc())
    )
    return list(result.scalars().all())


async def count_active_wallets(user_id: uuid.UUID, db: AsyncSession) -> int:
    result = await db.execute(
        select(func.count())
        .select_from(Wallet)
        .where(Wallet.user_id == user_id, Wallet.deleted_at.is_(None))
    )
    return result.scalar_one()


async def get_wallet_by_id(wallet_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Wallet:
    result = await db.execute(
        select(Wallet).where(
            Wallet.id == wallet_id,
            Wallet.user_id == user_id,
            Wallet.deleted_at.is_(None),
        )
    )
    wallet = result.scalar_one_or_none()
    if wallet is None:
        raise NotFound("Wallet")
    return wallet


async def get_default_wallet(user_id: uuid.UUID, db: AsyncSession) -> Optional[Wallet]:
    result = await db.execute(
        select(Wallet)
        .where(
            Wallet.user_id == user_id,
            Wallet.is_default.is_(True),
            Wallet.deleted_at.is_(None),
        )
        .limit(1)
    )
    return result.scalar_one_or_none()


async def clear_default_flag(user_id: uuid.UUID, db: AsyncSession, exclude_id: Optional[uuid.UUID] = None) -> None:
    """Unset is_default on the user's other live wallets (single-default rule)."""
    stmt = (
        update(Wallet)
        .where(
            Wallet.user_id == user_id,
            Wallet.is_default.is_(True),
            Wallet.deleted_at.is_(None),
        )
        .values(is_default=False, updated_at=utcnow())
    )
    if exclude_id is not None:
        stmt = stmt.where(Wallet.id != exclude_id)
    await db.execute(stmt)


async def create_default_wallet(user_id: uuid.UUID, db: AsyncSession) -> Wallet:
    """Starter cash wallet. Flushes, does not commit."""
    wallet = Wallet(user_id=user_id, balance=Decimal("0.00"), is_default=True, **DEFAULT_WALLET)
    db.add(wallet)
    await db.flush()
    logger.info(f"Created default cash wallet for user {user_id}")
    return wallet


async def ensure_default_wallet(user_id: uuid.UUID, db: AsyncSession) -> Wallet:
    """The user's default wallet, creating the cash one when there is none. Does not commit."""
    await lock_user(user_id, db)
    wallet = await get_default_wallet(user_id, db)
    if wallet is None:
        wallet = await create_default_wallet(user_id, db)
    return wallet


async def _commit_default_switch(db: AsyncSession, user_id: uuid.UUID) -> None:
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.warning(f"Concurrent default wallet change for user {user_id}")
        raise Conflict(DEFAULT_CONFLICT_MESSAGE)


async def create_wallet_for_user(user_id: uuid.UUID, wallet_in: WalletCreate, db: AsyncSession) -> Tuple[Wallet, bool]:
    """Returns the wallet and whether it was forced to be the first (cash, default) wallet."""
    await lock_user(user_id, db)
    is_first = await count_active_wallets(user_id, db) == 0

    if is_first:
        is_default = True
        wallet_type = WalletType.cash.value
    else:
        is_default = bool(wallet_in.is_default)
        wallet_type = wallet_in.wallet_type.value
        if is_default:
            await clear_default_flag(user_id, db)

    wallet = Wallet(
        user_id=user_id,
        name=wallet_in.name.strip(),
        wallet_type=wallet_type,
        balance=to_stored_money(wallet_in.balance or 0),
        credit_limit=to_stored_money(wallet_in.credit_limit) if wallet_in.credit_limit is not None else None,
        icon=wallet_in.icon,
        color=wallet_in.color,
        is_default=is_default,
    )
    db.add(wallet)
    await _commit_default_switch(db, user_id)
    await db.refresh(wallet)
    return wallet, is_first


async def update_wallet(wallet: Wallet, wallet_in: WalletUpdate, db: AsyncSession) -> Wallet:
    changes = provided_fields(wallet_in)

    if changes.get("is_default") is True:
        await lock_user(wallet.user_id, db)
        await clear_default_flag(wallet.user_id, db, exclude_id=wallet.id)

    for field, value in changes.items():
        if isinstance(value, WalletType):
            value = value.value
        elif field == "credit_limit":
            value = to_stored_money(value)
        elif field == "name":
            value = value.strip()
        setattr(wallet, field, value)

    wallet.updated_at = utcnow()
    db.add(wallet)
    await _commit_default_switch(db, wallet.user_id)
    await db.refresh(wallet)
    return wallet


async def delete_wallet(wallet: Wallet, db: AsyncSession) -> int:
    """Soft delete. Returns how many transactions still reference the wallet."""
    result = await db.execute(
        select(func.count())
        .select_from(Transaction)
        .where(Transaction.wallet_id == wallet.id, Transaction.user_id == wallet.user_id)
    )
    transaction_count = result.scalar_one()

    # Guarded on deleted_at so a concurrent delete cannot succeed twice
    result = await db.execute(
        update(Wallet)
        .where(Wallet.id == wallet.id, Wallet.deleted_at.is_(None))
        .values(deleted_at=utcnow(), updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.rollback()
        raise NotFound("Wallet")

    await db.commit()
    logger.info(f"Soft-deleted wallet {wallet.id} ({transaction_count} transactions kept)")
    return transaction_count


async def adjust_balance(wallet_id: uuid.UUID, user_id: uuid.UUID, delta: Decimal, db: AsyncSession) -> None:
    """Apply a signed delta in SQL so concurrent writers serialise on the row.

    Only the transaction service calls this, inside its own unit of work.
    """
    await db.execute(
        update(Wallet)
        .where(Wallet.id == wallet_id, Wallet.user_id == user_id)
        .values(balance=Wallet.balance + delta, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
