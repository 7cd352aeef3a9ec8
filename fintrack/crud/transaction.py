# fintrack/crud/transaction.py
"""
Transaction engine.

Every write here pairs the transaction row with its balance adjustment in a
single session commit, so a wallet's balance always equals its opening
balance plus the signed amounts of the transactions attached to it.
"""
import logging
import uuid
from datetime import date
from typing import List, Tuple

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.core.database import utcnow
from fintrack.core.errors import NotFound
from fintrack.crud.category import get_category_by_id, resolve_or_create_by_name
from fintrack.crud.wallet import adjust_balance, ensure_default_wallet, get_default_wallet, get_wallet_by_id
from fintrack.models.transaction import Transaction
from fintrack.schemas.transaction import TransactionCreate, TransactionFilters, TransactionUpdate
from fintrack.utils.money import signed_amount, to_money

logger = logging.getLogger(__name__)


def _apply_filters(query, user_id: uuid.UUID, filters: TransactionFilters):
    query = query.where(Transaction.user_id == user_id)
    if filters.wallet_id is not None:
        query = query.where(Transaction.wallet_id == filters.wallet_id)
    if filters.category_id is not None:
        query = query.where(Transaction.category_id == filters.category_id)
    if filters.transaction_type is not None:
        query = query.where(Transaction.transaction_type == filters.transaction_type.value)
    if filters.start_date is not None:
        query = query.where(Transaction.date >= filters.start_date)
    if filters.end_date is not None:
        query = query.where(Transaction.date <= filters.end_date)
    return query


async def get_transactions_for_user(
    user_id: uuid.UUID,
    filters: TransactionFilters,
    db: AsyncSession,
) -> Tuple[List[Transaction], int]:
    """One page of transactions plus the number matching the filters."""
    result = await db.execute(
        _apply_filters(select(Transaction), user_id, filters)
        .order_by(desc(Transaction.date), desc(Transaction.created_at))
        .limit(filters.limit)
        .offset(filters.offset)
    )
    transactions = list(result.unique().scalars().all())

    total = (await db.execute(
        _apply_filters(select(func.count()).select_from(Transaction), user_id, filters)
    )).scalar_one()

    return transactions, total


async def get_transaction_by_id(transaction_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Transaction:
    result = await db.execute(
        select(Transaction)
        .where(Transaction.id == transaction_id, Transaction.user_id == user_id)
        # Reload the joined wallet/category even if they sit in the identity map
        .execution_options(populate_existing=True)
    )
    tx = result.unique().scalar_one_or_none()
    if tx is None:
        raise NotFound("Transaction")
    return tx


async def create_transaction_for_user(user_id: uuid.UUID, tx_in: TransactionCreate, db: AsyncSession) -> Transaction:
    transaction_type = tx_in.transaction_type.value
    amount = to_money(tx_in.amount)

    # Checks first; nothing is written until they pass
    if tx_in.wallet_id is not None:
        wallet = await get_wallet_by_id(tx_in.wallet_id, user_id, db)
    else:
        wallet = await get_default_wallet(user_id, db)
    category_id = None
    if tx_in.category_id is not None:
        category_id = (await get_category_by_id(tx_in.category_id, user_id, db)).id

    if wallet is None:
        wallet = await ensure_default_wallet(user_id, db)
    if category_id is None and tx_in.category_name:
        category_id = (await resolve_or_create_by_name(user_id, tx_in.category_name, transaction_type, db)).id

    new_tx = Transaction(
        user_id=user_id,
        wallet_id=wallet.id,
        category_id=category_id,
        transaction_type=transaction_type,
        amount=amount,
        description=tx_in.description,
        date=tx_in.date or date.today(),
    )
    db.add(new_tx)
    await db.flush()
    await adjust_balance(wallet.id, user_id, signed_amount(transaction_type, amount), db)
    await db.commit()

    logger.info(f"Transaction {new_tx.id} ({transaction_type} {amount}) recorded on wallet {wallet.id}")
    return await get_transaction_by_id(new_tx.id, user_id, db)


async def update_transaction(tx: Transaction, tx_in: TransactionUpdate, db: AsyncSession) -> Transaction:
    """Partial update. The old balance effect is always reversed and the new one applied."""
    user_id = tx.user_id
    old_wallet_id = tx.wallet_id
    old_effect = signed_amount(tx.transaction_type, tx.amount)

    new_type = tx_in.transaction_type.value if tx_in.transaction_type is not None else tx.transaction_type
    new_amount = to_money(tx_in.amount) if tx_in.amount is not None else to_money(tx.amount)

    new_wallet_id = old_wallet_id
    if tx_in.wallet_id is not None and tx_in.wallet_id != old_wallet_id:
        new_wallet_id = (await get_wallet_by_id(tx_in.wallet_id, user_id, db)).id
    new_category_id = tx.category_id
    if tx_in.category_id is not None:
        if tx_in.category_id != tx.category_id:
            new_category_id = (await get_category_by_id(tx_in.category_id, user_id, db)).id
    elif tx_in.category_name:
        # Resolved against the type the transaction will have after the update
        new_category_id = (await resolve_or_create_by_name(user_id, tx_in.category_name, new_type, db)).id

    await adjust_balance(old_wallet_id, user_id, -old_effect, db)

    tx.wallet_id = new_wallet_id
    tx.category_id = new_category_id
    tx.transaction_type = new_type
    tx.amount = new_amount
    if tx_in.description is not None:
        tx.description = tx_in.description
    if tx_in.date is not None:
        tx.date = tx_in.date
    tx.updated_at = utcnow()
    db.add(tx)
    await db.flush()

    await adjust_balance(new_wallet_id, user_id, signed_amount(new_type, new_amount), db)
    await db.commit()

    return await get_transaction_by_id(tx.id, user_id, db)


async def delete_transaction(tx: Transaction, db: AsyncSession) -> None:
    await adjust_balance(tx.wallet_id, tx.user_id, -signed_amount(tx.transaction_type, tx.amount), db)
    await db.delete(tx)
    await db.commit()
    logger.info(f"Transaction {tx.id} deleted, wallet {tx.wallet_id} reverted")
