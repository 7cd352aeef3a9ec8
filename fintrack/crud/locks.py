# fintrack/crud/locks.py
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.models.user import User


async def lock_user(user_id: uuid.UUID, db: AsyncSession) -> None:
    """Hold the user's row lock until the current transaction ends.

    Used before check-then-write sequences that span rows (the default wallet
    switch, category resolution by name). SQLite renders no FOR UPDATE; its
    writers are serialised by the database lock instead.
    """
    await db.execute(select(User.id).where(User.id == user_id).with_for_update())
