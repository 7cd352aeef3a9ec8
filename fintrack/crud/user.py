# fintrack/crud/user.py
import logging
import uuid
from typing import Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.core.config import Settings
from fintrack.core.database import utcnow
from fintrack.core.errors import Conflict, InvalidCredentials, ValidationError
from fintrack.core.security import create_access_token, get_password_hash, verify_password
from fintrack.crud.category import seed_default_categories
from fintrack.crud.wallet import create_default_wallet
from fintrack.models.user import User
from fintrack.schemas.user import UserRegister, UserUpdate

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


async def get_user_by_email(email: str, db: AsyncSession) -> Optional[User]:
    result = await db.execute(select(User).where(func.lower(User.email) == normalize_email(email)))
    return result.scalar_one_or_none()


async def get_user_by_username(username: str, db: AsyncSession) -> Optional[User]:
    result = await db.execute(select(User).where(User.username == username.strip()))
    return result.scalar_one_or_none()


async def get_user_by_identifier(identifier: str, db: AsyncSession) -> Optional[User]:
    """Login accepts either the email or the username.

    Usernames cannot contain "@", so an identifier with one is only ever
    matched against emails.
    """
    identifier = identifier.strip()
    if "@" in identifier:
        return await get_user_by_email(identifier, db)
    return await get_user_by_username(identifier, db)


async def get_user_by_id(user_id: uuid.UUID, db: AsyncSession) -> Optional[User]:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


def issue_token(user: User, settings: Settings) -> str:
    return create_access_token(user.id, user.email, settings)


async def _taken_identity_error(email: str, username: str, db: AsyncSession) -> Optional[Conflict]:
    if await get_user_by_email(email, db) is not None:
        return Conflict("Email is already registered")
    if await get_user_by_username(username, db) is not None:
        return Conflict("Username is already taken")
    return None


async def register_user(user_in: UserRegister, settings: Settings, db: AsyncSession) -> Tuple[str, User]:
    """
    Create the account, its starter wallet and the system categories in one
    commit. If any step fails nothing is stored.
    """
    email = normalize_email(user_in.email)
    username = user_in.username.strip()

    error = await _taken_identity_error(email, username, db)
    if error is not None:
        raise error

    user = User(
        email=email,
        username=username,
        name=user_in.name.strip(),
        password_hash=get_password_hash(user_in.password),
    )
    try:
        db.add(user)
        await db.flush()

        await seed_default_categories(db)
        await create_default_wallet(user.id, db)
        await db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration of the same email or username
        await db.rollback()
        error = await _taken_identity_error(email, username, db)
        if error is None:
            raise
        raise error

    logger.info(f"Registered user {user.id} ({user.username})")
    return issue_token(user, settings), user


async def authenticate_user(identifier: str, password: str, settings: Settings, db: AsyncSession) -> Tuple[str, User]:
    user = await get_user_by_identifier(identifier, db)
    if user is None:
        logger.info("Login failed: unknown identifier")
        raise InvalidCredentials()
    if not verify_password(password, user.password_hash):
        logger.info(f"Login failed: wrong password for user {user.id}")
        raise InvalidCredentials()
    return issue_token(user, settings), user


async def update_profile(user: User, user_in: UserUpdate, db: AsyncSession) -> User:
    if user_in.name is not None:
        user.name = user_in.name.strip()

    if user_in.new_password is not None:
        if not user_in.current_password:
            raise ValidationError("Current password is required to set a new password")
        if not verify_password(user_in.current_password, user.password_hash):
            raise InvalidCredentials("Current password is incorrect")
        user.password_hash = get_password_hash(user_in.new_password)
        logger.info(f"Password changed for user {user.id}")

    user.updated_at = utcnow()
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user
