# fintrack/crud/category.py
import logging
import uuid
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.core.database import utcnow
from fintrack.core.errors import Conflict, NotFound
from fintrack.crud.locks import lock_user
from fintrack.models.budget import Budget
from fintrack.models.category import Category, CategoryType
from fintrack.models.transaction import Transaction
from fintrack.schemas.category import CategoryCreate, CategoryUpdate
from fintrack.schemas.common import provided_fields

logger = logging.getLogger(__name__)

# System categories shared by every user (user_id IS NULL)
DEFAULT_CATEGORIES: List[dict] = [
    {"name": "Salary", "icon": "💼", "color": "#22c55e", "category_type": "income"},
    {"name": "Freelance", "icon": "💻", "color": "#10b981", "category_type": "income"},
    {"name": "Investment", "icon": "📈", "color": "#14b8a6", "category_type": "income"},
    {"name": "Bonus", "icon": "💰", "color": "#059669", "category_type": "income"},
    {"name": "Food", "icon": "🍔", "color": "#ef4444", "category_type": "expense"},
    {"name": "Transport", "icon": "🚗", "color": "#f97316", "category_type": "expense"},
    {"name": "Shopping", "icon": "🛒", "color": "#eab308", "category_type": "expense"},
    {"name": "Entertainment", "icon": "🎮", "color": "#8b5cf6", "category_type": "expense"},
    {"name": "Bills", "icon": "📄", "color": "#ec4899", "category_type": "expense"},
    {"name": "Health", "icon": "💊", "color": "#06b6d4", "category_type": "expense"},
    {"name": "Education", "icon": "📚", "color": "#3b82f6", "category_type": "expense"},
    {"name": "Other", "icon": "📦", "color": "#6b7280", "category_type": "expense"},
]


def visible_to(user_id: uuid.UUID):
    """A user sees their own categories plus the system ones."""
    return or_(Category.user_id == user_id, Category.user_id.is_(None))


async def seed_default_categories(db: AsyncSession) -> List[Category]:
    """Make sure the system categories exist; create the missing ones.

    Flushes but does not commit, so it can run inside a larger unit of work.
    Returns the categories that were created (empty if none were needed).
    """
    result = await db.execute(
        select(Category.name, Category.category_type).where(Category.user_id.is_(None))
    )
    existing = {(name, category_type) for name, category_type in result.all()}

    categories_to_create: List[Category] = []
    for cat in DEFAULT_CATEGORIES:
        if (cat["name"], cat["category_type"]) not in existing:
            categories_to_create.append(Category(user_id=None, **cat))

    if categories_to_create:
        db.add_all(categories_to_create)
        await db.flush()
        logger.info(f"Seeded {len(categories_to_create)} system categories")

    return categories_to_create


async def get_categories_for_user(user_id: uuid.UUID, db: AsyncSession) -> List[Category]:
    result = await db.execute(
        select(Category)
        .where(visible_to(user_id), Category.deleted_at.is_(None))
        .order_by(Category.name, Category.category_type)
    )
    return list(result.scalars().all())


async def get_category_by_id(category_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Category:
    """Visible, non-deleted category or NotFound."""
    result = await db.execute(
        select(Category).where(
            Category.id == category_id,
            visible_to(user_id),
            Category.deleted_at.is_(None),
        )
    )
    category = result.scalar_one_or_none()
    if category is None:
        raise NotFound("Category")
    return category


async def get_owned_category(category_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Category:
    """Only user-owned categories can change; system ones read as missing."""
    result = await db.execute(
        select(Category).where(
            Category.id == category_id,
            Category.user_id == user_id,
            Category.deleted_at.is_(None),
        )
    )
    category = result.scalar_one_or_none()
    if category is None:
        raise NotFound("Category")
    return category


async def _commit_category(category: Category, db: AsyncSession) -> None:
    # Read before commit; a rollback expires the instance
    name, category_type = category.name, category.category_type
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict(f"Category '{name}' ({category_type}) already exists")


async def create_category_for_user(user_id: uuid.UUID, cat_in: CategoryCreate, db: AsyncSession) -> Category:
    new_cat = Category(
        user_id=user_id,
        name=cat_in.name.strip(),
        category_type=cat_in.category_type.value,
        icon=cat_in.icon,
        color=cat_in.color,
    )
    db.add(new_cat)
    await _commit_category(new_cat, db)
    await db.refresh(new_cat)
    return new_cat


async def update_category(category: Category, cat_in: CategoryUpdate, db: AsyncSession) -> Category:
    for field, value in provided_fields(cat_in).items():
        if isinstance(value, CategoryType):
            value = value.value
        setattr(category, field, value)
    db.add(category)
    await _commit_category(category, db)
    await db.refresh(category)
    return category


async def delete_category(category: Category, user_id: uuid.UUID, db: AsyncSession) -> None:
    """Soft delete, refused while transactions or live budgets still point at it."""
    transaction_count = (await db.execute(
        select(func.count())
        .select_from(Transaction)
        .where(Transaction.category_id == category.id, Transaction.user_id == user_id)
    )).scalar_one()

    budget_count = (await db.execute(
        select(func.count())
        .select_from(Budget)
        .where(
            Budget.category_id == category.id,
            Budget.user_id == user_id,
            Budget.deleted_at.is_(None),
        )
    )).scalar_one()

    if transaction_count > 0 or budget_count > 0:
        logger.warning(
            f"Refusing to delete category {category.id}: "
            f"{transaction_count} transactions, {budget_count} budgets"
        )
        raise Conflict(
            f"This category is used by {transaction_count} transactions and {budget_count} budgets. "
            "Delete or update the related data first."
        )

    now = utcnow()
    category.deleted_at = now
    category.updated_at = now
    db.add(category)
    await db.commit()


async def resolve_or_create_by_name(
    user_id: uuid.UUID,
    name: str,
    category_type: str,
    db: AsyncSession,
) -> Category:
    """Exact name + type among the visible categories, otherwise a new user-owned one.

    Flushes but does not commit; the caller owns the unit of work.
    """
    name = name.strip()
    # Two requests naming the same new category must not both create it
    await lock_user(user_id, db)
    result = await db.execute(
        select(Category)
        .where(
            Category.name == name,
            Category.category_type == category_type,
            visible_to(user_id),
            Category.deleted_at.is_(None),
        )
        # Prefer the user's own category over a system one with the same name
        .order_by(Category.user_id.is_(None))
        .limit(1)
    )
    category = result.scalar_one_or_none()
    if category is not None:
        return category

    category = Category(user_id=user_id, name=name, category_type=category_type)
    db.add(category)
    await db.flush()
    logger.info(f"Created category '{name}' ({category_type}) for user {user_id}")
    return category
