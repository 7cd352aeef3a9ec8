# fintrack/models/budget.py
import uuid
from sqlalchemy import Column, ForeignKey, Index, Numeric, Boolean, Integer, DateTime, Uuid, text
from sqlalchemy.orm import relationship
from fintrack.core.database import Base, utcnow

# One live budget per (user, category, month, year); NULL category is its own slot
_LIVE_WITH_CATEGORY = text("deleted_at IS NULL AND category_id IS NOT NULL")
_LIVE_OVERALL = text("deleted_at IS NULL AND category_id IS NULL")

class Budget(Base):
    __tablename__ = "budgets"
    __table_args__ = (
        Index(
            "uq_budgets_user_category_period",
            "user_id", "category_id", "month", "year",
            unique=True,
            postgresql_where=_LIVE_WITH_CATEGORY,
            sqlite_where=_LIVE_WITH_CATEGORY,
        ),
        Index(
            "uq_budgets_user_overall_period",
            "user_id", "month", "year",
            unique=True,
            postgresql_where=_LIVE_OVERALL,
            sqlite_where=_LIVE_OVERALL,
        ),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # NULL means the budget covers every expense of the month
    category_id = Column(Uuid(as_uuid=True), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    amount = Column(Numeric(14, 2), nullable=False)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    is_active = Column(Boolean(), nullable=False, default=True)
    alert_threshold = Column(Integer, nullable=True)  # percent, 0-100

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="budgets")
    category = relationship("Category", lazy="joined")

    def __repr__(self):
        return f"<Budget amount={self.amount} period={self.month}/{self.year} user_id={self.user_id}>"
