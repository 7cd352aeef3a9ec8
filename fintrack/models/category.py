# fintrack/models/category.py
import uuid
import enum
from sqlalchemy import Column, String, ForeignKey, Index, DateTime, Uuid, text
from sqlalchemy.orm import relationship
from fintrack.core.database import Base, utcnow

class CategoryType(str, enum.Enum):
    income = "income"
    expense = "expense"

# A user cannot own two live categories with the same name and type
_LIVE_OWNED = text("deleted_at IS NULL AND user_id IS NOT NULL")

class Category(Base):
    __tablename__ = "categories"
    __table_args__ = (
        Index(
            "uq_categories_user_name_type",
            "user_id", "name", "category_type",
            unique=True,
            postgresql_where=_LIVE_OWNED,
            sqlite_where=_LIVE_OWNED,
        ),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # NULL for the system-default categories shared by every user
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    name = Column(String(length=100), nullable=False)
    category_type = Column(String(length=20), nullable=False)
    icon = Column(String(length=50), nullable=True)
    color = Column(String(length=20), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="categories")

    @property
    def is_default(self) -> bool:
        return self.user_id is None

    def __repr__(self):
        return f"<Category name={self.name} type={self.category_type} user_id={self.user_id}>"
