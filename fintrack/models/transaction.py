# fintrack/models/transaction.py
import uuid
import enum
from sqlalchemy import Column, String, ForeignKey, Numeric, Date, DateTime, Uuid
from sqlalchemy.orm import relationship
from fintrack.core.database import Base, utcnow

class TransactionType(str, enum.Enum):
    income = "income"
    expense = "expense"

class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    wallet_id = Column(Uuid(as_uuid=True), ForeignKey("wallets.id"), nullable=False, index=True)
    category_id = Column(Uuid(as_uuid=True), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True)
    transaction_type = Column(String(length=20), nullable=False)
    # Always positive; the sign comes from transaction_type
    amount = Column(Numeric(14, 2), nullable=False)
    description = Column(String(length=255), nullable=True)
    date = Column(Date, nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="transactions")
    wallet = relationship("Wallet", lazy="joined")
    category = relationship("Category", lazy="joined")

    @property
    def category_name(self):
        # Soft-deleted categories are not shown
        if self.category is None or self.category.deleted_at is not None:
            return None
        return self.category.name

    @property
    def wallet_name(self):
        return self.wallet.name if self.wallet is not None else None

    def __repr__(self):
        return f"<Transaction {self.transaction_type} amount={self.amount} date={self.date} user_id={self.user_id}>"
