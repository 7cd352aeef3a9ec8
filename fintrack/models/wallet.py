# fintrack/models/wallet.py
import uuid
import enum
from sqlalchemy import Column, String, ForeignKey, Index, Numeric, Boolean, DateTime, Uuid, text
from sqlalchemy.orm import relationship
from fintrack.core.database import Base, utcnow

class WalletType(str, enum.Enum):
    cash = "cash"
    bank = "bank"
    credit = "credit"
    e_wallet = "e-wallet"

# At most one live default wallet per user
_LIVE_DEFAULT = text("is_default AND deleted_at IS NULL")

class Wallet(Base):
    __tablename__ = "wallets"
    __table_args__ = (
        Index(
            "uq_wallets_user_default",
            "user_id",
            unique=True,
            postgresql_where=_LIVE_DEFAULT,
            sqlite_where=_LIVE_DEFAULT,
        ),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(length=100), nullable=False)
    wallet_type = Column(String(length=20), nullable=False, default=WalletType.cash.value)
    # Running sum of the signed amounts of the wallet's transactions (plus opening balance)
    balance = Column(Numeric(14, 2), nullable=False, default=0)
    credit_limit = Column(Numeric(14, 2), nullable=True)
    icon = Column(String(length=50), nullable=True)
    color = Column(String(length=20), nullable=True)
    is_default = Column(Boolean(), nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="wallets")

    def __repr__(self):
        return f"<Wallet name={self.name} balance={self.balance} user_id={self.user_id}>"
