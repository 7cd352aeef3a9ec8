# fintrack/models/__init__.py
# Importing the package registers every table on Base.metadata
from .user import User
from .wallet import Wallet, WalletType
from .category import Category, CategoryType
from .transaction import Transaction, TransactionType
from .budget import Budget

__all__ = [
    "User",
    "Wallet",
    "WalletType",
    "Category",
    "CategoryType",
    "Transaction",
    "TransactionType",
    "Budget",
]
