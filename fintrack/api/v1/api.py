# fintrack/api/v1/api.py
from fastapi import APIRouter

from fintrack.api.v1.routes import auth, budgets, categories, dashboard, transactions, users, wallets

api_router = APIRouter()

# Each router carries its own prefix
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(wallets.router)
api_router.include_router(categories.router)
api_router.include_router(transactions.router)
api_router.include_router(budgets.router)
api_router.include_router(dashboard.router)
