"""
API Routes Package

Contains all route modules for the finance tracker API.
"""

from .dashboard import router as dashboard_router
from .budget import router as budget_router
from .transactions import router as transactions_router
from .recommendations import router as recommendations_router
from .savings import router as savings_router

__all__ = [
    "dashboard_router",
    "budget_router",
    "transactions_router",
    "recommendations_router",
    "savings_router",
]
