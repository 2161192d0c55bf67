"""
FastAPI Backend for the Finance Tracker

Provides REST API endpoints for budgets, transactions and recommendations.
"""

from .main import app

__all__ = ["app"]
