"""
FastAPI Main Application

Entry point for the personal finance tracker API.
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .database import init_db
from .routes import (
    dashboard_router,
    budget_router,
    transactions_router,
    recommendations_router,
    savings_router,
)

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logger.info("Starting Finance Tracker API...")
    init_db()
    yield
    # Shutdown
    logger.info("Shutting down Finance Tracker API...")


app = FastAPI(
    title="Finance Tracker API",
    description="Budgets, transactions and spending pace recommendations",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS configuration
cors_origins = os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(dashboard_router, prefix="/api")
app.include_router(budget_router, prefix="/api")
app.include_router(transactions_router, prefix="/api")
app.include_router(recommendations_router, prefix="/api")
app.include_router(savings_router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Finance Tracker API",
        "version": "1.0.0",
        "status": "running",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/api")
async def api_info():
    """API information endpoint."""
    return {
        "endpoints": {
            "dashboard": "/api/dashboard/summary",
            "budgets": "/api/budgets",
            "monthly_budget": "/api/budgets/monthly",
            "transactions": "/api/transactions",
            "export": "/api/transactions/export",
            "categories": "/api/transactions/categories",
            "recommendations": "/api/recommendations",
            "recommendation_history": "/api/recommendations/history",
            "savings": "/api/savings/contribute",
        },
        "authentication": "X-User-ID header required in production",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("ENVIRONMENT", "development") == "development",
    )
