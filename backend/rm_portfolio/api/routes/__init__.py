"""Route registration helpers."""

from __future__ import annotations

from fastapi import APIRouter

from rm_portfolio.config import AppSettings
from rm_portfolio.database import Database

from .business_metrics import get_business_metrics_router
from .portfolio import get_portfolio_router
from .transactions import get_transactions_router


def get_api_router(database: Database, settings: AppSettings) -> APIRouter:
    api_router = APIRouter()
    api_router.include_router(get_transactions_router(database, settings))
    api_router.include_router(get_portfolio_router(database, settings))
    api_router.include_router(get_business_metrics_router(database, settings))
    return api_router


__all__ = ["get_api_router"]
