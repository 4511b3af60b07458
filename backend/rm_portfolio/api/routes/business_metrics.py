"""RM business-metrics drill-down endpoints."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rm_portfolio.config import AppSettings
from rm_portfolio.core.telemetry import aggregation_span
from rm_portfolio.database import Database
from rm_portfolio.schemas import BreakdownItemSchema
from rm_portfolio.services import transactions as transaction_store
from rm_portfolio.services.business_metrics import (
    BreakdownItem,
    asset_class_breakdown,
    client_breakdown,
    revenue_by_product_type,
)


def _items(items: list[BreakdownItem]) -> list[BreakdownItemSchema]:
    return [BreakdownItemSchema(**asdict(item)) for item in items]


def get_business_metrics_router(database: Database, settings: AppSettings) -> APIRouter:
    router = APIRouter(prefix="/business-metrics/{user_id}", tags=["business-metrics"])

    @router.get("/aum/asset-class", response_model=list[BreakdownItemSchema])
    async def get_aum_by_asset_class(
        user_id: int,
        session: AsyncSession = Depends(database.get_session),
    ) -> list[BreakdownItemSchema]:
        rows = await transaction_store.list_transactions_for_rm(session, user_id)
        with aggregation_span("aum_by_asset_class", len(rows), user_id=user_id):
            inputs = [transaction_store.to_transaction_input(tx, settings.zone) for tx in rows]
            items = asset_class_breakdown(inputs)
        return _items(items)

    @router.get("/revenue/product-type", response_model=list[BreakdownItemSchema])
    async def get_revenue_by_product_type(
        user_id: int,
        session: AsyncSession = Depends(database.get_session),
    ) -> list[BreakdownItemSchema]:
        rows = await transaction_store.list_transactions_for_rm(session, user_id)
        with aggregation_span("revenue_by_product_type", len(rows), user_id=user_id):
            inputs = [transaction_store.to_transaction_input(tx, settings.zone) for tx in rows]
            items = revenue_by_product_type(inputs)
        return _items(items)

    @router.get("/clients/tier", response_model=list[BreakdownItemSchema])
    async def get_clients_by_tier(
        user_id: int,
        session: AsyncSession = Depends(database.get_session),
    ) -> list[BreakdownItemSchema]:
        clients = await transaction_store.list_clients_for_rm(session, user_id)
        return _items(client_breakdown(clients, "tier"))

    @router.get("/clients/risk-profile", response_model=list[BreakdownItemSchema])
    async def get_clients_by_risk_profile(
        user_id: int,
        session: AsyncSession = Depends(database.get_session),
    ) -> list[BreakdownItemSchema]:
        clients = await transaction_store.list_clients_for_rm(session, user_id)
        return _items(client_breakdown(clients, "risk_profile"))

    return router


__all__ = ["get_business_metrics_router"]
