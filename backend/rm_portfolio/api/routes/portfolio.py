"""Portfolio summary, performance and report endpoints."""

from __future__ import annotations

from dataclasses import asdict
from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rm_portfolio.config import AppSettings
from rm_portfolio.core.telemetry import aggregation_span
from rm_portfolio.database import Database
from rm_portfolio.schemas import (
    ClientHeaderSchema,
    PerformancePeriodSchema,
    PortfolioReportSchema,
    PortfolioSummarySchema,
    TransactionSchema,
)
from rm_portfolio.services import transactions as transaction_store
from rm_portfolio.services.allocation import PortfolioSummary, compute_portfolio_summary
from rm_portfolio.services.performance import PerformancePeriod, compute_performance_periods
from rm_portfolio.services.report import build_portfolio_report, today_in


def _summary_schema(summary: PortfolioSummary) -> PortfolioSummarySchema:
    return PortfolioSummarySchema(**asdict(summary))


def _performance_schema(periods: list[PerformancePeriod]) -> list[PerformancePeriodSchema]:
    return [PerformancePeriodSchema(**asdict(period)) for period in periods]


def get_portfolio_router(database: Database, settings: AppSettings) -> APIRouter:
    router = APIRouter(tags=["portfolio"])

    @router.get("/clients/{client_id}/portfolio/summary", response_model=PortfolioSummarySchema)
    async def get_portfolio_summary(
        client_id: int,
        session: AsyncSession = Depends(database.get_session),
    ) -> PortfolioSummarySchema:
        rows = await transaction_store.list_transactions(session, client_id)
        inputs = [transaction_store.to_transaction_input(tx, settings.zone) for tx in rows]
        with aggregation_span("portfolio_summary", len(inputs)):
            summary = compute_portfolio_summary(
                inputs,
                growth_rate=settings.assumed_growth_rate,
                region=settings.default_region,
                holdings_limit=settings.holdings_limit,
            )
        return _summary_schema(summary)

    @router.get(
        "/clients/{client_id}/portfolio/performance",
        response_model=list[PerformancePeriodSchema],
    )
    async def get_portfolio_performance(
        client_id: int,
        as_of: date | None = None,
        session: AsyncSession = Depends(database.get_session),
    ) -> list[PerformancePeriodSchema]:
        rows = await transaction_store.list_transactions(session, client_id)
        inputs = [transaction_store.to_transaction_input(tx, settings.zone) for tx in rows]
        with aggregation_span("performance_periods", len(inputs)):
            periods = compute_performance_periods(
                inputs,
                as_of=as_of or today_in(settings),
                growth_rate=settings.assumed_growth_rate,
                benchmark_ratio=settings.benchmark_ratio,
            )
        return _performance_schema(periods)

    @router.get("/clients/{client_id}/portfolio-report", response_model=PortfolioReportSchema)
    async def get_portfolio_report(
        client_id: int,
        as_of: date | None = None,
        session: AsyncSession = Depends(database.get_session),
    ) -> PortfolioReportSchema:
        report = await build_portfolio_report(session, client_id, settings, as_of=as_of)
        client = report.client
        return PortfolioReportSchema(
            client=ClientHeaderSchema(
                id=client.id,
                full_name=client.full_name,
                tier=client.tier,
                risk_profile=client.risk_profile,
                aum=client.aum,
                aum_value=report.aum_value,
            ),
            generated_at=report.generated_at,
            as_of=report.as_of,
            summary=_summary_schema(report.summary),
            performance=_performance_schema(report.performance),
            recent_transactions=[TransactionSchema.model_validate(tx) for tx in report.recent_transactions],
        )

    return router


__all__ = ["get_portfolio_router"]
