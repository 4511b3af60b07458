"""Pydantic schemas for portfolio summaries, periods and reports."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field

from .transactions import TransactionSchema


class HoldingSchema(BaseModel):
    name: str
    type: str
    allocation: float = Field(..., description="Percent of total buy volume")
    invested_amount: float = 0.0


class PortfolioSummarySchema(BaseModel):
    total_investment: float
    total_sell_amount: float
    current_value: float
    unrealized_gain: float
    unrealized_gain_percent: float
    asset_allocation: dict[str, float]
    sector_allocation: dict[str, float]
    geographic_allocation: dict[str, float]
    holdings: list[HoldingSchema]


class PeriodSummarySchema(BaseModel):
    period: str = Field(..., examples=["2024-01"])
    transaction_count: int
    total_amount: float
    total_fees: float
    total_taxes: float
    net_amount: float
    buy_count: int
    sell_count: int
    other_count: int


class PerformancePeriodSchema(BaseModel):
    label: str = Field(..., examples=["1M"])
    value: float
    benchmark: float
    alpha: float
    total_invested: float


class ClientHeaderSchema(BaseModel):
    id: int
    full_name: str
    tier: str
    risk_profile: str | None = None
    aum: str
    aum_value: float


class PortfolioReportSchema(BaseModel):
    client: ClientHeaderSchema
    generated_at: datetime
    as_of: date
    summary: PortfolioSummarySchema
    performance: list[PerformancePeriodSchema]
    recent_transactions: list[TransactionSchema]


__all__ = [
    "ClientHeaderSchema",
    "HoldingSchema",
    "PerformancePeriodSchema",
    "PeriodSummarySchema",
    "PortfolioReportSchema",
    "PortfolioSummarySchema",
]
