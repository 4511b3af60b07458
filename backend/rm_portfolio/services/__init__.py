"""Aggregation engine and transaction store."""

from .allocation import Holding, PortfolioSummary, Sector, compute_portfolio_summary, sector_for
from .business_metrics import AssetClass, BreakdownItem, asset_class_breakdown, client_breakdown, revenue_by_product_type
from .inputs import TransactionInput, as_date, as_decimal
from .performance import PerformancePeriod, compute_performance_periods
from .periods import GroupBy, PeriodSummary, WeekNumbering, compute_transaction_summary, period_key

__all__ = [
    "AssetClass",
    "BreakdownItem",
    "GroupBy",
    "Holding",
    "PerformancePeriod",
    "PeriodSummary",
    "PortfolioSummary",
    "Sector",
    "TransactionInput",
    "WeekNumbering",
    "as_date",
    "as_decimal",
    "asset_class_breakdown",
    "client_breakdown",
    "compute_performance_periods",
    "compute_portfolio_summary",
    "compute_transaction_summary",
    "period_key",
    "revenue_by_product_type",
    "sector_for",
]
