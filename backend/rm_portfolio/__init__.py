"""RM dashboard portfolio service: transaction aggregation and reporting."""

from .services import (
    PortfolioSummary,
    TransactionInput,
    compute_performance_periods,
    compute_portfolio_summary,
    compute_transaction_summary,
)

__all__ = [
    "PortfolioSummary",
    "TransactionInput",
    "compute_performance_periods",
    "compute_portfolio_summary",
    "compute_transaction_summary",
]
