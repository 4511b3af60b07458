"""Pydantic schema exports."""

from .metrics import BreakdownItemSchema, HealthResponse
from .portfolio import (
    ClientHeaderSchema,
    HoldingSchema,
    PerformancePeriodSchema,
    PeriodSummarySchema,
    PortfolioReportSchema,
    PortfolioSummarySchema,
)
from .transactions import TransactionCreateRequest, TransactionSchema, TransactionUpdateRequest

__all__ = [
    "BreakdownItemSchema",
    "ClientHeaderSchema",
    "HealthResponse",
    "HoldingSchema",
    "PerformancePeriodSchema",
    "PeriodSummarySchema",
    "PortfolioReportSchema",
    "PortfolioSummarySchema",
    "TransactionCreateRequest",
    "TransactionSchema",
    "TransactionUpdateRequest",
]
