"""Pydantic schemas for business-metrics drill-downs."""

from __future__ import annotations

from pydantic import BaseModel, Field


class BreakdownItemSchema(BaseModel):
    category: str = Field(..., examples=["Mutual Funds"])
    value: float
    percentage: float
    count: int


class HealthResponse(BaseModel):
    status: str
    service: str
    timestamp: str
    timezone: str


__all__ = ["BreakdownItemSchema", "HealthResponse"]
