"""Pydantic schemas for client transactions."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from rm_portfolio.models import TRANSACTION_STATUSES, TRANSACTION_TYPES

_TYPE_PATTERN = f"(?i)^({'|'.join(TRANSACTION_TYPES)})$"
_STATUS_PATTERN = f"(?i)^({'|'.join(TRANSACTION_STATUSES)})$"


class TransactionCreateRequest(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    transaction_date: datetime
    transaction_type: str = Field(..., pattern=_TYPE_PATTERN, examples=["buy"])
    product_type: str = Field(..., min_length=1, max_length=64, examples=["mutual_fund"])
    product_name: str = Field(..., min_length=1, max_length=255, examples=["HDFC Top 100 Fund"])
    amount: float
    fees: float = Field(default=0.0, ge=0)
    taxes: float = Field(default=0.0, ge=0)
    settlement_date: datetime | None = None
    product_category: str | None = Field(default=None, max_length=64)
    quantity: float | None = None
    price: float | None = None
    currency_code: str = Field(default="INR", min_length=3, max_length=3)
    status: str = Field(default="completed", pattern=_STATUS_PATTERN)
    reference: str | None = Field(default=None, max_length=64)
    description: str | None = Field(default=None, max_length=512)
    portfolio_impact: float | None = None


class TransactionUpdateRequest(BaseModel):
    """Partial update; only the fields sent are changed."""

    model_config = ConfigDict(allow_inf_nan=False)

    transaction_date: datetime | None = None
    transaction_type: str | None = Field(default=None, pattern=_TYPE_PATTERN)
    product_type: str | None = Field(default=None, min_length=1, max_length=64)
    product_name: str | None = Field(default=None, min_length=1, max_length=255)
    amount: float | None = None
    fees: float | None = Field(default=None, ge=0)
    taxes: float | None = Field(default=None, ge=0)
    settlement_date: datetime | None = None
    product_category: str | None = Field(default=None, max_length=64)
    quantity: float | None = None
    price: float | None = None
    currency_code: str | None = Field(default=None, min_length=3, max_length=3)
    status: str | None = Field(default=None, pattern=_STATUS_PATTERN)
    reference: str | None = Field(default=None, max_length=64)
    description: str | None = Field(default=None, max_length=512)
    portfolio_impact: float | None = None


class TransactionSchema(BaseModel):
    id: int
    client_id: int
    transaction_date: datetime
    settlement_date: datetime | None = None
    transaction_type: str
    product_type: str
    product_name: str
    product_category: str | None = None
    quantity: float | None = None
    price: float | None = None
    amount: float
    fees: float
    taxes: float
    total_amount: float
    currency_code: str
    status: str
    reference: str | None = None
    description: str | None = None
    portfolio_impact: float | None = None

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "client_id": 7,
                "transaction_date": "2024-01-05T10:00:00+05:30",
                "transaction_type": "buy",
                "product_type": "mutual_fund",
                "product_name": "HDFC Top 100 Fund",
                "amount": 30000.0,
                "fees": 25.0,
                "taxes": 4.5,
                "total_amount": 30029.5,
                "currency_code": "INR",
                "status": "completed",
            }
        },
    )


__all__ = [
    "TransactionCreateRequest",
    "TransactionSchema",
    "TransactionUpdateRequest",
]
