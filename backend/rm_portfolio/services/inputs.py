"""Normalized transaction input shared by the aggregation services.

Rows reach the engine from the database, from JSON payloads and from tests,
so every numeric and date read goes through :func:`as_decimal` and
:func:`as_date`. Malformed values never propagate into a sum: numbers read
as zero and dates read as ``None``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Union

ZERO = Decimal("0")
HUNDRED = Decimal("100")

NumericLike = Union[Decimal, float, int, str, None]
DateLike = Union[datetime, date, str, None]

_SEPARATORS = re.compile(r"[\s\-]+")


def as_decimal(value: object) -> Decimal:
    """Return ``value`` as a finite Decimal, or zero when it cannot be read."""

    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip().replace(",", "")
        if not text:
            return ZERO
        try:
            result = Decimal(text)
        except InvalidOperation:
            return ZERO
    else:
        return ZERO
    if not result.is_finite():
        return ZERO
    return result


def as_date(value: object) -> date | None:
    """Return the calendar date of ``value`` or ``None`` when unparsable."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            return None
    return None


def normalize_product_type(value: str | None) -> str:
    """Lower-case a product type and read spaces or hyphens as underscores."""

    if not value:
        return ""
    return _SEPARATORS.sub("_", value.strip().lower())


@dataclass(frozen=True)
class TransactionInput:
    """Read-only view of one ledger entry as consumed by the engine."""

    transaction_type: str | None
    product_type: str | None = None
    product_name: str | None = None
    amount: NumericLike = None
    fees: NumericLike = None
    taxes: NumericLike = None
    total_amount: NumericLike = None
    transaction_date: DateLike = None
    client_id: int | None = None
    id: str | None = None

    @property
    def kind(self) -> str:
        return (self.transaction_type or "").strip().lower()

    @property
    def amount_value(self) -> Decimal:
        return as_decimal(self.amount)

    @property
    def fees_value(self) -> Decimal:
        return as_decimal(self.fees)

    @property
    def taxes_value(self) -> Decimal:
        return as_decimal(self.taxes)

    @property
    def net_total(self) -> Decimal:
        """Stored ``total_amount``, derived from its parts when absent."""

        if self.total_amount is None:
            return self.amount_value + self.fees_value + self.taxes_value
        return as_decimal(self.total_amount)

    @property
    def trade_date(self) -> date | None:
        return as_date(self.transaction_date)


__all__ = [
    "DateLike",
    "HUNDRED",
    "NumericLike",
    "TransactionInput",
    "ZERO",
    "as_date",
    "as_decimal",
    "normalize_product_type",
]
