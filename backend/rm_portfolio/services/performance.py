"""Trailing performance periods for the portfolio dashboard.

The figures are placeholders. Each window reports the assumed growth rate as
its return whenever capital was invested in it, not a realized XIRR; the
label/value/benchmark/alpha shape is what the dashboard charts consume.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable

from .allocation import DEFAULT_GROWTH_RATE
from .inputs import HUNDRED, ZERO, DateLike, TransactionInput, as_date, as_decimal

logger = logging.getLogger(__name__)

DEFAULT_BENCHMARK_RATIO = Decimal("0.85")

# label -> trailing window in days; None means year to date
PERFORMANCE_WINDOWS: tuple[tuple[str, int | None], ...] = (
    ("1M", 30),
    ("3M", 90),
    ("6M", 180),
    ("YTD", None),
    ("1Y", 365),
    ("3Y", 1095),
)


@dataclass(frozen=True)
class PerformancePeriod:
    label: str
    value: Decimal
    benchmark: Decimal
    alpha: Decimal
    total_invested: Decimal = ZERO


def window_start(days: int | None, as_of: date) -> date:
    if days is None:
        return date(as_of.year, 1, 1)
    return as_of - timedelta(days=days)


def compute_performance_periods(
    transactions: Iterable[TransactionInput],
    *,
    as_of: DateLike = None,
    growth_rate: Decimal | float | str = DEFAULT_GROWTH_RATE,
    benchmark_ratio: Decimal | float | str = DEFAULT_BENCHMARK_RATIO,
) -> list[PerformancePeriod]:
    """Return one row per window in :data:`PERFORMANCE_WINDOWS`.

    ``as_of`` closes every window (inclusive) and defaults to today. Buys
    without a readable date cannot be placed in a window and are ignored.
    """

    end = as_date(as_of) if as_of is not None else date.today()
    if end is None:
        raise ValueError(f"Invalid as_of: {as_of!r}")
    rate = as_decimal(growth_rate)
    ratio = as_decimal(benchmark_ratio)

    dated_buys: list[tuple[date, Decimal]] = []
    for tx in transactions:
        if tx.kind != "buy":
            continue
        day = tx.trade_date
        if day is None:
            logger.warning("Ignoring buy %s with unreadable date %r", tx.id, tx.transaction_date)
            continue
        dated_buys.append((day, abs(tx.amount_value)))

    periods: list[PerformancePeriod] = []
    for label, days in PERFORMANCE_WINDOWS:
        start = window_start(days, end)
        invested = sum((amount for day, amount in dated_buys if start <= day <= end), ZERO)
        value = HUNDRED * (invested * rate) / invested if invested > 0 else ZERO
        benchmark = value * ratio
        periods.append(
            PerformancePeriod(
                label=label,
                value=value,
                benchmark=benchmark,
                alpha=value - benchmark,
                total_invested=invested,
            )
        )
    return periods


__all__ = [
    "DEFAULT_BENCHMARK_RATIO",
    "PERFORMANCE_WINDOWS",
    "PerformancePeriod",
    "compute_performance_periods",
    "window_start",
]
