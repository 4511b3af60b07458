"""Period-bucketed transaction summaries."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Iterable

from .inputs import ZERO, DateLike, TransactionInput, as_date

logger = logging.getLogger(__name__)


class GroupBy(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"


class WeekNumbering(str, Enum):
    """How ``week`` buckets are keyed.

    ``ISO`` uses the ISO-8601 week-of-year (``2024-W02``). ``MONTH_RELATIVE``
    reproduces the dashboard's historical keys: the week of the month counted
    from Sunday, formatted ``2024-W2``. Those keys repeat every month, so a
    ``2024-W2`` bucket gathers the second week of every month of 2024.
    """

    ISO = "iso"
    MONTH_RELATIVE = "month_relative"


@dataclass
class PeriodSummary:
    period: str
    transaction_count: int = 0
    total_amount: Decimal = ZERO
    total_fees: Decimal = ZERO
    total_taxes: Decimal = ZERO
    net_amount: Decimal = ZERO
    buy_count: int = 0
    sell_count: int = 0
    other_count: int = 0

    def add(self, tx: TransactionInput) -> None:
        self.transaction_count += 1
        self.total_amount += tx.amount_value
        self.total_fees += tx.fees_value
        self.total_taxes += tx.taxes_value
        self.net_amount += tx.net_total
        kind = tx.kind
        if kind == "buy":
            self.buy_count += 1
        elif kind == "sell":
            self.sell_count += 1
        else:
            self.other_count += 1


def _month_relative_week(day: date) -> int:
    first_weekday = (day.replace(day=1).weekday() + 1) % 7  # Sunday -> 0
    return (day.day + first_weekday + 6) // 7


def period_key(
    day: date,
    group_by: GroupBy | str,
    week_numbering: WeekNumbering | str = WeekNumbering.ISO,
) -> str:
    """Return the canonical, zero-padded bucket key for ``day``."""

    grouping = GroupBy(group_by)
    if grouping is GroupBy.DAY:
        return day.isoformat()
    if grouping is GroupBy.WEEK:
        if WeekNumbering(week_numbering) is WeekNumbering.MONTH_RELATIVE:
            return f"{day.year:04d}-W{_month_relative_week(day)}"
        iso_year, iso_week, _ = day.isocalendar()
        return f"{iso_year:04d}-W{iso_week:02d}"
    if grouping is GroupBy.MONTH:
        return f"{day.year:04d}-{day.month:02d}"
    if grouping is GroupBy.QUARTER:
        return f"{day.year:04d}-Q{(day.month - 1) // 3 + 1}"
    return f"{day.year:04d}"


def _bound(value: DateLike, name: str) -> date | None:
    if value is None:
        return None
    parsed = as_date(value)
    if parsed is None:
        raise ValueError(f"Invalid {name}: {value!r}")
    return parsed


def compute_transaction_summary(
    transactions: Iterable[TransactionInput],
    group_by: GroupBy | str,
    start_date: DateLike = None,
    end_date: DateLike = None,
    *,
    week_numbering: WeekNumbering | str = WeekNumbering.ISO,
) -> list[PeriodSummary]:
    """Bucket transactions by period and total each bucket.

    The optional date range is inclusive on calendar dates and applied before
    bucketing. Rows without a readable date are skipped with a warning. The
    result is sorted by period key.
    """

    grouping = GroupBy(group_by)
    numbering = WeekNumbering(week_numbering)
    start = _bound(start_date, "start_date")
    end = _bound(end_date, "end_date")

    buckets: dict[str, PeriodSummary] = {}
    skipped = 0
    for tx in transactions:
        day = tx.trade_date
        if day is None:
            skipped += 1
            logger.warning(
                "Skipping transaction %s with unreadable date %r", tx.id, tx.transaction_date
            )
            continue
        if start is not None and day < start:
            continue
        if end is not None and day > end:
            continue
        key = period_key(day, grouping, numbering)
        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = PeriodSummary(period=key)
        bucket.add(tx)

    if skipped:
        logger.info("Transaction summary excluded %d undated transaction(s)", skipped)
    return [buckets[key] for key in sorted(buckets)]


__all__ = [
    "GroupBy",
    "PeriodSummary",
    "WeekNumbering",
    "compute_transaction_summary",
    "period_key",
]
