"""Portfolio report assembly for a single client."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from rm_portfolio.config import AppSettings
from rm_portfolio.models import Client, Transaction

from .allocation import PortfolioSummary, compute_portfolio_summary
from .inputs import ZERO, as_decimal
from .performance import PerformancePeriod, compute_performance_periods
from .transactions import get_client, list_recent_transactions, list_transactions, to_transaction_input

_AUM_PATTERN = re.compile(r"₹?\s*([\d.,]+)\s*(L|Lakhs?|Cr|Crores?)?", re.IGNORECASE)
_AUM_UNITS = {"l": Decimal("100000"), "cr": Decimal("10000000")}


def parse_aum_value(value: object) -> Decimal:
    """Read a display AUM such as ``"₹12.5 L"`` or ``"₹1.2 Cr"`` as rupees.

    Numbers pass through. Empty strings, unknown units and any other text
    give zero.
    """

    if value is None:
        return ZERO
    if not isinstance(value, str):
        return as_decimal(value)
    match = _AUM_PATTERN.fullmatch(value.strip())
    if match is None:
        return ZERO
    amount = as_decimal(match.group(1))
    unit = (match.group(2) or "").lower()
    if unit.startswith("l"):
        return amount * _AUM_UNITS["l"]
    if unit.startswith("cr"):
        return amount * _AUM_UNITS["cr"]
    return amount


def client_aum_value(client: Client) -> Decimal:
    stored = as_decimal(client.aum_value)
    return stored if stored else parse_aum_value(client.aum)


def today_in(settings: AppSettings) -> date:
    return datetime.now(settings.zone).date()


@dataclass
class PortfolioReport:
    client: Client
    aum_value: Decimal
    generated_at: datetime
    as_of: date
    summary: PortfolioSummary
    performance: list[PerformancePeriod]
    recent_transactions: list[Transaction]


async def build_portfolio_report(
    session: AsyncSession,
    client_id: int,
    settings: AppSettings,
    *,
    as_of: date | None = None,
) -> PortfolioReport:
    """Gather everything the client report view renders.

    Allocation and performance use the full history; only the transaction
    table is limited to the most recent rows.
    """

    client = await get_client(session, client_id)
    rows = await list_transactions(session, client_id)
    history = [to_transaction_input(tx, settings.zone) for tx in rows]
    recent = await list_recent_transactions(session, client_id, limit=settings.recent_transactions_limit)
    report_date = as_of or today_in(settings)
    summary = compute_portfolio_summary(
        history,
        growth_rate=settings.assumed_growth_rate,
        region=settings.default_region,
        holdings_limit=settings.holdings_limit,
    )
    performance = compute_performance_periods(
        history,
        as_of=report_date,
        growth_rate=settings.assumed_growth_rate,
        benchmark_ratio=settings.benchmark_ratio,
    )
    return PortfolioReport(
        client=client,
        aum_value=client_aum_value(client),
        generated_at=datetime.now(settings.zone),
        as_of=report_date,
        summary=summary,
        performance=performance,
        recent_transactions=recent,
    )


__all__ = [
    "PortfolioReport",
    "build_portfolio_report",
    "client_aum_value",
    "parse_aum_value",
    "today_in",
]
