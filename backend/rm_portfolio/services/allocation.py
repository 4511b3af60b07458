"""Portfolio summary built from a client's transaction history.

Only ``buy`` rows count as allocated capital. Sells are totalled separately
and every other type (dividend, interest, fee, deposit, withdrawal) is left
out of the allocation figures. Valuation is a placeholder: invested capital
grown by a flat assumed rate, pending a real price feed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Iterable, Mapping

from rm_portfolio.config import DEFAULT_REGION

from .inputs import HUNDRED, ZERO, TransactionInput, as_decimal, normalize_product_type

DEFAULT_GROWTH_RATE = Decimal("0.12")
DEFAULT_HOLDINGS_LIMIT = 10
UNCATEGORISED = "Others"


class Sector(str, Enum):
    EQUITY = "Equity"
    FINANCIAL_SERVICES = "Financial Services"
    FIXED_INCOME = "Fixed Income"
    BALANCED = "Balanced"
    TAX_SAVING = "Tax Saving"
    PROTECTION = "Protection"
    STRUCTURED_PRODUCTS = "Structured Products"
    ALTERNATIVES = "Alternatives"
    OTHERS = "Others"


SECTOR_BY_PRODUCT_TYPE: Mapping[str, Sector] = {
    "equity": Sector.EQUITY,
    "direct_equity": Sector.EQUITY,
    "equity_funds": Sector.EQUITY,
    "mutual_fund": Sector.FINANCIAL_SERVICES,
    "mutual_funds": Sector.FINANCIAL_SERVICES,
    "bond": Sector.FIXED_INCOME,
    "bonds": Sector.FIXED_INCOME,
    "debt": Sector.FIXED_INCOME,
    "debt_funds": Sector.FIXED_INCOME,
    "fixed_deposit": Sector.FIXED_INCOME,
    "fds": Sector.FIXED_INCOME,
    "hybrid_funds": Sector.BALANCED,
    "elss": Sector.TAX_SAVING,
    "insurance": Sector.PROTECTION,
    "structured_product": Sector.STRUCTURED_PRODUCTS,
    "alternative_investment": Sector.ALTERNATIVES,
}


def sector_for(product_type: str | None) -> Sector:
    return SECTOR_BY_PRODUCT_TYPE.get(normalize_product_type(product_type), Sector.OTHERS)


@dataclass(frozen=True)
class Holding:
    name: str
    type: str
    allocation: Decimal
    invested_amount: Decimal = ZERO


NO_HOLDINGS = Holding(name="No Holdings", type="N/A", allocation=ZERO)


@dataclass
class PortfolioSummary:
    total_investment: Decimal = ZERO
    total_sell_amount: Decimal = ZERO
    current_value: Decimal = ZERO
    unrealized_gain: Decimal = ZERO
    unrealized_gain_percent: Decimal = ZERO
    asset_allocation: dict[str, Decimal] = field(default_factory=dict)
    sector_allocation: dict[str, Decimal] = field(default_factory=dict)
    geographic_allocation: dict[str, Decimal] = field(default_factory=dict)
    holdings: list[Holding] = field(default_factory=lambda: [NO_HOLDINGS])


def to_percentages(amounts: Mapping[str, Decimal]) -> dict[str, Decimal]:
    """Express each amount as a share of the total, largest first.

    An empty mapping is returned when the total is zero.
    """

    total = sum(amounts.values(), ZERO)
    if total == 0:
        return {}
    ordered = sorted(amounts.items(), key=lambda item: (-item[1], item[0]))
    return {key: HUNDRED * value / total for key, value in ordered}


def _add(bucket: dict, key, amount: Decimal) -> None:
    bucket[key] = bucket.get(key, ZERO) + amount


def compute_portfolio_summary(
    transactions: Iterable[TransactionInput],
    *,
    growth_rate: Decimal | float | str = DEFAULT_GROWTH_RATE,
    region: str = DEFAULT_REGION,
    holdings_limit: int = DEFAULT_HOLDINGS_LIMIT,
) -> PortfolioSummary:
    """Fold a transaction history into allocation, holdings and gain figures.

    Row order does not matter and the input is never modified. Buy amounts
    are taken as absolute values; malformed amounts read as zero.
    """

    total_investment = ZERO
    total_sell = ZERO
    assets: dict[str, Decimal] = {}
    sectors: dict[str, Decimal] = {}
    products: dict[str, dict[str, Decimal]] = {}

    for tx in transactions:
        kind = tx.kind
        if kind == "buy":
            amount = abs(tx.amount_value)
            if amount == 0:
                continue
            product_type = (tx.product_type or "").strip()
            total_investment += amount
            _add(assets, product_type or UNCATEGORISED, amount)
            _add(sectors, sector_for(product_type).value, amount)
            name = (tx.product_name or "").strip() or product_type or "Unknown"
            _add(products.setdefault(name, {}), product_type or "Investment", amount)
        elif kind == "sell":
            total_sell += abs(tx.amount_value)

    rate = as_decimal(growth_rate)
    current_value = total_investment * (1 + rate)
    unrealized_gain = current_value - total_investment
    gain_percent = HUNDRED * unrealized_gain / total_investment if total_investment else ZERO

    return PortfolioSummary(
        total_investment=total_investment,
        total_sell_amount=total_sell,
        current_value=current_value,
        unrealized_gain=unrealized_gain,
        unrealized_gain_percent=gain_percent,
        asset_allocation=to_percentages(assets),
        sector_allocation=to_percentages(sectors),
        # Single-region attribution until instruments carry a domicile.
        geographic_allocation=to_percentages({region: total_investment}),
        holdings=_rank_holdings(products, total_investment, holdings_limit),
    )


def _rank_holdings(
    products: Mapping[str, Mapping[str, Decimal]],
    total: Decimal,
    limit: int,
) -> list[Holding]:
    """One holding per product name, labelled with its largest-bought type."""

    if not products or total == 0:
        return [NO_HOLDINGS]
    holdings = []
    for name, by_type in products.items():
        amount = sum(by_type.values(), ZERO)
        product_type = min(by_type, key=lambda key: (-by_type[key], key))
        holdings.append(
            Holding(name=name, type=product_type, allocation=HUNDRED * amount / total, invested_amount=amount)
        )
    holdings.sort(key=lambda h: (-h.allocation, h.name))
    return holdings[: max(limit, 0)]


__all__ = [
    "DEFAULT_GROWTH_RATE",
    "DEFAULT_HOLDINGS_LIMIT",
    "Holding",
    "NO_HOLDINGS",
    "PortfolioSummary",
    "SECTOR_BY_PRODUCT_TYPE",
    "Sector",
    "compute_portfolio_summary",
    "sector_for",
    "to_percentages",
]
