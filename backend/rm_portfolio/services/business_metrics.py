"""RM-level drill-down breakdowns across all of an RM's clients."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Iterable, Mapping

from .inputs import HUNDRED, ZERO, TransactionInput, normalize_product_type

CLIENT_ATTRIBUTES = ("tier", "risk_profile")
UNSPECIFIED = "UNSPECIFIED"


class AssetClass(str, Enum):
    EQUITY = "Equity"
    MUTUAL_FUNDS = "Mutual Funds"
    FIXED_INCOME = "Fixed Income"
    OTHERS = "Others"


ASSET_CLASS_BY_PRODUCT_TYPE: Mapping[str, AssetClass] = {
    "equity": AssetClass.EQUITY,
    "mutual_fund": AssetClass.MUTUAL_FUNDS,
    "debt": AssetClass.FIXED_INCOME,
    "bond": AssetClass.FIXED_INCOME,
}


@dataclass(frozen=True)
class BreakdownItem:
    category: str
    value: Decimal
    percentage: Decimal
    count: int


def asset_class_for(product_type: str | None) -> AssetClass:
    return ASSET_CLASS_BY_PRODUCT_TYPE.get(normalize_product_type(product_type), AssetClass.OTHERS)


def _breakdown(values: Mapping[str, Decimal], counts: Mapping[str, int]) -> list[BreakdownItem]:
    # Shares of the absolute total; they sum to 100 even with net-negative categories.
    total = sum((abs(value) for value in values.values()), ZERO)
    items = [
        BreakdownItem(
            category=category,
            value=value,
            percentage=HUNDRED * abs(value) / total if total else ZERO,
            count=counts.get(category, 0),
        )
        for category, value in values.items()
    ]
    items.sort(key=lambda item: (-item.value, item.category))
    return items


def asset_class_breakdown(transactions: Iterable[TransactionInput]) -> list[BreakdownItem]:
    """AUM by asset class: sum of ``amount`` over every transaction."""

    values: dict[str, Decimal] = {}
    counts: dict[str, int] = {}
    for tx in transactions:
        category = asset_class_for(tx.product_type).value
        values[category] = values.get(category, ZERO) + tx.amount_value
        counts[category] = counts.get(category, 0) + 1
    return _breakdown(values, counts)


def revenue_by_product_type(transactions: Iterable[TransactionInput]) -> list[BreakdownItem]:
    """Fee revenue grouped by upper-cased product type."""

    values: dict[str, Decimal] = {}
    counts: dict[str, int] = {}
    for tx in transactions:
        category = (tx.product_type or "").strip().upper() or UNSPECIFIED
        values[category] = values.get(category, ZERO) + tx.fees_value
        counts[category] = counts.get(category, 0) + 1
    return _breakdown(values, counts)


def client_breakdown(clients: Iterable[object], attribute: str) -> list[BreakdownItem]:
    """Client counts grouped by ``tier`` or ``risk_profile``."""

    if attribute not in CLIENT_ATTRIBUTES:
        raise ValueError(f"Unsupported client attribute: {attribute}")
    counts: dict[str, int] = {}
    for client in clients:
        raw = getattr(client, attribute, None)
        category = str(raw).strip().upper() if raw else UNSPECIFIED
        counts[category] = counts.get(category, 0) + 1
    return _breakdown({key: Decimal(count) for key, count in counts.items()}, counts)


__all__ = [
    "ASSET_CLASS_BY_PRODUCT_TYPE",
    "AssetClass",
    "BreakdownItem",
    "CLIENT_ATTRIBUTES",
    "asset_class_breakdown",
    "asset_class_for",
    "client_breakdown",
    "revenue_by_product_type",
]
