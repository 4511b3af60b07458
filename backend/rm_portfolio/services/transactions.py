"""Transaction store backing the aggregation engine."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any
from zoneinfo import ZoneInfo

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from rm_portfolio.config import DEFAULT_TIMEZONE
from rm_portfolio.exceptions import NotFoundError, ValidationError
from rm_portfolio.models import TRANSACTION_STATUSES, TRANSACTION_TYPES, Client, Transaction
from rm_portfolio.schemas import TransactionCreateRequest, TransactionUpdateRequest

from .inputs import TransactionInput

DEFAULT_ZONE = ZoneInfo(DEFAULT_TIMEZONE)

_DECIMAL_FIELDS = ("amount", "fees", "taxes", "quantity", "price", "portfolio_impact")

# Columns a partial update may not set to null.
_REQUIRED_FIELDS = (
    "transaction_date",
    "transaction_type",
    "product_type",
    "product_name",
    "amount",
    "fees",
    "taxes",
    "currency_code",
    "status",
)


def _localize(value: datetime | None, zone: ZoneInfo) -> datetime | None:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=zone)


def _day_start(day: date, zone: ZoneInfo) -> datetime:
    return datetime.combine(day, time.min, tzinfo=zone)


def _as_decimal(value: float | None) -> Decimal | None:
    return None if value is None else Decimal(str(value))


def _transactions_query(
    client_ids: Select | list[int],
    *,
    start_date: date | None = None,
    end_date: date | None = None,
    transaction_type: str | None = None,
    product_type: str | None = None,
    zone: ZoneInfo = DEFAULT_ZONE,
) -> Select:
    stmt = select(Transaction).where(Transaction.client_id.in_(client_ids))
    if start_date is not None:
        stmt = stmt.where(Transaction.transaction_date >= _day_start(start_date, zone))
    if end_date is not None:
        stmt = stmt.where(Transaction.transaction_date < _day_start(end_date + timedelta(days=1), zone))
    if transaction_type:
        stmt = stmt.where(Transaction.transaction_type == transaction_type.strip().lower())
    if product_type:
        stmt = stmt.where(Transaction.product_type == product_type.strip())
    return stmt


async def get_client(session: AsyncSession, client_id: int) -> Client:
    client = await session.get(Client, client_id)
    if client is None:
        raise NotFoundError("Client", client_id)
    return client


async def list_transactions(
    session: AsyncSession,
    client_id: int,
    start_date: date | None = None,
    end_date: date | None = None,
    *,
    transaction_type: str | None = None,
    product_type: str | None = None,
    zone: ZoneInfo = DEFAULT_ZONE,
) -> list[Transaction]:
    """Return a client's transactions; both date bounds are inclusive.

    Bounds are calendar days in ``zone``.
    """

    await get_client(session, client_id)
    stmt = _transactions_query(
        [client_id],
        start_date=start_date,
        end_date=end_date,
        transaction_type=transaction_type,
        product_type=product_type,
        zone=zone,
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_transactions_by_type(
    session: AsyncSession, client_id: int, transaction_type: str
) -> list[Transaction]:
    return await list_transactions(session, client_id, transaction_type=transaction_type)


async def list_transactions_by_product(
    session: AsyncSession, client_id: int, product_type: str
) -> list[Transaction]:
    return await list_transactions(session, client_id, product_type=product_type)


async def list_recent_transactions(session: AsyncSession, client_id: int, limit: int = 20) -> list[Transaction]:
    """Return the newest ``limit`` transactions, newest first."""

    stmt = (
        _transactions_query([client_id])
        .order_by(Transaction.transaction_date.desc(), Transaction.id.desc())
        .limit(limit)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_transaction(session: AsyncSession, transaction_id: int) -> Transaction:
    tx = await session.get(Transaction, transaction_id)
    if tx is None:
        raise NotFoundError("Transaction", transaction_id)
    return tx


def _normalize_type(value: str) -> str:
    tx_type = value.strip().lower()
    if tx_type not in TRANSACTION_TYPES:
        raise ValidationError(f"Unsupported transaction type: {value}")
    return tx_type


def _normalize_status(value: str) -> str:
    status = value.strip().lower()
    if status not in TRANSACTION_STATUSES:
        raise ValidationError(f"Unsupported transaction status: {value}")
    return status


def _apply_total(tx: Transaction) -> None:
    tx.total_amount = Decimal(tx.amount or 0) + Decimal(tx.fees or 0) + Decimal(tx.taxes or 0)


async def create_transaction(
    session: AsyncSession,
    client_id: int,
    payload: TransactionCreateRequest,
    *,
    zone: ZoneInfo = DEFAULT_ZONE,
) -> Transaction:
    await get_client(session, client_id)
    tx = Transaction(
        client_id=client_id,
        transaction_date=_localize(payload.transaction_date, zone),
        settlement_date=_localize(payload.settlement_date, zone),
        transaction_type=_normalize_type(payload.transaction_type),
        product_type=payload.product_type.strip(),
        product_name=payload.product_name.strip(),
        product_category=payload.product_category,
        quantity=_as_decimal(payload.quantity),
        price=_as_decimal(payload.price),
        amount=Decimal(str(payload.amount)),
        fees=Decimal(str(payload.fees)),
        taxes=Decimal(str(payload.taxes)),
        currency_code=payload.currency_code.upper(),
        status=_normalize_status(payload.status),
        reference=payload.reference,
        description=payload.description,
        portfolio_impact=_as_decimal(payload.portfolio_impact),
    )
    _apply_total(tx)
    session.add(tx)
    await session.commit()
    await session.refresh(tx)
    return tx


async def update_transaction(
    session: AsyncSession,
    transaction_id: int,
    payload: TransactionUpdateRequest,
    *,
    zone: ZoneInfo = DEFAULT_ZONE,
) -> Transaction:
    """Apply the fields present in ``payload``; required columns cannot be cleared."""

    tx = await get_transaction(session, transaction_id)
    changes: dict[str, Any] = payload.model_dump(exclude_unset=True)
    cleared = sorted(key for key in _REQUIRED_FIELDS if key in changes and changes[key] is None)
    if cleared:
        raise ValidationError(f"{', '.join(cleared)} cannot be cleared")
    for key, value in changes.items():
        if key in _DECIMAL_FIELDS:
            value = _as_decimal(value)
        elif key in ("transaction_date", "settlement_date"):
            value = _localize(value, zone)
        elif key == "transaction_type":
            value = _normalize_type(value)
        elif key == "status":
            value = _normalize_status(value)
        elif key == "currency_code":
            value = value.upper()
        elif key in ("product_type", "product_name"):
            value = value.strip()
        setattr(tx, key, value)
    _apply_total(tx)
    await session.commit()
    await session.refresh(tx)
    return tx


async def delete_transaction(session: AsyncSession, transaction_id: int) -> None:
    tx = await get_transaction(session, transaction_id)
    await session.delete(tx)
    await session.commit()


async def list_clients_for_rm(session: AsyncSession, user_id: int) -> list[Client]:
    result = await session.execute(select(Client).where(Client.assigned_to == user_id).order_by(Client.id))
    return list(result.scalars().all())


async def list_transactions_for_rm(session: AsyncSession, user_id: int) -> list[Transaction]:
    client_ids = select(Client.id).where(Client.assigned_to == user_id)
    result = await session.execute(_transactions_query(client_ids))
    return list(result.scalars().all())


def to_transaction_input(tx: Transaction, zone: ZoneInfo = DEFAULT_ZONE) -> TransactionInput:
    """Convert an ORM row for the engine, dating it in ``zone``."""

    trade_dt = tx.transaction_date
    if trade_dt is not None and trade_dt.tzinfo is not None:
        trade_dt = trade_dt.astimezone(zone)
    return TransactionInput(
        id=str(tx.id),
        client_id=tx.client_id,
        transaction_date=trade_dt,
        transaction_type=tx.transaction_type,
        product_type=tx.product_type,
        product_name=tx.product_name,
        amount=tx.amount,
        fees=tx.fees,
        taxes=tx.taxes,
        total_amount=tx.total_amount,
    )


__all__ = [
    "DEFAULT_ZONE",
    "create_transaction",
    "delete_transaction",
    "get_client",
    "get_transaction",
    "list_clients_for_rm",
    "list_recent_transactions",
    "list_transactions",
    "list_transactions_by_product",
    "list_transactions_by_type",
    "list_transactions_for_rm",
    "to_transaction_input",
    "update_transaction",
]
