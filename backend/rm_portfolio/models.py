"""Client and transaction ORM models."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .database import Base

TRANSACTION_TYPES = ("buy", "sell", "dividend", "interest", "fee", "deposit", "withdrawal")
TRANSACTION_STATUSES = ("pending", "completed", "failed", "cancelled")
CLIENT_TIERS = ("silver", "gold", "platinum")
RISK_PROFILES = ("conservative", "moderate", "aggressive")


class Client(Base):
    __tablename__ = "clients"
    __table_args__ = (Index("ix_clients_assigned_to", "assigned_to"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    full_name: Mapped[str] = mapped_column(String(255))
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    tier: Mapped[str] = mapped_column(String(32), default="silver")
    aum: Mapped[str] = mapped_column(String(64), default="")
    aum_value: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=0)
    risk_profile: Mapped[str | None] = mapped_column(String(32), nullable=True, default="moderate")
    risk_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    assigned_to: Mapped[int | None] = mapped_column(Integer, nullable=True)
    relationship_start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_transaction_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    transactions: Mapped[list["Transaction"]] = relationship(
        back_populates="client", cascade="all, delete-orphan"
    )


class Transaction(Base):
    __tablename__ = "transactions"
    __table_args__ = (
        Index("ix_transactions_client_date", "client_id", "transaction_date"),
        Index("ix_transactions_client_type", "client_id", "transaction_type"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    client_id: Mapped[int] = mapped_column(ForeignKey("clients.id", ondelete="CASCADE"))
    transaction_date: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    settlement_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    transaction_type: Mapped[str] = mapped_column(String(32))
    product_type: Mapped[str] = mapped_column(String(64))
    product_name: Mapped[str] = mapped_column(String(255))
    product_category: Mapped[str | None] = mapped_column(String(64), nullable=True)
    quantity: Mapped[Decimal | None] = mapped_column(Numeric(18, 4), nullable=True)
    price: Mapped[Decimal | None] = mapped_column(Numeric(18, 6), nullable=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2))
    fees: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=0)
    taxes: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=0)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2))
    currency_code: Mapped[str] = mapped_column(String(3), default="INR")
    status: Mapped[str] = mapped_column(String(16), default="completed")
    reference: Mapped[str | None] = mapped_column(String(64), nullable=True)
    description: Mapped[str | None] = mapped_column(String(512), nullable=True)
    portfolio_impact: Mapped[Decimal | None] = mapped_column(Numeric(9, 4), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    client: Mapped[Client] = relationship(back_populates="transactions")


__all__ = [
    "CLIENT_TIERS",
    "Client",
    "RISK_PROFILES",
    "TRANSACTION_STATUSES",
    "TRANSACTION_TYPES",
    "Transaction",
]
