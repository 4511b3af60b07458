"""Client transaction endpoints and the period summary."""

from __future__ import annotations

from dataclasses import asdict
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from rm_portfolio.config import AppSettings
from rm_portfolio.core.telemetry import aggregation_span
from rm_portfolio.database import Database
from rm_portfolio.models import Transaction
from rm_portfolio.schemas import (
    PeriodSummarySchema,
    TransactionCreateRequest,
    TransactionSchema,
    TransactionUpdateRequest,
)
from rm_portfolio.services import transactions as transaction_store
from rm_portfolio.services.periods import GroupBy, compute_transaction_summary


def _serialize_transaction(tx: Transaction) -> TransactionSchema:
    return TransactionSchema.model_validate(tx)


def _check_range(start_date: date | None, end_date: date | None) -> None:
    if start_date and end_date and start_date > end_date:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="start_date must not be after end_date",
        )


def get_transactions_router(database: Database, settings: AppSettings) -> APIRouter:
    router = APIRouter(tags=["transactions"])

    @router.get("/clients/{client_id}/transactions", response_model=list[TransactionSchema])
    async def get_client_transactions(
        client_id: int,
        start_date: date | None = None,
        end_date: date | None = None,
        transaction_type: str | None = None,
        product_type: str | None = None,
        session: AsyncSession = Depends(database.get_session),
    ) -> list[TransactionSchema]:
        _check_range(start_date, end_date)
        rows = await transaction_store.list_transactions(
            session,
            client_id,
            start_date,
            end_date,
            transaction_type=transaction_type,
            product_type=product_type,
            zone=settings.zone,
        )
        rows.sort(key=lambda tx: (tx.transaction_date, tx.id), reverse=True)
        return [_serialize_transaction(tx) for tx in rows]

    @router.post(
        "/clients/{client_id}/transactions",
        response_model=TransactionSchema,
        status_code=status.HTTP_201_CREATED,
    )
    async def post_transaction(
        client_id: int,
        payload: TransactionCreateRequest,
        session: AsyncSession = Depends(database.get_session),
    ) -> TransactionSchema:
        tx = await transaction_store.create_transaction(session, client_id, payload, zone=settings.zone)
        return _serialize_transaction(tx)

    @router.get(
        "/clients/{client_id}/transactions/summary",
        response_model=list[PeriodSummarySchema],
    )
    async def get_transaction_summary(
        client_id: int,
        group_by: GroupBy = Query(default=GroupBy.MONTH),
        start_date: date | None = None,
        end_date: date | None = None,
        session: AsyncSession = Depends(database.get_session),
    ) -> list[PeriodSummarySchema]:
        _check_range(start_date, end_date)
        rows = await transaction_store.list_transactions(
            session, client_id, start_date, end_date, zone=settings.zone
        )
        inputs = [transaction_store.to_transaction_input(tx, settings.zone) for tx in rows]
        with aggregation_span("transaction_summary", len(inputs), group_by=group_by.value):
            buckets = compute_transaction_summary(
                inputs,
                group_by,
                start_date,
                end_date,
                week_numbering=settings.week_numbering,
            )
        return [PeriodSummarySchema(**asdict(bucket)) for bucket in buckets]

    @router.get("/transactions/{transaction_id}", response_model=TransactionSchema)
    async def get_transaction(
        transaction_id: int,
        session: AsyncSession = Depends(database.get_session),
    ) -> TransactionSchema:
        tx = await transaction_store.get_transaction(session, transaction_id)
        return _serialize_transaction(tx)

    @router.put("/transactions/{transaction_id}", response_model=TransactionSchema)
    async def put_transaction(
        transaction_id: int,
        payload: TransactionUpdateRequest,
        session: AsyncSession = Depends(database.get_session),
    ) -> TransactionSchema:
        tx = await transaction_store.update_transaction(session, transaction_id, payload, zone=settings.zone)
        return _serialize_transaction(tx)

    @router.delete("/transactions/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_transaction(
        transaction_id: int,
        session: AsyncSession = Depends(database.get_session),
    ) -> Response:
        await transaction_store.delete_transaction(session, transaction_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router


__all__ = ["get_transactions_router"]
