"""Print a client's portfolio summary and transaction buckets as JSON."""

from __future__ import annotations

import argparse
import asyncio
import json
from dataclasses import asdict

from rm_portfolio.config import get_settings
from rm_portfolio.database import Database
from rm_portfolio.services.allocation import compute_portfolio_summary
from rm_portfolio.services.periods import GroupBy, compute_transaction_summary
from rm_portfolio.services.transactions import list_transactions, to_transaction_input


async def _run(client_id: int, group_by: str) -> None:
    settings = get_settings()
    database = Database(settings.database_url)
    try:
        async with database.session() as session:
            rows = await list_transactions(session, client_id)
    finally:
        await database.dispose()
    inputs = [to_transaction_input(tx, settings.zone) for tx in rows]
    summary = compute_portfolio_summary(
        inputs,
        growth_rate=settings.assumed_growth_rate,
        region=settings.default_region,
        holdings_limit=settings.holdings_limit,
    )
    buckets = compute_transaction_summary(inputs, group_by, week_numbering=settings.week_numbering)
    payload = {
        "client_id": client_id,
        "summary": asdict(summary),
        "periods": [asdict(bucket) for bucket in buckets],
    }
    print(json.dumps(payload, indent=2, default=str))


def main() -> None:
    parser = argparse.ArgumentParser(description="Compute a client's portfolio summary")
    parser.add_argument("--client-id", type=int, required=True)
    parser.add_argument("--group-by", default="month", choices=[g.value for g in GroupBy])
    args = parser.parse_args()
    asyncio.run(_run(args.client_id, args.group_by))


if __name__ == "__main__":
    main()
