"""HTTP tests for the RM portfolio service against a throwaway SQLite database."""

from __future__ import annotations

import json
from contextlib import asynccontextmanager
from datetime import datetime
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient

from rm_portfolio.api import create_app
from rm_portfolio.config import AppSettings
from rm_portfolio.database import Database
from rm_portfolio.models import Client, Transaction

RM_ID = 42


def _transaction(client_id, day, transaction_type, product_type, product_name, amount, fees="0", taxes="0"):
    amount, fees, taxes = Decimal(amount), Decimal(fees), Decimal(taxes)
    return Transaction(
        client_id=client_id,
        transaction_date=day,
        transaction_type=transaction_type,
        product_type=product_type,
        product_name=product_name,
        amount=amount,
        fees=fees,
        taxes=taxes,
        total_amount=amount + fees + taxes,
    )


async def _seed(database: Database) -> None:
    async with database.session() as session:
        session.add_all(
            [
                Client(id=1, full_name="Asha Mehta", tier="gold", aum="₹12.5 L", risk_profile="moderate", assigned_to=RM_ID),
                Client(id=2, full_name="Ravi Kumar", tier="platinum", aum="", risk_profile="aggressive", assigned_to=RM_ID),
                Client(id=3, full_name="Other Book", tier="silver", aum="₹1 Cr", assigned_to=7),
            ]
        )
        await session.flush()
        session.add_all(
            [
                _transaction(1, datetime(2024, 1, 5, 10, 0), "buy", "equity", "Infosys", "10000", fees="20"),
                _transaction(1, datetime(2024, 2, 10, 11, 0), "buy", "mutual_fund", "HDFC Top 100", "30000", fees="45"),
                _transaction(1, datetime(2024, 2, 20, 9, 30), "sell", "equity", "Infosys", "5000", fees="10", taxes="1.5"),
                _transaction(3, datetime(2024, 2, 1, 12, 0), "buy", "bond", "GOI 2033", "99999"),
            ]
        )
        await session.commit()


@asynccontextmanager
async def _service(settings: AppSettings):
    database = Database(settings.database_url)
    app = create_app(database, settings)
    async with app.router.lifespan_context(app):
        await _seed(database)
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client


async def test_portfolio_summary_for_seeded_client(app_settings):
    async with _service(app_settings) as client:
        response = await client.get("/clients/1/portfolio/summary")

    assert response.status_code == 200
    payload = response.json()
    assert payload["total_investment"] == pytest.approx(40000)
    assert payload["total_sell_amount"] == pytest.approx(5000)
    assert payload["asset_allocation"] == pytest.approx({"mutual_fund": 75.0, "equity": 25.0})
    assert payload["current_value"] == pytest.approx(44800)
    assert payload["unrealized_gain"] == pytest.approx(4800)
    assert payload["unrealized_gain_percent"] == pytest.approx(12.0)
    assert payload["geographic_allocation"] == pytest.approx({"India": 100.0})
    assert [holding["name"] for holding in payload["holdings"]] == ["HDFC Top 100", "Infosys"]


async def test_portfolio_summary_for_client_without_transactions(app_settings):
    async with _service(app_settings) as client:
        response = await client.get("/clients/2/portfolio/summary")

    assert response.status_code == 200
    payload = response.json()
    assert payload["total_investment"] == 0
    assert payload["unrealized_gain_percent"] == 0
    assert payload["asset_allocation"] == {}
    assert payload["holdings"] == [{"name": "No Holdings", "type": "N/A", "allocation": 0.0, "invested_amount": 0.0}]


async def test_unknown_client_returns_404(app_settings):
    async with _service(app_settings) as client:
        summary = await client.get("/clients/999/portfolio/summary")
        transactions = await client.get("/clients/999/transactions")

    assert summary.status_code == 404
    assert summary.json()["detail"] == "Client 999 not found"
    assert transactions.status_code == 404


async def test_transaction_summary_by_month(app_settings):
    async with _service(app_settings) as client:
        response = await client.get("/clients/1/transactions/summary", params={"group_by": "month"})

    assert response.status_code == 200
    buckets = response.json()
    assert [bucket["period"] for bucket in buckets] == ["2024-01", "2024-02"]
    assert [bucket["transaction_count"] for bucket in buckets] == [1, 2]
    assert buckets[1]["buy_count"] == 1
    assert buckets[1]["sell_count"] == 1
    assert buckets[1]["total_fees"] == pytest.approx(55)
    assert buckets[1]["net_amount"] == pytest.approx(35056.5)


async def test_transaction_summary_with_range_and_quarter(app_settings):
    async with _service(app_settings) as client:
        response = await client.get(
            "/clients/1/transactions/summary",
            params={"group_by": "quarter", "start_date": "2024-02-01", "end_date": "2024-02-29"},
        )

    assert response.status_code == 200
    assert [(b["period"], b["transaction_count"]) for b in response.json()] == [("2024-Q1", 2)]


async def test_transaction_summary_rejects_unknown_grouping(app_settings):
    async with _service(app_settings) as client:
        response = await client.get("/clients/1/transactions/summary", params={"group_by": "fortnight"})

    assert response.status_code == 422


async def test_list_transactions_filters_and_order(app_settings):
    async with _service(app_settings) as client:
        everything = await client.get("/clients/1/transactions")
        sells = await client.get("/clients/1/transactions", params={"transaction_type": "SELL"})
        february = await client.get(
            "/clients/1/transactions", params={"start_date": "2024-02-01", "end_date": "2024-02-29"}
        )
        backwards = await client.get(
            "/clients/1/transactions", params={"start_date": "2024-03-01", "end_date": "2024-02-01"}
        )

    assert everything.status_code == 200
    assert [row["product_name"] for row in everything.json()] == ["Infosys", "HDFC Top 100", "Infosys"]
    assert everything.json()[0]["transaction_type"] == "sell"
    assert len(sells.json()) == 1
    assert len(february.json()) == 2
    assert backwards.status_code == 422


async def test_transaction_crud_round_trip(app_settings):
    payload = {
        "transaction_date": "2024-03-01T09:30:00+05:30",
        "transaction_type": "Buy",
        "product_type": "bond",
        "product_name": "NHAI 2031",
        "amount": 1000,
        "fees": 10,
        "taxes": 1.8,
    }
    async with _service(app_settings) as client:
        created = await client.post("/clients/2/transactions", json=payload)
        assert created.status_code == 201
        body = created.json()
        assert body["transaction_type"] == "buy"
        assert body["client_id"] == 2
        assert body["total_amount"] == pytest.approx(1011.8)
        assert body["currency_code"] == "INR"
        assert body["status"] == "completed"

        transaction_id = body["id"]
        updated = await client.put(f"/transactions/{transaction_id}", json={"amount": 2000})
        assert updated.status_code == 200
        assert updated.json()["total_amount"] == pytest.approx(2011.8)
        assert updated.json()["product_name"] == "NHAI 2031"

        summary = await client.get("/clients/2/portfolio/summary")
        assert summary.json()["total_investment"] == pytest.approx(2000)

        deleted = await client.delete(f"/transactions/{transaction_id}")
        assert deleted.status_code == 204
        missing = await client.get(f"/transactions/{transaction_id}")
        assert missing.status_code == 404


async def test_create_transaction_validation(app_settings):
    base = {
        "transaction_date": "2024-03-01T09:30:00",
        "product_type": "equity",
        "product_name": "TCS",
        "amount": 100,
    }
    async with _service(app_settings) as client:
        bad_type = await client.post("/clients/1/transactions", json={**base, "transaction_type": "gift"})
        negative_fee = await client.post(
            "/clients/1/transactions", json={**base, "transaction_type": "buy", "fees": -1}
        )
        unknown_client = await client.post("/clients/999/transactions", json={**base, "transaction_type": "buy"})

    assert bad_type.status_code == 422
    assert negative_fee.status_code == 422
    assert unknown_client.status_code == 404


async def test_clearing_amount_is_rejected(app_settings):
    async with _service(app_settings) as client:
        response = await client.put("/transactions/1", json={"amount": None})

    assert response.status_code == 400
    assert "amount" in response.json()["detail"]


@pytest.mark.parametrize(
    "field",
    ["transaction_type", "status", "product_type", "product_name", "currency_code", "transaction_date", "fees"],
)
async def test_required_fields_cannot_be_cleared(app_settings, field):
    async with _service(app_settings) as client:
        response = await client.put("/transactions/1", json={field: None})
        unchanged = await client.get("/transactions/1")

    assert response.status_code == 400
    assert field in response.json()["detail"]
    assert unchanged.json()["product_type"] == "equity"
    assert unchanged.json()["transaction_type"] == "buy"


async def test_optional_fields_can_be_cleared(app_settings):
    async with _service(app_settings) as client:
        response = await client.put("/transactions/1", json={"description": None, "quantity": None})

    assert response.status_code == 200
    assert response.json()["description"] is None


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
async def test_non_finite_numbers_are_rejected(app_settings, value):
    payload = {
        "transaction_date": "2024-03-01T09:30:00",
        "transaction_type": "buy",
        "product_type": "equity",
        "product_name": "TCS",
        "amount": value,
    }
    headers = {"content-type": "application/json"}
    async with _service(app_settings) as client:
        created = await client.post("/clients/1/transactions", content=json.dumps(payload), headers=headers)
        updated = await client.put("/transactions/1", content=json.dumps({"fees": value}), headers=headers)
        listing = await client.get("/clients/1/transactions")

    assert created.status_code == 422
    assert updated.status_code == 422
    assert len(listing.json()) == 3


async def test_performance_periods(app_settings):
    async with _service(app_settings) as client:
        response = await client.get("/clients/1/portfolio/performance", params={"as_of": "2024-02-15"})

    assert response.status_code == 200
    periods = {row["label"]: row for row in response.json()}
    assert list(periods) == ["1M", "3M", "6M", "YTD", "1Y", "3Y"]
    assert periods["1M"]["total_invested"] == pytest.approx(30000)
    assert periods["3M"]["total_invested"] == pytest.approx(40000)
    assert periods["1M"]["value"] == pytest.approx(12.0)
    assert periods["1M"]["benchmark"] == pytest.approx(10.2)
    assert periods["1M"]["alpha"] == pytest.approx(1.8)


async def test_business_metrics_cover_only_the_rm_book(app_settings):
    async with _service(app_settings) as client:
        asset_class = await client.get(f"/business-metrics/{RM_ID}/aum/asset-class")
        revenue = await client.get(f"/business-metrics/{RM_ID}/revenue/product-type")
        tiers = await client.get(f"/business-metrics/{RM_ID}/clients/tier")
        risk = await client.get(f"/business-metrics/{RM_ID}/clients/risk-profile")

    assert [(row["category"], row["value"]) for row in asset_class.json()] == [
        ("Mutual Funds", pytest.approx(30000)),
        ("Equity", pytest.approx(15000)),
    ]
    assert sum(row["percentage"] for row in asset_class.json()) == pytest.approx(100)
    assert [(row["category"], row["value"], row["count"]) for row in revenue.json()] == [
        ("MUTUAL_FUND", pytest.approx(45), 1),
        ("EQUITY", pytest.approx(30), 2),
    ]
    assert sorted((row["category"], row["count"]) for row in tiers.json()) == [("GOLD", 1), ("PLATINUM", 1)]
    assert sorted(row["category"] for row in risk.json()) == ["AGGRESSIVE", "MODERATE"]


async def test_portfolio_report(app_settings):
    async with _service(app_settings) as client:
        response = await client.get("/clients/1/portfolio-report", params={"as_of": "2024-03-01"})

    assert response.status_code == 200
    report = response.json()
    assert report["client"]["full_name"] == "Asha Mehta"
    assert report["client"]["aum_value"] == pytest.approx(1250000)
    assert report["as_of"] == "2024-03-01"
    assert report["summary"]["total_investment"] == pytest.approx(40000)
    assert len(report["performance"]) == 6
    assert [row["transaction_type"] for row in report["recent_transactions"]] == ["sell", "buy", "buy"]


async def test_health(app_settings):
    async with _service(app_settings) as client:
        response = await client.get("/health")

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["timezone"] == "Asia/Kolkata"


async def test_health_reports_injected_timezone(database_url):
    settings = AppSettings(_env_file=None, database_url=database_url, timezone="UTC")
    async with _service(settings) as client:
        response = await client.get("/health")

    assert response.json()["timezone"] == "UTC"
    assert response.json()["timestamp"].endswith("+00:00")
