import logging
from datetime import date, datetime
from decimal import Decimal

import pytest

from rm_portfolio.services.inputs import TransactionInput
from rm_portfolio.services.periods import (
    GroupBy,
    WeekNumbering,
    compute_transaction_summary,
    period_key,
)


def _tx(day, transaction_type="buy", amount=100, fees=None, taxes=None, total_amount=None, id=None):
    return TransactionInput(
        transaction_type=transaction_type,
        product_type="equity",
        amount=amount,
        fees=fees,
        taxes=taxes,
        total_amount=total_amount,
        transaction_date=day,
        id=id,
    )


def test_month_buckets_are_sorted_and_zero_padded():
    rows = [_tx("2024-02-10", amount=200), _tx("2024-01-05", amount=100)]
    summary = compute_transaction_summary(rows, "month")
    assert [bucket.period for bucket in summary] == ["2024-01", "2024-02"]
    assert summary[0].transaction_count == 1
    assert summary[0].total_amount == 100
    assert summary[1].total_amount == 200


def test_bucket_totals_and_counts():
    rows = [
        _tx(date(2024, 3, 1), "buy", amount=1000, fees=10, taxes=5),
        _tx(date(2024, 3, 2), "sell", amount=400, fees=4, total_amount=400),
        _tx(date(2024, 3, 3), "dividend", amount=25),
    ]
    (bucket,) = compute_transaction_summary(rows, GroupBy.MONTH)
    assert bucket.transaction_count == 3
    assert bucket.buy_count == 1
    assert bucket.sell_count == 1
    assert bucket.other_count == 1
    assert bucket.total_amount == 1425
    assert bucket.total_fees == 14
    assert bucket.total_taxes == 5
    # stored total_amount wins over fees + taxes
    assert bucket.net_amount == Decimal("1015") + 400 + 25


def test_every_dated_row_lands_in_exactly_one_bucket():
    rows = [_tx(date(2023, month, day)) for month in range(1, 13) for day in (1, 14, 28)]
    for group_by in GroupBy:
        summary = compute_transaction_summary(rows, group_by)
        assert sum(bucket.transaction_count for bucket in summary) == len(rows)
        keys = [bucket.period for bucket in summary]
        assert keys == sorted(keys)
        assert len(keys) == len(set(keys))


@pytest.mark.parametrize(
    ("day", "group_by", "expected"),
    [
        (date(2024, 1, 5), GroupBy.DAY, "2024-01-05"),
        (date(2024, 1, 10), GroupBy.WEEK, "2024-W02"),
        (date(2024, 12, 30), GroupBy.WEEK, "2025-W01"),
        (date(2024, 1, 5), GroupBy.MONTH, "2024-01"),
        (date(2024, 3, 31), GroupBy.QUARTER, "2024-Q1"),
        (date(2024, 4, 1), GroupBy.QUARTER, "2024-Q2"),
        (date(2024, 12, 31), GroupBy.QUARTER, "2024-Q4"),
        (date(2024, 7, 4), GroupBy.YEAR, "2024"),
    ],
)
def test_period_keys(day, group_by, expected):
    assert period_key(day, group_by) == expected


def test_month_relative_week_keys():
    # 2024-01-01 is a Monday, so the first Sunday-based week is only six days long.
    assert period_key(date(2024, 1, 6), "week", WeekNumbering.MONTH_RELATIVE) == "2024-W1"
    assert period_key(date(2024, 1, 7), "week", WeekNumbering.MONTH_RELATIVE) == "2024-W2"
    assert period_key(date(2024, 1, 10), "week", "month_relative") == "2024-W2"
    assert period_key(date(2024, 1, 31), "week", "month_relative") == "2024-W5"


def test_month_relative_weeks_merge_across_months():
    rows = [_tx("2024-01-10"), _tx("2024-02-07")]
    summary = compute_transaction_summary(rows, "week", week_numbering="month_relative")
    assert [(bucket.period, bucket.transaction_count) for bucket in summary] == [("2024-W2", 2)]

    iso = compute_transaction_summary(rows, "week")
    assert [bucket.period for bucket in iso] == ["2024-W02", "2024-W06"]


def test_date_range_is_inclusive():
    rows = [_tx("2024-01-31"), _tx("2024-02-01"), _tx("2024-02-29"), _tx("2024-03-01")]
    summary = compute_transaction_summary(rows, "day", "2024-02-01", date(2024, 2, 29))
    assert [bucket.period for bucket in summary] == ["2024-02-01", "2024-02-29"]


def test_datetime_values_bucket_on_their_calendar_date():
    rows = [_tx(datetime(2024, 5, 31, 23, 59)), _tx("2024-06-01T00:00:00")]
    summary = compute_transaction_summary(rows, "month")
    assert [bucket.period for bucket in summary] == ["2024-05", "2024-06"]


def test_undated_rows_are_skipped_with_warning(caplog):
    rows = [_tx(None, id="a"), _tx("not a date", id="b"), _tx("2024-01-05", id="c")]
    with caplog.at_level(logging.WARNING, logger="rm_portfolio.services.periods"):
        summary = compute_transaction_summary(rows, "month")
    assert [(bucket.period, bucket.transaction_count) for bucket in summary] == [("2024-01", 1)]
    warnings = [record for record in caplog.records if record.levelno == logging.WARNING]
    assert len(warnings) == 2


def test_empty_input_yields_no_buckets():
    assert compute_transaction_summary([], "year") == []


def test_invalid_group_by_is_rejected():
    with pytest.raises(ValueError):
        compute_transaction_summary([_tx("2024-01-05")], "fortnight")


def test_unparsable_range_bound_is_rejected():
    with pytest.raises(ValueError):
        compute_transaction_summary([_tx("2024-01-05")], "month", start_date="last tuesday")
