import datetime
from decimal import Decimal

import pytest
from tortoise.exceptions import DBConnectionError, OperationalError

from storefront.features.reports.aggregation import (
    date_window, group_rows, local_date, money, month_name, validate_limit,
    validate_range, validate_year, year_window
)
from storefront.features.reports.errors import InvalidRange, StoreUnavailable, store_access


def test_group_rows_keeps_first_appearance_order_and_totals():
    rows = [
        {"key": "b", "qty": 2, "amount": Decimal("1.50"), "who": 1},
        {"key": "a", "qty": 1, "amount": Decimal("2.00"), "who": 1},
        {"key": "b", "qty": 3, "amount": Decimal("0.50"), "who": 2},
        {"key": "b", "qty": 1, "amount": Decimal("1.00"), "who": 1},
    ]
    groups = group_rows(
        rows, key=lambda r: r["key"], amount=lambda r: r["amount"],
        quantity=lambda r: r["qty"], distinct=lambda r: r["who"],
    )

    assert list(groups) == ["b", "a"]
    assert groups["b"].count == 3
    assert groups["b"].quantity == 6
    assert groups["b"].amount == Decimal("3.00")
    assert groups["b"].distinct == 2
    assert groups["a"].distinct == 1


def test_group_rows_on_empty_input():
    assert group_rows([], key=lambda r: r["key"]) == {}


def test_money_quantizes_to_cents():
    assert money(Decimal("10.005")) == Decimal("10.01")
    assert money(Decimal("3")) == Decimal("3.00")
    assert str(money(None)) == "0.00"


def test_month_names_follow_month_numbers():
    assert month_name(1) == "January"
    assert month_name(12) == "December"
    assert [month_name(m) for m in range(1, 13)][5] == "June"


def test_date_window_covers_whole_end_day():
    start, end = date_window(datetime.date(2024, 1, 1), datetime.date(2024, 1, 31))
    assert start == datetime.datetime(2024, 1, 1, tzinfo=datetime.timezone.utc)
    assert end == datetime.datetime(2024, 2, 1, tzinfo=datetime.timezone.utc)
    assert year_window(2024) == date_window(datetime.date(2024, 1, 1), datetime.date(2024, 12, 31))


def test_local_date_handles_aware_and_naive_values():
    aware = datetime.datetime(2024, 1, 31, 23, 30, tzinfo=datetime.timezone(datetime.timedelta(hours=-5)))
    assert local_date(aware) == datetime.date(2024, 2, 1)
    assert local_date(datetime.datetime(2024, 1, 31, 23, 30)) == datetime.date(2024, 1, 31)


def test_date_window_uses_report_timezone_midnights(monkeypatch):
    monkeypatch.setattr("storefront.features.reports.aggregation.REPORT_TIMEZONE", "Asia/Jakarta")
    start, end = date_window(datetime.date(2024, 2, 1), datetime.date(2024, 2, 1))
    assert start == datetime.datetime(2024, 1, 31, 17, tzinfo=datetime.timezone.utc)
    assert end == datetime.datetime(2024, 2, 1, 17, tzinfo=datetime.timezone.utc)
    assert start.utcoffset() == datetime.timedelta(0)


def test_local_date_converts_stored_utc_to_report_timezone(monkeypatch):
    monkeypatch.setattr("storefront.features.reports.aggregation.REPORT_TIMEZONE", "Asia/Jakarta")
    stored = datetime.datetime(2024, 1, 31, 20, tzinfo=datetime.timezone.utc)
    assert local_date(stored) == datetime.date(2024, 2, 1)
    assert local_date(stored.replace(tzinfo=None)) == datetime.date(2024, 2, 1)


def test_validators_reject_out_of_bound_input():
    assert validate_year("r", 2024) == 2024
    with pytest.raises(InvalidRange) as exc_info:
        validate_year("r", 1200)
    assert exc_info.value.params == {"year": 1200}

    with pytest.raises(InvalidRange):
        validate_range("r", datetime.date(2024, 1, 2), datetime.date(2024, 1, 1))
    assert validate_range("r", datetime.date(2024, 1, 1), datetime.date(2024, 1, 1)) == (
        datetime.date(2024, 1, 1), datetime.date(2024, 1, 1)
    )

    with pytest.raises(InvalidRange):
        validate_limit("r", 0)
    with pytest.raises(InvalidRange):
        validate_limit("r", 1000)


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [DBConnectionError("connection refused"), OperationalError("disk I/O error")])
async def test_store_access_translates_store_failures(error):
    with pytest.raises(StoreUnavailable) as exc_info:
        async with store_access("range_summary", start_date="2024-01-01", end_date="2024-01-31"):
            raise error

    assert exc_info.value.report == "range_summary"
    assert exc_info.value.params == {"start_date": "2024-01-01", "end_date": "2024-01-31"}
    assert exc_info.value.__cause__ is error
    assert "range_summary" in str(exc_info.value)


@pytest.mark.asyncio
async def test_store_access_leaves_other_errors_alone():
    with pytest.raises(KeyError):
        async with store_access("top_products", limit=5):
            raise KeyError("product__name")
