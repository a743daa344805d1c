import datetime
import json
from decimal import Decimal

import pytest
from typer.testing import CliRunner

from storefront.cli import main as cli_main
from storefront.features.reports.errors import InvalidRange
from storefront.features.reports.schemas import DailyRevenue, RangeSummary, StatusCounts

runner = CliRunner()


@pytest.fixture(autouse=True)
def initialize_test_db():
    """The CLI tests stub out the store, so no database is created."""
    yield


@pytest.fixture
def opened_urls(monkeypatch):
    """Replaces DBConnection with a no-op and records the URLs it was opened with."""
    urls = []

    class FakeConnection:
        def __init__(self, database_url):
            urls.append(database_url)

        async def __aenter__(self):
            return self

        async def __aexit__(self, exc_type, exc_val, exc_tb):
            return False

    monkeypatch.setattr(cli_main, "DBConnection", FakeConnection)
    return urls


def test_status_counts_prints_json(monkeypatch, opened_urls):
    calls = []

    async def fake_status_counts(customer_id=None):
        calls.append(customer_id)
        return StatusCounts(pending=1, success=2, expired=0, failed=3)

    monkeypatch.setattr(cli_main.report_service, "status_counts", fake_status_counts)

    result = runner.invoke(
        cli_main.app, ["--database-url", "sqlite://:memory:", "status-counts", "--customer-id", "cust_1"]
    )

    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == {"pending": 1, "success": 2, "expired": 0, "failed": 3}
    assert calls == ["cust_1"]
    assert opened_urls == ["sqlite://:memory:"]


def test_range_summary_parses_dates(monkeypatch, opened_urls):
    received = {}

    async def fake_range_summary(start_date=None, end_date=None):
        received.update(start_date=start_date, end_date=end_date)
        return RangeSummary(
            start_date=start_date, end_date=end_date, total_orders=2,
            total_revenue=Decimal("150.00"), avg_order_value=Decimal("75.00"),
            daily=[DailyRevenue(date=datetime.date(2024, 1, 5), total_orders=1, total_sales=Decimal("100.00"))],
            by_category=[],
        )

    monkeypatch.setattr(cli_main.report_service, "range_summary", fake_range_summary)

    result = runner.invoke(cli_main.app, ["range-summary", "--start", "2024-01-01", "--end", "2024-01-31"])

    assert result.exit_code == 0, result.output
    assert received == {"start_date": datetime.date(2024, 1, 1), "end_date": datetime.date(2024, 1, 31)}
    payload = json.loads(result.output)
    assert payload["total_revenue"] == "150.00"
    assert payload["avg_order_value"] == "75.00"
    assert payload["daily"] == [{"date": "2024-01-05", "total_orders": 1, "total_sales": "100.00"}]


def test_revenue_series_prints_list(monkeypatch, opened_urls):
    async def fake_revenue_series(**kwargs):
        assert kwargs["granularity"].value == "day"
        assert kwargs["include_empty"] is True
        return [DailyRevenue(date=datetime.date(2024, 7, 2), total_orders=2, total_sales=Decimal("12.00"))]

    monkeypatch.setattr(cli_main.report_service, "revenue_series", fake_revenue_series)

    result = runner.invoke(
        cli_main.app,
        ["revenue-series", "--start", "2024-07-01", "--end", "2024-07-05", "--granularity", "day", "--include-empty"],
    )

    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == [{"date": "2024-07-02", "total_orders": 2, "total_sales": "12.00"}]


def test_report_error_exits_with_code_one(monkeypatch, opened_urls):
    async def failing_top_products(limit=5, start_date=None, end_date=None):
        raise InvalidRange("top_products", {"limit": limit}, "limit must be between 1 and 100")

    monkeypatch.setattr(cli_main.report_service, "top_products", failing_top_products)

    result = runner.invoke(cli_main.app, ["top-products", "--limit", "500"])

    assert result.exit_code == 1
    assert "limit must be between 1 and 100" in result.output
