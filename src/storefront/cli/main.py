import asyncio
import datetime
import json
import logging
from typing import Any, Awaitable, Callable, Optional

import typer
from tortoise.exceptions import DBConnectionError, OperationalError

from ..core.config import DATABASE_URL, DEFAULT_TOP_LIMIT
from ..core.database import DBConnection
from ..core.logging_config import configure_logging
from ..features.customers.models import Customer
from ..features.invoices.models import Invoice
from ..features.reports import service as report_service
from ..features.reports.errors import ReportError
from ..features.reports.schemas import Granularity

logger = logging.getLogger(__name__)

DATE_FORMATS = ["%Y-%m-%d"]

app = typer.Typer(name="storefront-reports", help="CLI for the storefront dashboard reports.")


@app.callback()
def main(
    ctx: typer.Context,
    database_url: str = typer.Option(DATABASE_URL, "--database-url", envvar="DATABASE_URL", help="Tortoise connection URL of the store."),
    log_level: str = typer.Option("WARNING", "--log-level", help="Log level for the 'storefront' logger."),
):
    """Reads aggregate reports from the transaction store and prints them as JSON."""
    configure_logging(log_level)
    ctx.obj = {"database_url": database_url}


def _as_date(value: Optional[datetime.datetime]) -> Optional[datetime.date]:
    return value.date() if value else None


def _emit(result: Any) -> None:
    if isinstance(result, list):
        payload = [item.model_dump(mode="json") for item in result]
    else:
        payload = result.model_dump(mode="json")
    typer.echo(json.dumps(payload, indent=2))


def _run_report(ctx: typer.Context, build: Callable[[], Awaitable[Any]]) -> None:
    """Opens the store, awaits one report and prints it; report errors exit with code 1."""
    async def runner():
        async with DBConnection(ctx.obj["database_url"]):
            return await build()

    try:
        result = asyncio.run(runner())
    except ReportError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    _emit(result)


@app.command("status-counts")
def status_counts_command(
    ctx: typer.Context,
    customer_id: Optional[str] = typer.Option(None, help="Only count invoices of this customer (public id)."),
):
    """Counts invoices per status."""
    _run_report(ctx, lambda: report_service.status_counts(customer_id=customer_id))


@app.command("revenue-series")
def revenue_series_command(
    ctx: typer.Context,
    year: Optional[int] = typer.Option(None, help="Calendar year; defaults to the current year."),
    start: Optional[datetime.datetime] = typer.Option(None, formats=DATE_FORMATS, help="First day of an explicit window."),
    end: Optional[datetime.datetime] = typer.Option(None, formats=DATE_FORMATS, help="Last day of an explicit window."),
    granularity: Granularity = typer.Option(Granularity.MONTH, case_sensitive=False),
    include_empty: bool = typer.Option(False, "--include-empty", help="Emit zero buckets for quiet periods."),
):
    """Successful revenue bucketed by month or day."""
    _run_report(ctx, lambda: report_service.revenue_series(
        year=year, start_date=_as_date(start), end_date=_as_date(end),
        granularity=granularity, include_empty=include_empty,
    ))


@app.command("top-products")
def top_products_command(
    ctx: typer.Context,
    limit: int = typer.Option(DEFAULT_TOP_LIMIT, help="Number of products to list."),
    start: Optional[datetime.datetime] = typer.Option(None, formats=DATE_FORMATS),
    end: Optional[datetime.datetime] = typer.Option(None, formats=DATE_FORMATS),
):
    """Best-selling products by quantity."""
    _run_report(ctx, lambda: report_service.top_products(limit=limit, start_date=_as_date(start), end_date=_as_date(end)))


@app.command("top-categories")
def top_categories_command(
    ctx: typer.Context,
    limit: int = typer.Option(DEFAULT_TOP_LIMIT, help="Number of categories to list."),
    start: Optional[datetime.datetime] = typer.Option(None, formats=DATE_FORMATS),
    end: Optional[datetime.datetime] = typer.Option(None, formats=DATE_FORMATS),
):
    """Best-selling categories by quantity."""
    _run_report(ctx, lambda: report_service.top_categories(limit=limit, start_date=_as_date(start), end_date=_as_date(end)))


@app.command("cohort")
def cohort_command(
    ctx: typer.Context,
    year: Optional[int] = typer.Option(None, help="Calendar year; defaults to the current year."),
):
    """New and returning customers per month."""
    _run_report(ctx, lambda: report_service.customer_cohort(year=year))


@app.command("range-summary")
def range_summary_command(
    ctx: typer.Context,
    start: Optional[datetime.datetime] = typer.Option(None, formats=DATE_FORMATS, help="Defaults to the first day of this month."),
    end: Optional[datetime.datetime] = typer.Option(None, formats=DATE_FORMATS, help="Defaults to today."),
):
    """Order count, revenue and average order value over a date range."""
    _run_report(ctx, lambda: report_service.range_summary(start_date=_as_date(start), end_date=_as_date(end)))


@app.command("dashboard")
def dashboard_command(
    ctx: typer.Context,
    year: Optional[int] = typer.Option(None, help="Year of the revenue chart."),
):
    """Status counts plus the month revenue chart."""
    _run_report(ctx, lambda: report_service.dashboard_summary(year=year))


@app.command("overview")
def overview_command(ctx: typer.Context):
    """Store totals, recent invoices and best sellers."""
    _run_report(ctx, report_service.store_overview)


@app.command("check-store")
def check_store_command(ctx: typer.Context):
    """Tests the store connection and prints row counts."""
    asyncio.run(_check_store(ctx.obj["database_url"]))


async def _check_store(database_url: str):
    try:
        async with DBConnection(database_url):
            typer.echo("Successfully connected to the store.")
            customer_count = await Customer.all().count()
            invoice_count = await Invoice.all().count()
            typer.echo(f"Found {customer_count} customer(s) and {invoice_count} invoice(s).")
    except (DBConnectionError, OperationalError) as e:
        logger.error(f"Store check failed: {e}", exc_info=True)
        typer.secho(f"Error: could not read the store: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
