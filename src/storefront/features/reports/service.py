"""
Reports Service Module

This module provides the reporting engine behind the admin dashboard. Every
function is a read-only aggregate over the transaction store: invoice status
counts, month/day revenue series, best-seller rankings, customer acquisition
and retention, and date-range sales summaries.

Only invoices with status ``success`` count toward revenue, quantities and
retention. Date ranges are inclusive calendar dates in the reporting timezone.
"""

import datetime
import logging
from decimal import Decimal
from typing import Dict, Hashable, Iterator, List, Optional, Tuple, Union

from tortoise.functions import Count

from ...core.config import DEFAULT_TOP_LIMIT, RECENT_TRANSACTIONS_LIMIT, RETENTION_WINDOW_DAYS
from ..catalog.models import Category, Product
from ..customers.models import Customer
from ..invoices.models import Invoice, InvoiceLineItem, InvoiceStatus
from .aggregation import (
    Aggregate, Row, date_window, group_rows, local_date, money, month_name,
    today, validate_limit, validate_range, validate_year, year_window
)
from .errors import InvalidRange, store_access
from .schemas import (
    CategoryRanking, CategorySales, CohortReport, CustomerAcquisition,
    CustomerRetention, DailyRevenue, DashboardSummary, Granularity,
    MonthlyRevenue, ProductRanking, RangeSummary, RecentInvoice, StatusCounts,
    StoreOverview
)

logger = logging.getLogger(__name__)


def _optional_range(
    report: str, start_date: Optional[datetime.date], end_date: Optional[datetime.date]
) -> Optional[Tuple[datetime.date, datetime.date]]:
    if start_date is None and end_date is None:
        return None
    if start_date is None or end_date is None:
        raise InvalidRange(
            report,
            {"start_date": start_date and start_date.isoformat(), "end_date": end_date and end_date.isoformat()},
            "start_date and end_date must be given together",
        )
    return validate_range(report, start_date, end_date)


async def _successful_invoices(report: str, start_date: datetime.date, end_date: datetime.date) -> List[Row]:
    start, end = date_window(start_date, end_date)
    async with store_access(report, start_date=start_date.isoformat(), end_date=end_date.isoformat()):
        return await (
            Invoice.filter(status=InvoiceStatus.SUCCESS, created_at__gte=start, created_at__lt=end)
            .order_by("created_at", "id")
            .values("id", "grand_total", "created_at")
        )


async def _sold_line_items(
    report: str, date_range: Optional[Tuple[datetime.date, datetime.date]], *fields: str
) -> List[Row]:
    query = InvoiceLineItem.filter(invoice__status=InvoiceStatus.SUCCESS)
    params = {}
    if date_range:
        start, end = date_window(*date_range)
        query = query.filter(invoice__created_at__gte=start, invoice__created_at__lt=end)
        params = {"start_date": date_range[0].isoformat(), "end_date": date_range[1].isoformat()}
    async with store_access(report, **params):
        return await query.order_by("id").values("qty", "price", *fields)


def _line_revenue(row: Row) -> Decimal:
    return row["price"] * row["qty"]


def _months_between(start: datetime.date, end: datetime.date) -> Iterator[Tuple[int, int]]:
    year, month = start.year, start.month
    while (year, month) <= (end.year, end.month):
        yield year, month
        year, month = (year + 1, 1) if month == 12 else (year, month + 1)


def _days_between(start: datetime.date, end: datetime.date) -> Iterator[datetime.date]:
    for offset in range((end - start).days + 1):
        yield start + datetime.timedelta(days=offset)


def _monthly_buckets(
    rows: List[Row], start: datetime.date, end: datetime.date, include_empty: bool
) -> List[MonthlyRevenue]:
    def month_key(row: Row) -> Tuple[int, int]:
        day = local_date(row["created_at"])
        return day.year, day.month

    groups = group_rows(rows, key=month_key, amount=lambda row: row["grand_total"])
    keys = list(_months_between(start, end)) if include_empty else sorted(groups)
    buckets = []
    for year, month in keys:
        group = groups.get((year, month), Aggregate())
        buckets.append(MonthlyRevenue(
            year=year, month=month, month_name=month_name(month),
            total_orders=group.count, total=money(group.amount),
        ))
    return buckets


def _daily_buckets(
    rows: List[Row], start: datetime.date, end: datetime.date, include_empty: bool
) -> List[DailyRevenue]:
    groups = group_rows(rows, key=lambda row: local_date(row["created_at"]), amount=lambda row: row["grand_total"])
    keys = list(_days_between(start, end)) if include_empty else sorted(groups)
    buckets = []
    for day in keys:
        group = groups.get(day, Aggregate())
        buckets.append(DailyRevenue(date=day, total_orders=group.count, total_sales=money(group.amount)))
    return buckets


def _rank_by_quantity(groups: Dict[Hashable, Aggregate], limit: int) -> List[Tuple[Hashable, Aggregate]]:
    # sorted() is stable, so ties keep the order in which line items were scanned
    ranked = sorted(groups.items(), key=lambda item: item[1].quantity, reverse=True)
    return ranked[:limit]


async def status_counts(customer_id: Optional[str] = None) -> StatusCounts:
    """
    Counts invoices in each lifecycle status.

    Every status of the taxonomy is present in the result, with zero when no
    invoice is in that state.

    Args:
        customer_id: Optional customer public id restricting the counts to the
            invoices of one customer (customer dashboard).

    Returns:
        StatusCounts: pending, success, expired and failed counts.
    """
    logger.debug(f"Counting invoices by status (customer_id={customer_id})")
    query = Invoice.all()
    if customer_id is not None:
        query = query.filter(customer__public_id=customer_id)

    async with store_access("status_counts", customer_id=customer_id):
        rows = await query.annotate(count=Count("id")).group_by("status").values("status", "count")

    counts = {status.value: 0 for status in InvoiceStatus}
    for row in rows:
        counts[InvoiceStatus(row["status"]).value] = row["count"]
    return StatusCounts(**counts)


async def revenue_series(
    year: Optional[int] = None,
    start_date: Optional[datetime.date] = None,
    end_date: Optional[datetime.date] = None,
    granularity: Granularity = Granularity.MONTH,
    include_empty: bool = False,
) -> Union[List[MonthlyRevenue], List[DailyRevenue]]:
    """
    Buckets successful invoice revenue and order counts by month or by day.

    The window is either a calendar year or an explicit inclusive date range;
    without either, the current year is used. Buckets are ordered ascending by
    their time key. Buckets without successful invoices are left out unless
    ``include_empty`` is set, in which case every month or day of the window
    is returned with zero values.

    Args:
        year: Calendar year to report on. Cannot be combined with a date range.
        start_date: First day of an explicit window (inclusive).
        end_date: Last day of an explicit window (inclusive).
        granularity: Granularity.MONTH or Granularity.DAY.
        include_empty: Whether to emit zero buckets for quiet periods.

    Returns:
        A list of MonthlyRevenue or DailyRevenue, possibly empty.

    Raises:
        InvalidRange: Year out of bounds, incomplete or inverted date range.
    """
    report = "revenue_series"
    granularity = Granularity(granularity)
    date_range = _optional_range(report, start_date, end_date)
    if date_range and year is not None:
        raise InvalidRange(report, {"year": year}, "year cannot be combined with a date range")
    if date_range is None:
        year = validate_year(report, year if year is not None else today().year)
        date_range = (datetime.date(year, 1, 1), datetime.date(year, 12, 31))

    logger.debug(f"Building {granularity.value} revenue series for {date_range[0]}..{date_range[1]}")
    rows = await _successful_invoices(report, *date_range)
    if granularity is Granularity.DAY:
        return _daily_buckets(rows, *date_range, include_empty=include_empty)
    return _monthly_buckets(rows, *date_range, include_empty=include_empty)


async def top_products(
    limit: int = DEFAULT_TOP_LIMIT,
    start_date: Optional[datetime.date] = None,
    end_date: Optional[datetime.date] = None,
) -> List[ProductRanking]:
    """
    Ranks products by quantity sold on successful invoices.

    Revenue per product is the sum of ``price * qty`` over its line items.
    Products with equal quantities keep the order in which their first line
    item was recorded.

    Args:
        limit: Maximum number of products returned.
        start_date: Optional first invoice date (inclusive); requires end_date.
        end_date: Optional last invoice date (inclusive); requires start_date.

    Returns:
        List[ProductRanking]: At most ``limit`` entries, best seller first.
    """
    report = "top_products"
    validate_limit(report, limit)
    date_range = _optional_range(report, start_date, end_date)
    logger.debug(f"Ranking top {limit} products (range={date_range})")

    rows = await _sold_line_items(report, date_range, "product__public_id", "product__name")
    groups = group_rows(
        rows, key=lambda row: row["product__public_id"],
        amount=_line_revenue, quantity=lambda row: row["qty"],
    )
    names = {row["product__public_id"]: row["product__name"] for row in rows}
    return [
        ProductRanking(product_id=pid, name=names[pid], qty_sold=group.quantity, revenue=money(group.amount))
        for pid, group in _rank_by_quantity(groups, limit)
    ]


async def top_categories(
    limit: int = DEFAULT_TOP_LIMIT,
    start_date: Optional[datetime.date] = None,
    end_date: Optional[datetime.date] = None,
) -> List[CategoryRanking]:
    """Ranks categories by quantity sold on successful invoices, like top_products."""
    report = "top_categories"
    validate_limit(report, limit)
    date_range = _optional_range(report, start_date, end_date)
    logger.debug(f"Ranking top {limit} categories (range={date_range})")

    rows = await _sold_line_items(report, date_range, "product__category__public_id", "product__category__name")
    groups = group_rows(
        rows, key=lambda row: row["product__category__public_id"],
        amount=_line_revenue, quantity=lambda row: row["qty"],
    )
    names = {row["product__category__public_id"]: row["product__category__name"] for row in rows}
    return [
        CategoryRanking(category_id=cid, name=names[cid], qty_sold=group.quantity, revenue=money(group.amount))
        for cid, group in _rank_by_quantity(groups, limit)
    ]


async def customer_cohort(year: Optional[int] = None) -> CohortReport:
    """
    Computes customer acquisition and a coarse retention proxy for a year.

    Acquisition counts customers by the month they signed up. Retention counts,
    per purchase month, the distinct customers with a successful invoice
    created more than RETENTION_WINDOW_DAYS after their own signup. Months with
    no activity are omitted from both sequences.

    Args:
        year: Calendar year to report on; defaults to the current year.

    Returns:
        CohortReport: Two independent month-ordered sequences.
    """
    report = "customer_cohort"
    year = validate_year(report, year if year is not None else today().year)
    start, end = year_window(year)
    logger.debug(f"Building customer cohort report for {year}")

    async with store_access(report, year=year):
        customers = await (
            Customer.filter(created_at__gte=start, created_at__lt=end)
            .order_by("created_at", "id")
            .values("id", "created_at")
        )
        purchases = await (
            Invoice.filter(status=InvoiceStatus.SUCCESS, created_at__gte=start, created_at__lt=end)
            .order_by("created_at", "id")
            .values("customer_id", "created_at", "customer__created_at")
        )

    window = datetime.timedelta(days=RETENTION_WINDOW_DAYS)
    returning = [row for row in purchases if row["created_at"] > row["customer__created_at"] + window]

    def created_month(row: Row) -> int:
        return local_date(row["created_at"]).month

    acquired = group_rows(customers, key=created_month)
    retained = group_rows(returning, key=created_month, distinct=lambda row: row["customer_id"])
    return CohortReport(
        year=year,
        retention_window_days=RETENTION_WINDOW_DAYS,
        acquisition=[
            CustomerAcquisition(month=month, month_name=month_name(month), new_customers=acquired[month].count)
            for month in sorted(acquired)
        ],
        retention=[
            CustomerRetention(month=month, month_name=month_name(month), returning_customers=retained[month].distinct)
            for month in sorted(retained)
        ],
    )


async def _category_sales(report: str, start_date: datetime.date, end_date: datetime.date) -> List[CategorySales]:
    rows = await _sold_line_items(
        report, (start_date, end_date), "product__category__public_id", "product__category__name"
    )
    groups = group_rows(rows, key=lambda row: row["product__category__public_id"], amount=_line_revenue)
    names = {row["product__category__public_id"]: row["product__category__name"] for row in rows}
    ranked = sorted(groups.items(), key=lambda item: item[1].amount, reverse=True)
    return [CategorySales(category_id=cid, name=names[cid], total_sales=money(group.amount)) for cid, group in ranked]


async def range_summary(
    start_date: Optional[datetime.date] = None,
    end_date: Optional[datetime.date] = None,
) -> RangeSummary:
    """
    Generates a sales summary over an inclusive date range.

    Args:
        start_date: First day of the range; defaults to the first day of the
            current month.
        end_date: Last day of the range; defaults to today.

    Returns:
        RangeSummary: An object containing:
            - total_orders: Number of successful invoices in range
            - total_revenue: Sum of their grand_total
            - avg_order_value: total_revenue / total_orders, rounded to cents,
              or zero when there are no successful invoices
            - daily: Per-day order count and sales, ascending by date, days
              without sales omitted
            - by_category: Line item revenue per category, highest first

    Raises:
        InvalidRange: If end_date precedes start_date.
    """
    report = "range_summary"
    current = today()
    start_date = start_date or current.replace(day=1)
    end_date = end_date or current
    validate_range(report, start_date, end_date)
    logger.debug(f"Building sales summary for {start_date}..{end_date}")

    rows = await _successful_invoices(report, start_date, end_date)
    total_revenue = money(sum((row["grand_total"] for row in rows), Decimal("0")))
    total_orders = len(rows)
    avg_order_value = money(total_revenue / total_orders) if total_orders else money(None)

    return RangeSummary(
        start_date=start_date,
        end_date=end_date,
        total_orders=total_orders,
        total_revenue=total_revenue,
        avg_order_value=avg_order_value,
        daily=_daily_buckets(rows, start_date, end_date, include_empty=False),
        by_category=await _category_sales(report, start_date, end_date),
    )


async def dashboard_summary(year: Optional[int] = None) -> DashboardSummary:
    """Status counts over all invoices plus the month revenue chart of ``year``."""
    year = validate_year("dashboard_summary", year if year is not None else today().year)
    counts = await status_counts()
    chart = await revenue_series(year=year)
    return DashboardSummary(year=year, counts=counts, chart=chart)


async def store_overview() -> StoreOverview:
    """
    Generates the detailed dashboard statistics.

    Returns:
        StoreOverview: Successful revenue over all time, customer, product and
        category counts, the most recent invoices in any status (newest first)
        and the best-selling products.
    """
    report = "store_overview"
    async with store_access(report):
        revenue_rows = await Invoice.filter(status=InvoiceStatus.SUCCESS).values_list("grand_total", flat=True)
        total_customers = await Customer.all().count()
        total_products = await Product.all().count()
        total_categories = await Category.all().count()
        recent = await (
            Invoice.all()
            .order_by("-created_at", "-id")
            .limit(RECENT_TRANSACTIONS_LIMIT)
            .prefetch_related("customer")
        )

    recent_transactions = [
        RecentInvoice(
            public_id=invoice.public_id, invoice=invoice.invoice,
            customer_name=invoice.customer.name if invoice.customer else None,
            grand_total=money(invoice.grand_total), status=invoice.status,
            created_at=invoice.created_at,
        ) for invoice in recent
    ]
    return StoreOverview(
        total_revenue=money(sum(revenue_rows, Decimal("0"))),
        total_customers=total_customers,
        total_products=total_products,
        total_categories=total_categories,
        recent_transactions=recent_transactions,
        best_selling_products=await top_products(limit=DEFAULT_TOP_LIMIT),
    )
