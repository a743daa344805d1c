"""Grouping and time-window primitives shared by every report pipeline.

Rows are plain dicts as returned by Tortoise ``.values()`` queries. They are
folded into insertion-ordered groups, so the natural row order of the scan
decides the order of groups that tie on every ranking key.
"""

import datetime
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, Dict, Hashable, Iterable, Optional, Set, Tuple
from zoneinfo import ZoneInfo

from ...core.config import (
    MAX_TOP_LIMIT, REPORT_MAX_YEAR, REPORT_MIN_YEAR, REPORT_TIMEZONE
)
from .errors import InvalidRange

Row = Dict[str, Any]

CENT = Decimal("0.01")

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


@dataclass
class Aggregate:
    count: int = 0
    quantity: int = 0
    amount: Decimal = Decimal("0")
    members: Set[Hashable] = field(default_factory=set)

    @property
    def distinct(self) -> int:
        return len(self.members)


def group_rows(
    rows: Iterable[Row],
    key: Callable[[Row], Hashable],
    amount: Optional[Callable[[Row], Decimal]] = None,
    quantity: Optional[Callable[[Row], int]] = None,
    distinct: Optional[Callable[[Row], Hashable]] = None,
) -> Dict[Hashable, Aggregate]:
    """
    Groups rows by ``key`` and accumulates per-group totals.

    Args:
        rows: Rows to fold, usually the result of a ``.values()`` query.
        key: Returns the group key of a row.
        amount: Returns the monetary value a row adds to its group.
        quantity: Returns the unit count a row adds to its group.
        distinct: Returns an identity collected into the group's member set.

    Returns:
        A dict of group key to Aggregate, in order of first appearance.
    """
    groups: Dict[Hashable, Aggregate] = {}
    for row in rows:
        group = groups.setdefault(key(row), Aggregate())
        group.count += 1
        if amount is not None:
            group.amount += amount(row) or Decimal("0")
        if quantity is not None:
            group.quantity += quantity(row) or 0
        if distinct is not None:
            group.members.add(distinct(row))
    return groups


def money(value: Optional[Decimal]) -> Decimal:
    """Quantizes a currency amount to cents, treating None as zero."""
    if value is None:
        return Decimal("0").quantize(CENT)
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def month_name(month: int) -> str:
    return MONTH_NAMES[month - 1]


def report_timezone() -> ZoneInfo:
    return ZoneInfo(REPORT_TIMEZONE)


def local_date(value: datetime.datetime) -> datetime.date:
    """Calendar date of a stored timestamp in the reporting timezone."""
    # the store keeps UTC; naive values only come from raw rows
    if value.tzinfo is None:
        value = value.replace(tzinfo=datetime.timezone.utc)
    return value.astimezone(report_timezone()).date()


def today() -> datetime.date:
    return datetime.datetime.now(report_timezone()).date()


def day_start(day: datetime.date) -> datetime.datetime:
    """Midnight of ``day`` in the reporting timezone, expressed in UTC like stored timestamps."""
    local_midnight = datetime.datetime.combine(day, datetime.time.min, tzinfo=report_timezone())
    return local_midnight.astimezone(datetime.timezone.utc)


def date_window(start: datetime.date, end: datetime.date) -> Tuple[datetime.datetime, datetime.datetime]:
    """Half-open timestamp bounds covering the inclusive date range start..end."""
    return day_start(start), day_start(end + datetime.timedelta(days=1))


def year_window(year: int) -> Tuple[datetime.datetime, datetime.datetime]:
    return date_window(datetime.date(year, 1, 1), datetime.date(year, 12, 31))


def validate_year(report: str, year: int) -> int:
    if not REPORT_MIN_YEAR <= year <= REPORT_MAX_YEAR:
        raise InvalidRange(
            report, {"year": year},
            f"year must be between {REPORT_MIN_YEAR} and {REPORT_MAX_YEAR}",
        )
    return year


def validate_range(report: str, start: datetime.date, end: datetime.date) -> Tuple[datetime.date, datetime.date]:
    params = {"start_date": start.isoformat(), "end_date": end.isoformat()}
    if end < start:
        raise InvalidRange(report, params, "end_date precedes start_date")
    validate_year(report, start.year)
    validate_year(report, end.year)
    return start, end


def validate_limit(report: str, limit: int) -> int:
    if not 1 <= limit <= MAX_TOP_LIMIT:
        raise InvalidRange(report, {"limit": limit}, f"limit must be between 1 and {MAX_TOP_LIMIT}")
    return limit
