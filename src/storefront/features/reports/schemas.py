"""Dashboard and Sales Report Schemas

This module defines the Pydantic models returned by the reporting engine.
Each aggregate has one fixed-shape record:

1. Invoice Status Counts
2. Revenue Series (month and day buckets)
3. Product and Category Rankings
4. Customer Acquisition and Retention
5. Date-Range Sales Summary
6. Dashboard Summary and Store Overview

Currency fields are Decimal quantized to cents; they serialize to JSON as
exact decimal strings."""
from pydantic import BaseModel, Field
from typing import List, Optional
from decimal import Decimal
from enum import Enum
import datetime

from ..invoices.models import InvoiceStatus


class Granularity(str, Enum):
    MONTH = "month"
    DAY = "day"

# 1. Invoice Status Counts
class StatusCounts(BaseModel):
    pending: int = 0
    success: int = 0
    expired: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return sum(getattr(self, status.value) for status in InvoiceStatus)

# 2. Revenue Series
class MonthlyRevenue(BaseModel):
    year: int
    month: int = Field(..., ge=1, le=12)
    month_name: str
    total_orders: int = Field(..., ge=0)
    total: Decimal

class DailyRevenue(BaseModel):
    date: datetime.date
    total_orders: int = Field(..., ge=0)
    total_sales: Decimal

# 3. Rankings
class ProductRanking(BaseModel):
    product_id: str = Field(..., description="Public KSUID of the product")
    name: str
    qty_sold: int
    revenue: Decimal

class CategoryRanking(BaseModel):
    category_id: str = Field(..., description="Public KSUID of the category")
    name: str
    qty_sold: int
    revenue: Decimal

# 4. Customer Acquisition and Retention
class CustomerAcquisition(BaseModel):
    month: int = Field(..., ge=1, le=12)
    month_name: str
    new_customers: int

class CustomerRetention(BaseModel):
    month: int = Field(..., ge=1, le=12)
    month_name: str
    returning_customers: int

class CohortReport(BaseModel):
    year: int
    retention_window_days: int
    acquisition: List[CustomerAcquisition]
    retention: List[CustomerRetention]

# 5. Date-Range Sales Summary
class CategorySales(BaseModel):
    category_id: str
    name: str
    total_sales: Decimal

class RangeSummary(BaseModel):
    start_date: datetime.date
    end_date: datetime.date
    total_orders: int
    total_revenue: Decimal
    avg_order_value: Decimal = Field(..., description="Zero when there are no successful orders in range")
    daily: List[DailyRevenue]
    by_category: List[CategorySales]

# 6. Dashboard Summary and Store Overview
class DashboardSummary(BaseModel):
    year: int
    counts: StatusCounts
    chart: List[MonthlyRevenue]

class RecentInvoice(BaseModel):
    public_id: str
    invoice: str
    customer_name: Optional[str] = None
    grand_total: Decimal
    status: InvoiceStatus
    created_at: datetime.datetime

class StoreOverview(BaseModel):
    total_revenue: Decimal
    total_customers: int
    total_products: int
    total_categories: int
    recent_transactions: List[RecentInvoice]
    best_selling_products: List[ProductRanking]
