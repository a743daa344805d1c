import datetime
from decimal import Decimal
from typing import Iterable, Optional, Tuple

import pytest_asyncio

from storefront.common.models import generate_ksuid
from storefront.features.catalog.models import Category, Product
from storefront.features.customers.models import Customer
from storefront.features.invoices.models import Invoice, InvoiceLineItem, InvoiceStatus
from storefront.features.reports.tests.helpers import utc


@pytest_asyncio.fixture
async def default_category() -> Category:
    """A default category that can be used in tests."""
    return await Category.create(name="Default Category")


@pytest_asyncio.fixture
async def category_factory():
    """A factory to create categories."""

    async def _factory(name: str) -> Category:
        return await Category.create(name=name)

    return _factory


@pytest_asyncio.fixture
async def product_factory(default_category: Category):
    """A factory to create products."""

    async def _factory(name: str, price: str = "10.00", category: Optional[Category] = None) -> Product:
        return await Product.create(name=name, price=Decimal(price), category=category or default_category)

    return _factory


@pytest_asyncio.fixture
async def customer_factory():
    """A factory to create customers with a given signup timestamp."""

    async def _factory(name: str = "Customer", created_at: Optional[datetime.datetime] = None) -> Customer:
        return await Customer.create(
            name=name,
            email=f"{generate_ksuid()}@example.com",
            created_at=created_at or utc(2023, 1, 1),
        )

    return _factory


@pytest_asyncio.fixture
async def default_customer(customer_factory) -> Customer:
    return await customer_factory(name="Default Customer")


@pytest_asyncio.fixture
async def invoice_factory(default_customer: Customer):
    """
    A factory to create an invoice and its line items in one go.

    Line items are (product, qty, unit price) tuples. The grand total is given
    explicitly, as upstream writers set it.
    """

    async def _factory(
        total: str,
        created_at: datetime.datetime,
        status: InvoiceStatus = InvoiceStatus.SUCCESS,
        customer: Optional[Customer] = None,
        items: Iterable[Tuple[Product, int, str]] = (),
    ) -> Invoice:
        invoice = await Invoice.create(
            invoice=f"INV-{generate_ksuid()}",
            grand_total=Decimal(total),
            status=status,
            customer=customer or default_customer,
            created_at=created_at,
        )
        for product, qty, price in items:
            await InvoiceLineItem.create(invoice=invoice, product=product, qty=qty, price=Decimal(price))
        return invoice

    return _factory
