"""Invoice models read by the reporting engine.

Invoices and their line items are written by the checkout and payment
collaborators; only ``status`` changes after creation. Line items are created
together with their invoice and never change afterwards.
"""

from enum import Enum

from tortoise import fields
from ...common.models import TimestampMixin, generate_ksuid


class InvoiceStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    EXPIRED = "expired"
    FAILED = "failed"


class Invoice(TimestampMixin):
    id = fields.IntField(primary_key=True)
    public_id = fields.CharField(
        max_length=27, unique=True, default=generate_ksuid, db_index=True
    )
    invoice = fields.CharField(max_length=50, unique=True, description="Invoice code shown to customers")
    grand_total = fields.DecimalField(max_digits=15, decimal_places=2)
    status = fields.CharEnumField(InvoiceStatus, max_length=20, default=InvoiceStatus.PENDING)

    customer: fields.ForeignKeyRelation["Customer"] = fields.ForeignKeyField(
        "models.Customer", related_name="invoices", on_delete=fields.RESTRICT
    )

    line_items: fields.ReverseRelation["InvoiceLineItem"]  # Local forward reference

    def __str__(self):
        return f"Invoice {self.invoice} ({self.public_id}) - Status: {self.status.value}"

    class Meta:
        table = "invoices"


class InvoiceLineItem(TimestampMixin):
    id = fields.IntField(primary_key=True)
    public_id = fields.CharField(
        max_length=27, unique=True, default=generate_ksuid, db_index=True
    )

    invoice: fields.ForeignKeyRelation[Invoice] = fields.ForeignKeyField(
        "models.Invoice", related_name="line_items", on_delete=fields.CASCADE
    )
    product: fields.ForeignKeyRelation["Product"] = fields.ForeignKeyField(
        "models.Product", related_name="line_items", on_delete=fields.RESTRICT
    )

    qty = fields.IntField()
    price = fields.DecimalField(max_digits=15, decimal_places=2, description="Unit price at the time of purchase")

    def __str__(self):
        return f"{self.qty} x product {self.product_id} on invoice {self.invoice_id}"

    class Meta:
        table = "invoice_details"
        unique_together = (("invoice", "product"),)
