"""Data models for the product catalog, including Category and Product."""

from tortoise import fields
from ...common.models import TimestampMixin, generate_ksuid


class Category(TimestampMixin):
    id = fields.IntField(primary_key=True)
    public_id = fields.CharField(
        max_length=27, unique=True, default=generate_ksuid, db_index=True
    )
    name = fields.CharField(max_length=100, unique=True)

    products: fields.ReverseRelation["Product"]

    def __str__(self):
        return self.name

    class Meta:
        table = "categories"


class Product(TimestampMixin):
    id = fields.IntField(primary_key=True)
    public_id = fields.CharField(
        max_length=27, unique=True, default=generate_ksuid, db_index=True
    )
    name = fields.CharField(max_length=255)
    price = fields.DecimalField(max_digits=15, decimal_places=2, default=0)

    category: fields.ForeignKeyRelation[Category] = fields.ForeignKeyField(
        "models.Category", related_name="products", on_delete=fields.RESTRICT
    )

    # String forward reference for inter-feature relation
    line_items: fields.ReverseRelation["InvoiceLineItem"]

    def __str__(self):
        return f"{self.name} (Price: {self.price})"

    class Meta:
        table = "products"
