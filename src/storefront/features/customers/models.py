from tortoise import fields
from ...common.models import TimestampMixin, generate_ksuid


class Customer(TimestampMixin):
    id = fields.IntField(primary_key=True)
    public_id = fields.CharField(
        max_length=27, unique=True, default=generate_ksuid, db_index=True
    )
    name = fields.CharField(max_length=255)
    email = fields.CharField(max_length=255, unique=True)
    phone = fields.CharField(max_length=50, null=True)
    address = fields.TextField(null=True)

    invoices: fields.ReverseRelation["Invoice"]

    def __str__(self):
        return f"{self.name} <{self.email}>"

    class Meta:
        table = "customers"
