"""Catalog items and their on-hand stock."""

from tortoise import fields
from ...common.models import TimestampMixin, public_id_field

LOW_STOCK_THRESHOLD = 10


class Item(TimestampMixin):
    id = fields.IntField(primary_key=True)
    public_id = public_id_field()
    name = fields.CharField(max_length=255)
    description = fields.TextField(default="")
    # Only ever decremented through the conditional update in the sales ledger
    quantity = fields.IntField(default=0)
    price = fields.FloatField(default=0.0, description="Current unit price")

    created_by: fields.ForeignKeyNullableRelation["User"] = fields.ForeignKeyField(
        "models.User",
        related_name="items_created",
        on_delete=fields.SET_NULL,
        null=True,
    )

    sales: fields.ReverseRelation["Sale"]

    def __str__(self):
        return f"{self.name} (Stock: {self.quantity}, Price: ${self.price:.2f})"

    class Meta:
        table = "items"
