import enum

from tortoise import fields, timezone
from ...common.models import TimestampMixin, public_id_field


class PaymentType(str, enum.Enum):
    CASH = "cash"
    CUSTOMER = "customer"  # charged to the customer's account
    CREDIT = "credit"
    DEBIT = "debit"


class Sale(TimestampMixin):
    """A committed point-of-sale transaction. Never updated or deleted."""

    id = fields.IntField(primary_key=True)
    public_id = public_id_field()

    item: fields.ForeignKeyRelation["Item"] = fields.ForeignKeyField(
        "models.Item", related_name="sales", on_delete=fields.RESTRICT
    )
    # No customer means a cash sale
    customer: fields.ForeignKeyNullableRelation["Customer"] = fields.ForeignKeyField(
        "models.Customer", related_name="sales", on_delete=fields.RESTRICT, null=True
    )

    quantity = fields.IntField()
    payment_type = fields.CharEnumField(PaymentType, max_length=20)
    date = fields.DatetimeField(default=timezone.now, db_index=True)

    def __str__(self):
        return f"Sale {self.public_id}: {self.quantity} units ({self.payment_type.value})"

    class Meta:
        table = "sales"
        ordering = ["id"]
