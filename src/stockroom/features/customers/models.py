from tortoise import fields
from ...common.models import TimestampMixin, public_id_field


class Customer(TimestampMixin):
    id = fields.IntField(primary_key=True)
    public_id = public_id_field()
    name = fields.CharField(max_length=255)
    address = fields.TextField()
    phone = fields.CharField(max_length=50)
    email = fields.CharField(max_length=255, null=True)

    sales: fields.ReverseRelation["Sale"]

    def __str__(self):
        return self.name

    class Meta:
        table = "customers"
