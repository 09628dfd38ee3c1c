from tortoise import fields

from ...common.models import TimestampMixin, public_id_field


class User(TimestampMixin):
    id = fields.IntField(primary_key=True)
    public_id = public_id_field()
    email = fields.CharField(max_length=255, unique=True, db_index=True)
    hashed_password = fields.CharField(max_length=255)
    role = fields.CharField(max_length=20, default="staff")  # "admin" or "staff"
    is_active = fields.BooleanField(default=True)

    items_created: fields.ReverseRelation["Item"]

    def __str__(self):
        return f"{self.email} ({self.role})"

    class Meta:
        table = "users"
