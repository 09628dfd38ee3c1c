"""Shared database building blocks.

Every persisted entity exposes a KSUID ``public_id`` to the outside world and
keeps its integer ``id`` internal. KSUIDs sort by creation time, which keeps
listings that fall back to ``public_id`` roughly chronological."""

import datetime

from tortoise import fields, models
from ksuid import ksuid


def generate_ksuid() -> str:
    """Return a new KSUID as a 27 character string."""
    return str(ksuid.Ksuid())


def public_id_field():
    return fields.CharField(
        max_length=27, unique=True, default=generate_ksuid, db_index=True
    )


class TimestampMixin(models.Model):
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        abstract = True


def as_utc(moment: datetime.datetime) -> datetime.datetime:
    """Aware UTC datetime for ``moment``; naive values are taken to be UTC already."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=datetime.timezone.utc)
    return moment.astimezone(datetime.timezone.utc)
