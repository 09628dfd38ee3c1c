"""Paginated reads over the Sale and Item tables.

Each reader takes a normalized ``ReportQuery`` and returns either one page
(``read_*_page``) or the whole filtered, sorted set (``read_all_*``). Records
come back with their cross references resolved from the live rows.
"""

import datetime
import logging
from typing import List, Optional, assert_never

from tortoise.expressions import Q
from tortoise.functions import Sum
from tortoise.queryset import QuerySet

from ...common.pagination import Page, page_offset
from ..customers.models import Customer
from ..customers.service import get_customer_or_404
from ..inventory.models import Item
from ..sales.models import Sale
from ..sales.schemas import SaleRecord
from .filters import ReportKind, ReportQuery
from .schemas import ItemRecord

logger = logging.getLogger(__name__)


def day_bounds(
    start: Optional[datetime.date], end: Optional[datetime.date]
) -> tuple[Optional[datetime.datetime], Optional[datetime.datetime]]:
    """Turns inclusive calendar days into a ``[lower, upper)`` UTC datetime range."""
    lower = upper = None
    if start:
        lower = datetime.datetime.combine(start, datetime.time.min, tzinfo=datetime.timezone.utc)
    if end:
        upper = datetime.datetime.combine(
            end + datetime.timedelta(days=1), datetime.time.min, tzinfo=datetime.timezone.utc
        )
    return lower, upper


def _within_days(
    qs: QuerySet, field: str, start: Optional[datetime.date], end: Optional[datetime.date]
) -> QuerySet:
    lower, upper = day_bounds(start, end)
    if lower:
        qs = qs.filter(**{f"{field}__gte": lower})
    if upper:
        qs = qs.filter(**{f"{field}__lt": upper})
    return qs


async def _filtered_sales(query: ReportQuery) -> QuerySet[Sale]:
    qs = Sale.all()

    if query.customer_id:
        customer = await get_customer_or_404(query.customer_id)
        qs = qs.filter(customer_id=customer.id)

    if query.search:
        # Sale search hits the item name or the customer name
        item_ids = await Item.filter(name__icontains=query.search).values_list("id", flat=True)
        customer_ids = await Customer.filter(name__icontains=query.search).values_list(
            "id", flat=True
        )
        qs = qs.filter(Q(item_id__in=list(item_ids)) | Q(customer_id__in=list(customer_ids)))

    return _within_days(qs, "date", query.start_date, query.end_date)


def _filtered_items(query: ReportQuery) -> QuerySet[Item]:
    qs = Item.all()
    if query.search:
        qs = qs.filter(Q(name__icontains=query.search) | Q(description__icontains=query.search))
    return _within_days(qs, "created_at", query.start_date, query.end_date)


def to_item_record(item: Item) -> ItemRecord:
    """Expects ``created_by`` to be fetched."""
    return ItemRecord(
        public_id=item.public_id,
        name=item.name,
        description=item.description,
        quantity=item.quantity,
        price=item.price,
        total_value=item.quantity * item.price,
        created_by=item.created_by.email if item.created_by else "N/A",
        created_at=item.created_at,
    )


async def read_sales_page(query: ReportQuery) -> Page[SaleRecord]:
    qs = await _filtered_sales(query)
    total = await qs.count()
    sales = (
        await qs.order_by(*query.ordering)
        .offset(page_offset(query.page, query.limit))
        .limit(query.limit)
        .prefetch_related("item", "customer")
    )
    logger.debug(f"Read {len(sales)} of {total} sales for page {query.page}")
    return Page([SaleRecord.from_sale(s) for s in sales], total, query.page, query.limit)


async def read_all_sales(query: ReportQuery) -> List[SaleRecord]:
    qs = await _filtered_sales(query)
    sales = await qs.order_by(*query.ordering).prefetch_related("item", "customer")
    return [SaleRecord.from_sale(s) for s in sales]


async def read_items_page(query: ReportQuery) -> Page[ItemRecord]:
    qs = _filtered_items(query)
    total = await qs.count()
    items = (
        await qs.order_by(*query.ordering)
        .offset(page_offset(query.page, query.limit))
        .limit(query.limit)
        .prefetch_related("created_by")
    )
    return Page([to_item_record(i) for i in items], total, query.page, query.limit)


async def read_all_items(query: ReportQuery) -> List[ItemRecord]:
    items = await _filtered_items(query).order_by(*query.ordering).prefetch_related("created_by")
    return [to_item_record(i) for i in items]


async def read_page(query: ReportQuery) -> Page:
    if query.kind in (ReportKind.SALES, ReportKind.LEDGER):
        return await read_sales_page(query)
    elif query.kind is ReportKind.ITEMS:
        return await read_items_page(query)
    else:
        assert_never(query.kind)


async def read_all(query: ReportQuery) -> list:
    if query.kind in (ReportKind.SALES, ReportKind.LEDGER):
        return await read_all_sales(query)
    elif query.kind is ReportKind.ITEMS:
        return await read_all_items(query)
    else:
        assert_never(query.kind)


async def sold_quantities_by_item(
    start: Optional[datetime.date], end: Optional[datetime.date]
) -> dict[str, int]:
    """
    Units sold per item (keyed by item public ID) across every sale in the window.

    Used for turnover rates, so it deliberately ignores any item search.
    """
    qs = _within_days(Sale.all(), "date", start, end)
    rows = await qs.annotate(sold=Sum("quantity")).group_by("item_id").values("item_id", "sold")
    if not rows:
        return {}

    public_ids = dict(
        await Item.filter(id__in=[row["item_id"] for row in rows]).values_list("id", "public_id")
    )
    return {
        public_ids[row["item_id"]]: int(row["sold"] or 0)
        for row in rows
        if row["item_id"] in public_ids
    }
