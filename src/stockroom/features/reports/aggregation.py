"""
Summary statistics for the three report kinds.

These are pure functions over already-resolved records: they never touch the
database, so the same code serves the JSON reports, the exports and the tests.
Callers always pass the full filtered set, never a single page.
"""

import datetime
from collections import Counter, defaultdict
from typing import Mapping, Optional, Sequence, Union, assert_never

from ...common.models import as_utc
from ..inventory.models import LOW_STOCK_THRESHOLD
from ..sales.schemas import SaleRecord
from .filters import ReportKind
from .schemas import (
    DailySales,
    ItemRecord,
    ItemsSummary,
    LedgerSummary,
    PaymentTypeShare,
    SalesSummary,
    TopItem,
    TurnoverRate,
)

TOP_N = 5

Summary = Union[SalesSummary, ItemsSummary, LedgerSummary]


def _utc_day(moment: datetime.datetime) -> str:
    return as_utc(moment).date().isoformat()


def payment_breakdown(records: Sequence[SaleRecord]) -> list[PaymentTypeShare]:
    """Share of transactions per payment type, most used first (ties by type name)."""
    if not records:
        return []
    counts = Counter(r.payment_type.value for r in records)
    total = len(records)
    ordered = sorted(counts.items(), key=lambda pair: (-pair[1], pair[0]))
    return [
        PaymentTypeShare(type=payment_type, count=count, percentage=100 * count / total)
        for payment_type, count in ordered
    ]


def top_items(records: Sequence[SaleRecord], limit: int = TOP_N) -> list[TopItem]:
    """Best sellers by revenue; equal revenue falls back to item name."""
    totals: dict[str, dict] = {}
    for r in records:
        key = r.item_id or r.item_name
        entry = totals.setdefault(key, {"name": r.item_name, "quantity": 0, "revenue": 0.0})
        entry["quantity"] += r.quantity
        entry["revenue"] += r.total_price

    ranked = sorted(totals.values(), key=lambda e: (-e["revenue"], e["name"]))
    return [
        TopItem(item_name=e["name"], quantity=e["quantity"], revenue=e["revenue"])
        for e in ranked[:limit]
    ]


def sales_by_date(records: Sequence[SaleRecord]) -> list[DailySales]:
    buckets: dict[str, list] = defaultdict(lambda: [0, 0.0])
    for r in records:
        bucket = buckets[_utc_day(r.date)]
        bucket[0] += r.quantity
        bucket[1] += r.total_price
    return [
        DailySales(date=day, total=quantity, revenue=revenue)
        for day, (quantity, revenue) in sorted(buckets.items())
    ]


def summarize_sales(
    records: Sequence[SaleRecord], include_payment_breakdown: bool = False
) -> SalesSummary:
    """
    Summarizes a set of sales.

    Args:
        records: Every sale matching the report filters.
        include_payment_breakdown: Add the per-payment-type shares, used when
            the report is scoped to one customer.

    Returns:
        SalesSummary with revenue, count, average sale price, the top five
        items and per-day totals (UTC calendar days, ascending).
    """
    total_revenue = sum(r.total_price for r in records)
    total_sales = len(records)
    return SalesSummary(
        total_revenue=total_revenue,
        total_sales=total_sales,
        average_sale_price=total_revenue / total_sales if total_sales else 0.0,
        top_items=top_items(records),
        sales_by_date=sales_by_date(records),
        payment_type_breakdown=payment_breakdown(records) if include_payment_breakdown else None,
    )


def turnover_rates(
    items: Sequence[ItemRecord], sold_quantities: Mapping[str, int], limit: int = TOP_N
) -> list[TurnoverRate]:
    rates = [
        TurnoverRate(
            item_name=item.name,
            rate=sold_quantities.get(item.public_id, 0) / item.quantity if item.quantity else 0.0,
        )
        for item in items
    ]
    rates.sort(key=lambda t: (-t.rate, t.item_name))
    return rates[:limit]


def summarize_items(items: Sequence[ItemRecord], sold_quantities: Mapping[str, int]) -> ItemsSummary:
    """
    Summarizes a set of items.

    ``sold_quantities`` maps item public IDs to units sold in the report's
    date window; it drives the turnover rates.
    """
    total_items = len(items)
    return ItemsSummary(
        total_inventory_value=sum(item.quantity * item.price for item in items),
        total_items=total_items,
        average_price=sum(item.price for item in items) / total_items if total_items else 0.0,
        low_stock_items=sum(1 for item in items if item.quantity < LOW_STOCK_THRESHOLD),
        turnover_rate=turnover_rates(items, sold_quantities),
    )


def summarize_ledger(records: Sequence[SaleRecord]) -> LedgerSummary:
    total_spent = sum(r.total_price for r in records)
    total_transactions = len(records)
    return LedgerSummary(
        total_spent=total_spent,
        total_transactions=total_transactions,
        average_transaction_value=total_spent / total_transactions if total_transactions else 0.0,
        payment_type_breakdown=payment_breakdown(records),
    )


def summarize(
    kind: ReportKind, records: Sequence, sold_quantities: Optional[Mapping[str, int]] = None
) -> Summary:
    if kind is ReportKind.SALES:
        return summarize_sales(records)
    elif kind is ReportKind.ITEMS:
        return summarize_items(records, sold_quantities or {})
    elif kind is ReportKind.LEDGER:
        return summarize_ledger(records)
    else:
        assert_never(kind)
