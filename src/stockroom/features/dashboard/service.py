"""
Dashboard Service Module

Headline numbers for the back-office landing page: sales count and revenue
over an optional date window, stock levels, and the latest sales.
"""

import asyncio
import dataclasses
import logging

from ...core.timeouts import within_request_timeout
from ..reports.aggregation import summarize_items, summarize_sales
from ..reports.filters import ReportKind, ReportQuery
from ..reports.readers import read_all_items, read_all_sales, read_sales_page
from .schemas import DashboardResponse, InventoryStatus

logger = logging.getLogger(__name__)

RECENT_SALES = 5


async def get_dashboard(query: ReportQuery) -> DashboardResponse:
    """
    Builds the dashboard for a normalized sales query.

    Only the query's date window applies. Sale totals and the recent sales
    are limited to that window; the inventory figures cover every item.
    """
    window = ReportQuery(kind=ReportKind.SALES, start_date=query.start_date, end_date=query.end_date)
    recent = dataclasses.replace(window, limit=RECENT_SALES, sort_field="date", descending=True)

    sales, items, latest = await within_request_timeout(
        asyncio.gather(
            read_all_sales(window),
            read_all_items(ReportQuery(kind=ReportKind.ITEMS)),
            read_sales_page(recent),
        ),
        "Dashboard",
    )
    sales_summary = summarize_sales(sales)
    items_summary = summarize_items(items, {})
    logger.info(
        f"Dashboard: {sales_summary.total_sales} sales, {items_summary.low_stock_items} of "
        f"{items_summary.total_items} items low on stock"
    )
    return DashboardResponse(
        total_sales=sales_summary.total_sales,
        total_revenue=sales_summary.total_revenue,
        inventory_status=InventoryStatus(
            total_items=items_summary.total_items,
            low_stock_items=items_summary.low_stock_items,
        ),
        recent_sales=latest.records,
    )
