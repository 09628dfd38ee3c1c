"""
Reports Service Module

Builds the sales, items and customer ledger reports and their exports.

Every report pairs one page of records with a summary computed over the
whole filtered set. The page read and the full read run concurrently, and
both run under the request timeout.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi.concurrency import run_in_threadpool

from ...core.errors import DeliveryError
from ...core.timeouts import within_request_timeout
from .aggregation import summarize, summarize_items, summarize_ledger, summarize_sales
from .delivery import Mailer
from .filters import ExportRequest, ReportKind, ReportQuery
from .readers import (
    read_all,
    read_all_items,
    read_all_sales,
    read_items_page,
    read_sales_page,
    sold_quantities_by_item,
)
from .rendering import ReportDocument, get_renderer
from .schemas import ItemsReportResponse, LedgerReportResponse, SalesReportResponse

logger = logging.getLogger(__name__)


async def get_sales_report(query: ReportQuery) -> SalesReportResponse:
    """
    Generates the paginated sales report.

    Args:
        query: Normalized sales query.

    Returns:
        SalesReportResponse: the requested page plus a SalesSummary over every
        matching sale, so the summary does not change with ``page`` or ``limit``.
    """
    page, records = await within_request_timeout(
        asyncio.gather(read_sales_page(query), read_all_sales(query)), "Sales report"
    )
    logger.info(f"Sales report: page {page.page}/{page.total_pages}, {page.total} sales")
    return SalesReportResponse(
        data=page.records,
        total=page.total,
        page=page.page,
        total_pages=page.total_pages,
        summary=summarize_sales(records),
    )


async def get_items_report(query: ReportQuery) -> ItemsReportResponse:
    """
    Generates the paginated items report.

    Turnover rates use every sale in the query's date window, regardless of
    the item search.
    """
    page, items, sold = await within_request_timeout(
        asyncio.gather(
            read_items_page(query),
            read_all_items(query),
            sold_quantities_by_item(query.start_date, query.end_date),
        ),
        "Items report",
    )
    logger.info(f"Items report: page {page.page}/{page.total_pages}, {page.total} items")
    return ItemsReportResponse(
        data=page.records,
        total=page.total,
        page=page.page,
        total_pages=page.total_pages,
        summary=summarize_items(items, sold),
    )


async def get_customer_ledger(query: ReportQuery) -> LedgerReportResponse:
    """
    Generates one customer's ledger.

    Raises:
        NotFoundError: if ``query.customer_id`` does not match a customer.
    """
    page, records = await within_request_timeout(
        asyncio.gather(read_sales_page(query), read_all_sales(query)), "Customer ledger"
    )
    logger.info(f"Ledger for customer {query.customer_id}: {page.total} transactions")
    return LedgerReportResponse(
        data=page.records,
        total=page.total,
        page=page.page,
        total_pages=page.total_pages,
        summary=summarize_ledger(records),
    )


async def build_report_document(query: ReportQuery) -> ReportDocument:
    """The full filtered set and its summary, ready for a renderer."""

    async def collect():
        records = await read_all(query)
        sold = None
        if query.kind is ReportKind.ITEMS:
            sold = await sold_quantities_by_item(query.start_date, query.end_date)
        return records, sold

    records, sold = await within_request_timeout(collect(), f"{query.kind.value.capitalize()} export")
    return ReportDocument(kind=query.kind, records=records, summary=summarize(query.kind, records, sold))


@dataclass
class ExportResult:
    content: bytes
    filename: str
    media_type: str
    delivered_to: Optional[str] = None


async def export_report(request: ExportRequest, mailer: Optional[Mailer] = None) -> ExportResult:
    """
    Renders a report export and, when the request names an email, mails it.

    Args:
        request: Normalized export request.
        mailer: Transport used when ``request.email`` is set.

    Returns:
        ExportResult with the rendered bytes, its filename and MIME type.

    Raises:
        DeliveryError: the export was generated but could not be mailed,
            including when no transport is configured. The error carries the
            generated filename.
    """
    document = await build_report_document(request.query)
    renderer = get_renderer(request.format)
    content = await run_in_threadpool(renderer.render, document)
    filename = request.filename
    logger.info(f"Generated {filename} ({len(content)} bytes, {len(document.records)} records)")

    if request.email:
        if mailer is None:
            logger.error(f"Cannot mail {filename} to {request.email}: no mail transport configured")
            raise DeliveryError("Mail transport is not available.", filename=filename)
        try:
            await mailer.send(
                to=request.email,
                subject=document.title,
                body=f"Please find the attached {document.title.lower()}.",
                attachment=content,
                filename=filename,
                media_type=renderer.media_type,
            )
        except DeliveryError as e:
            if e.filename is None:
                e.filename = filename
            logger.error(f"Delivery of {filename} to {request.email} failed: {e.detail}")
            raise

    return ExportResult(
        content=content, filename=filename, media_type=renderer.media_type, delivered_to=request.email
    )
