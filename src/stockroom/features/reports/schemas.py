"""Report and Export API Schemas

This module defines the Pydantic models returned by the reporting endpoints:

1. Item records as they appear in the items report
2. Summary blocks for the sales, items and customer ledger reports
3. The paginated report envelopes ``{data, total, page, totalPages, summary}``
4. The acknowledgement sent back when an export is emailed

Everything serializes with camelCase keys."""
from fastapi import Query
from pydantic import Field
from typing import List, Optional
import datetime

from ...common.schemas import CamelModel
from ..sales.schemas import SaleRecord
from .filters import ReportKind, ReportQuery, normalize_report_query


# Raw listing parameters, validated by normalize_report_query rather than by FastAPI
class ReportParams:
    def __init__(
        self,
        page: Optional[str] = Query(None, description="Page number, starting at 1"),
        limit: Optional[str] = Query(None, description="Records per page"),
        search: Optional[str] = Query(None, description="Case-insensitive text search"),
        sort: Optional[str] = Query(None, description="Sort field, prefix with - for descending"),
        start_date: Optional[str] = Query(None, alias="startDate", description="YYYY-MM-DD, inclusive"),
        end_date: Optional[str] = Query(None, alias="endDate", description="YYYY-MM-DD, inclusive"),
    ):
        self.page = page
        self.limit = limit
        self.search = search
        self.sort = sort
        self.start_date = start_date
        self.end_date = end_date

    def to_query(self, kind: ReportKind, customer_id: Optional[str] = None) -> ReportQuery:
        return normalize_report_query(
            kind,
            page=self.page,
            limit=self.limit,
            search=self.search,
            sort=self.sort,
            start_date=self.start_date,
            end_date=self.end_date,
            customer_id=customer_id,
        )


class ItemRecord(CamelModel):
    public_id: str
    name: str
    description: str
    quantity: int
    price: float
    total_value: float = Field(..., description="quantity x price")
    created_by: str = Field(..., description="Creator email, or N/A")
    created_at: datetime.datetime


# Sales summary
class TopItem(CamelModel):
    item_name: str
    quantity: int
    revenue: float


class DailySales(CamelModel):
    date: str = Field(..., description="UTC calendar day, YYYY-MM-DD")
    total: int
    revenue: float


class PaymentTypeShare(CamelModel):
    type: str
    count: int
    percentage: float


class SalesSummary(CamelModel):
    total_revenue: float = 0.0
    total_sales: int = 0
    average_sale_price: float = 0.0
    top_items: List[TopItem] = []
    sales_by_date: List[DailySales] = []
    payment_type_breakdown: List[PaymentTypeShare] | None = None


# Items summary
class TurnoverRate(CamelModel):
    item_name: str
    rate: float


class ItemsSummary(CamelModel):
    total_inventory_value: float = 0.0
    total_items: int = 0
    average_price: float = 0.0
    low_stock_items: int = 0
    turnover_rate: List[TurnoverRate] = []


# Customer ledger summary
class LedgerSummary(CamelModel):
    total_spent: float = 0.0
    total_transactions: int = 0
    average_transaction_value: float = 0.0
    payment_type_breakdown: List[PaymentTypeShare] = []


# Report envelopes
class SalesReportResponse(CamelModel):
    data: List[SaleRecord]
    total: int
    page: int
    total_pages: int
    summary: SalesSummary


class ItemsReportResponse(CamelModel):
    data: List[ItemRecord]
    total: int
    page: int
    total_pages: int
    summary: ItemsSummary


class LedgerReportResponse(CamelModel):
    data: List[SaleRecord]
    total: int
    page: int
    total_pages: int
    summary: LedgerSummary


class ExportDeliveredResponse(CamelModel):
    message: str
    email: str
    filename: str
