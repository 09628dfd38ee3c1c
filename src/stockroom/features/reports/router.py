import logging
from fastapi import APIRouter, Depends, Query, Response
from typing import Annotated, Optional

from ..auth.security import get_current_active_user
from .delivery import Mailer, get_mailer
from .filters import ReportKind, normalize_export_request
from .schemas import (
    ReportParams, SalesReportResponse, ItemsReportResponse,
    LedgerReportResponse, ExportDeliveredResponse
)
from . import service as report_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
    dependencies=[Depends(get_current_active_user)],
    responses={404: {"description": "Not found"}},
)


@router.get("/sales", response_model=SalesReportResponse)
async def get_sales_report(params: ReportParams = Depends()):
    return await report_service.get_sales_report(params.to_query(ReportKind.SALES))


@router.get("/items", response_model=ItemsReportResponse)
async def get_items_report(params: ReportParams = Depends()):
    return await report_service.get_items_report(params.to_query(ReportKind.ITEMS))


@router.get("/ledger/{customer_id}", response_model=LedgerReportResponse)
async def get_customer_ledger(customer_id: str, params: ReportParams = Depends()):
    return await report_service.get_customer_ledger(
        params.to_query(ReportKind.LEDGER, customer_id=customer_id)
    )


@router.get(
    "/export",
    response_model=ExportDeliveredResponse,
    responses={
        200: {"description": "The export file, or a delivery acknowledgement when email is set"},
        502: {"description": "The export was generated but could not be mailed"},
    },
)
async def export_report(
    mailer: Annotated[Optional[Mailer], Depends(get_mailer)],
    type: Optional[str] = Query(None, description="sales, items or ledger"),
    format: Optional[str] = Query(None, description="excel or pdf"),
    customer_id: Optional[str] = Query(None, alias="customerId"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    email: Optional[str] = Query(None, description="Mail the export here instead of downloading it"),
):
    request = normalize_export_request(type, format, customer_id, start_date, end_date, email)
    result = await report_service.export_report(request, mailer)

    if result.delivered_to:
        return ExportDeliveredResponse(
            message="Report sent successfully",
            email=result.delivered_to,
            filename=result.filename,
        )
    return Response(
        content=result.content,
        media_type=result.media_type,
        headers={"Content-Disposition": f"attachment; filename={result.filename}"},
    )
