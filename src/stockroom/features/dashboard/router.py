from fastapi import APIRouter, Depends, Query
from typing import Optional

from ..auth.security import get_current_active_user
from ..reports.filters import ReportKind, normalize_report_query
from .schemas import DashboardResponse
from . import service

router = APIRouter(
    prefix="/dashboard",
    tags=["Dashboard"],
    dependencies=[Depends(get_current_active_user)],
)


@router.get("", response_model=DashboardResponse)
async def get_dashboard(
    start_date: Optional[str] = Query(None, alias="startDate", description="YYYY-MM-DD, inclusive"),
    end_date: Optional[str] = Query(None, alias="endDate", description="YYYY-MM-DD, inclusive"),
):
    query = normalize_report_query(ReportKind.SALES, start_date=start_date, end_date=end_date)
    return await service.get_dashboard(query)
