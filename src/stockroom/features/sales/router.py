"""API routes for point-of-sale transactions.

Sales are append-only: there is no update or delete route."""
from fastapi import APIRouter, status, Query, Depends
from typing import List

from .schemas import SaleCreate, SaleRecord, PaginatedSaleResponse
from . import service

from ..auth.security import get_current_active_user
from ..reports.filters import ReportKind
from ..reports.schemas import ReportParams

router = APIRouter(
    prefix="/sales",
    tags=["Sales"],
    dependencies=[Depends(get_current_active_user)],
    responses={404: {"description": "Not found"}},
)


@router.post(
    "/",
    response_model=SaleRecord,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Not enough stock"}},
)
async def create_sale(sale_in: SaleCreate):
    sale = await service.create_sale(sale_in)
    return SaleRecord.from_sale(sale)


@router.get("/", response_model=PaginatedSaleResponse)
async def list_sales(params: ReportParams = Depends()):
    return await service.list_sales(params.to_query(ReportKind.SALES))


# Declared before /{sale_public_id} so "search" is not taken for an ID
@router.get("/search", response_model=List[SaleRecord])
async def search_sales(query: str = Query("", description="Item or customer name")):
    return await service.search_sales(query)


@router.get("/{sale_public_id}", response_model=SaleRecord)
async def get_sale(sale_public_id: str):
    return await service.get_sale(sale_public_id)
