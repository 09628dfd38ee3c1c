"""API routes for customer records."""
from fastapi import APIRouter, status, Depends

from .schemas import CustomerCreate, CustomerResponse
from . import service
from ..auth.security import get_current_active_user

router = APIRouter(
    prefix="/customers",
    tags=["Customers"],
    dependencies=[Depends(get_current_active_user)],
    responses={404: {"description": "Not found"}},
)


@router.post("/", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
async def create_customer(customer_in: CustomerCreate):
    return await service.create_customer(customer_in)


@router.get("/{customer_public_id}", response_model=CustomerResponse)
async def get_customer(customer_public_id: str):
    return await service.get_customer(customer_public_id)
