from pydantic import Field, field_validator
from typing import List, Optional
import datetime

from ...common.models import as_utc
from ...common.schemas import CamelModel
from .models import PaymentType, Sale

CASH_CUSTOMER_NAME = "Cash"


class SaleCreate(CamelModel):
    item_id: str = Field(..., min_length=1, description="Public ID of the item sold")
    quantity: int = Field(..., ge=1, description="Units sold")
    payment_type: PaymentType
    customer_id: Optional[str] = Field(None, description="Public ID of the customer; omit for a cash sale")
    date: Optional[datetime.datetime] = Field(None, description="Transaction date, defaults to now")


class SaleRecord(CamelModel):
    """A sale with its item and customer resolved at read time."""

    public_id: str
    item_id: Optional[str] = None
    item_name: str
    customer_id: Optional[str] = None
    customer_name: str
    quantity: int
    unit_price: float
    total_price: float
    payment_type: PaymentType
    date: datetime.datetime
    created_at: datetime.datetime

    @field_validator("date", "created_at")
    @classmethod
    def dates_in_utc(cls, value: datetime.datetime) -> datetime.datetime:
        return as_utc(value)

    @classmethod
    def from_sale(cls, sale: Sale) -> "SaleRecord":
        # Expects item and customer to be fetched; prices come from the live item row
        item = sale.item
        customer = sale.customer
        unit_price = item.price if item else 0.0
        return cls(
            public_id=sale.public_id,
            item_id=item.public_id if item else None,
            item_name=item.name if item else "N/A",
            customer_id=customer.public_id if customer else None,
            customer_name=customer.name if customer else CASH_CUSTOMER_NAME,
            quantity=sale.quantity,
            unit_price=unit_price,
            total_price=sale.quantity * unit_price,
            payment_type=sale.payment_type,
            date=sale.date,
            created_at=sale.created_at,
        )


class PaginatedSaleResponse(CamelModel):
    sales: List[SaleRecord]
    total: int
    page: int
    total_pages: int
