import logging

from ...core.errors import NotFoundError
from .models import Customer
from .schemas import CustomerCreate, CustomerResponse

logger = logging.getLogger(__name__)


async def get_customer_or_404(customer_public_id: str) -> Customer:
    customer = await Customer.get_or_none(public_id=customer_public_id)
    if not customer:
        raise NotFoundError(f"Customer {customer_public_id} not found.")
    return customer


async def create_customer(customer_in: CustomerCreate) -> CustomerResponse:
    customer = await Customer.create(**customer_in.model_dump())
    logger.info(f"Created customer {customer.public_id}")
    return CustomerResponse.model_validate(customer)


async def get_customer(customer_public_id: str) -> CustomerResponse:
    return CustomerResponse.model_validate(await get_customer_or_404(customer_public_id))
