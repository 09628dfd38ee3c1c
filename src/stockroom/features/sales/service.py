import datetime
import logging
from typing import List

from tortoise.expressions import F, Q
from tortoise.transactions import in_transaction

from ...common.models import as_utc
from ...core.errors import InsufficientStockError, NotFoundError, ValidationError
from ...core.timeouts import within_request_timeout
from ..customers.models import Customer
from ..customers.service import get_customer_or_404
from ..inventory.models import Item
from ..inventory.service import get_item_or_404
from ..reports.filters import ReportQuery
from ..reports.readers import read_sales_page
from .models import PaymentType, Sale
from .schemas import PaginatedSaleResponse, SaleCreate, SaleRecord

logger = logging.getLogger(__name__)


async def create_sale(sale_in: SaleCreate) -> Sale:
    """
    Records a sale and takes its units out of stock.

    The stock check and the decrement are one conditional UPDATE, so two
    concurrent sales can never both succeed against the same last units.
    Either the decrement and the new Sale row are both committed or neither is.

    Args:
        sale_in: The validated sale request.

    Returns:
        The persisted Sale with ``item`` and ``customer`` fetched.

    Raises:
        NotFoundError: The item or the given customer does not exist.
        ValidationError: A customer-account sale without a customer.
        InsufficientStockError: Fewer units on hand than requested.
        StoreTimeoutError: The sale did not commit within the request timeout;
            nothing was written.
    """
    return await within_request_timeout(_record_sale(sale_in), "Sale")


async def _record_sale(sale_in: SaleCreate) -> Sale:
    item = await get_item_or_404(sale_in.item_id)

    customer_id = (sale_in.customer_id or "").strip()
    if sale_in.payment_type == PaymentType.CUSTOMER and not customer_id:
        raise ValidationError("Customer ID is required for customer payment type", field="customer_id")
    customer = await get_customer_or_404(customer_id) if customer_id else None
    # Stored and reported as UTC; a date without an offset is taken to be UTC
    sale_date = as_utc(sale_in.date) if sale_in.date else datetime.datetime.now(datetime.timezone.utc)

    async with in_transaction() as conn:
        updated = (
            await Item.filter(id=item.id, quantity__gte=sale_in.quantity)
            .using_db(conn)
            .update(quantity=F("quantity") - sale_in.quantity)
        )
        if not updated:
            current = await Item.get(id=item.id, using_db=conn)
            logger.info(
                f"Rejected sale of {sale_in.quantity} x {current.name}: only {current.quantity} in stock"
            )
            raise InsufficientStockError(current.name, sale_in.quantity, current.quantity)

        sale = await Sale.create(
            item_id=item.id,
            customer_id=customer.id if customer else None,
            quantity=sale_in.quantity,
            payment_type=sale_in.payment_type,
            date=sale_date,
            using_db=conn,
        )

    logger.debug(f"Committed sale {sale.public_id}: {sale.quantity} x {item.name} ({sale.payment_type.value})")
    await sale.fetch_related("item", "customer")
    return sale


async def get_sale(sale_public_id: str) -> SaleRecord:
    sale = await within_request_timeout(
        Sale.get_or_none(public_id=sale_public_id).prefetch_related("item", "customer"), "Sale lookup"
    )
    if not sale:
        raise NotFoundError(f"Sale {sale_public_id} not found.")
    return SaleRecord.from_sale(sale)


async def list_sales(query: ReportQuery) -> PaginatedSaleResponse:
    page = await within_request_timeout(read_sales_page(query), "Sales listing")
    return PaginatedSaleResponse(
        sales=page.records, total=page.total, page=page.page, total_pages=page.total_pages
    )


async def search_sales(term: str) -> List[SaleRecord]:
    """Unpaginated search on item or customer name, newest first. A blank term finds nothing."""
    term = (term or "").strip()
    if not term:
        return []

    return await within_request_timeout(_search(term), "Sale search")


async def _search(term: str) -> List[SaleRecord]:
    item_ids = await Item.filter(name__icontains=term).values_list("id", flat=True)
    customer_ids = await Customer.filter(name__icontains=term).values_list("id", flat=True)
    sales = (
        await Sale.filter(Q(item_id__in=list(item_ids)) | Q(customer_id__in=list(customer_ids)))
        .order_by("-created_at", "id")
        .prefetch_related("item", "customer")
    )
    return [SaleRecord.from_sale(s) for s in sales]
