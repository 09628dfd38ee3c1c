import logging
from typing import Optional

from ...core.errors import NotFoundError
from ..auth.models import User as AuthUser
from .models import Item
from .schemas import ItemCreate, ItemResponse, PaginatedItemResponse

logger = logging.getLogger(__name__)


def _to_item_response(item: Item) -> ItemResponse:
    """Converts an Item (with ``created_by`` fetched) to its response schema."""
    return ItemResponse(
        public_id=item.public_id,
        name=item.name,
        description=item.description,
        quantity=item.quantity,
        price=item.price,
        created_by=item.created_by.email if item.created_by else None,
        created_at=item.created_at,
        updated_at=item.updated_at,
    )


async def get_item_or_404(item_public_id: str) -> Item:
    item = await Item.get_or_none(public_id=item_public_id)
    if not item:
        raise NotFoundError(f"Item {item_public_id} not found.")
    return item


async def create_item(item_in: ItemCreate, creator: Optional[AuthUser] = None) -> ItemResponse:
    """
    Creates a new catalog item.

    Args:
        item_in: The data for the new item.
        creator: The user recorded as the item's creator.

    Returns:
        The created item.
    """
    item = await Item.create(**item_in.model_dump(), created_by=creator)
    await item.fetch_related("created_by")
    logger.info(f"Created item {item.public_id} ({item.name}) with {item.quantity} units")
    return _to_item_response(item)


async def get_item(item_public_id: str) -> ItemResponse:
    item = await get_item_or_404(item_public_id)
    await item.fetch_related("created_by")
    return _to_item_response(item)


async def list_items(page: int, size: int) -> PaginatedItemResponse:
    """
    Lists catalog items by name.

    Args:
        page: The page number.
        size: The number of items per page.
    """
    offset = (page - 1) * size
    items_db = (
        await Item.all()
        .prefetch_related("created_by")
        .order_by("name", "id")
        .offset(offset)
        .limit(size)
    )
    total = await Item.all().count()
    return PaginatedItemResponse(
        items=[_to_item_response(item) for item in items_db],
        total=total,
        page=page,
        size=size,
    )
