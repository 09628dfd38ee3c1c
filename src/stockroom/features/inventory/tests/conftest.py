import pytest_asyncio
from stockroom.features.auth.models import User
from stockroom.features.inventory.models import Item


@pytest_asyncio.fixture
async def admin_user() -> User:
    """The admin account created by the root conftest."""
    return await User.get(role="admin")


@pytest_asyncio.fixture
async def item_factory():
    """A factory to create catalog items."""

    async def _factory(
        name: str,
        quantity: int = 10,
        price: float = 100.0,
        description: str = "",
        created_by: User = None,
    ):
        return await Item.create(
            name=name,
            description=description,
            quantity=quantity,
            price=price,
            created_by=created_by,
        )

    return _factory


@pytest_asyncio.fixture
async def sample_items(item_factory):
    """A list of sample items."""
    return [
        await item_factory(name="Sample Item 1"),
        await item_factory(name="Sample Item 2"),
        await item_factory(name="Sample Item 3"),
    ]
