import datetime

import pytest
from fastapi import status
from httpx import AsyncClient

from stockroom.features.customers.models import Customer
from stockroom.features.inventory.models import Item
from stockroom.features.sales.models import PaymentType
from stockroom.features.sales.schemas import SaleCreate
from stockroom.features.sales.service import create_sale


def utc(*args) -> datetime.datetime:
    return datetime.datetime(*args, tzinfo=datetime.timezone.utc)


async def sell(item: Item, quantity: int, date: datetime.datetime, customer: Customer = None):
    return await create_sale(
        SaleCreate(
            item_id=item.public_id,
            quantity=quantity,
            payment_type=PaymentType.CUSTOMER if customer else PaymentType.CASH,
            customer_id=customer.public_id if customer else None,
            date=date,
        )
    )


@pytest.mark.asyncio
async def test_empty_dashboard(staff_client: AsyncClient):
    response = await staff_client.get("/api/v1/dashboard")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "totalSales": 0,
        "totalRevenue": 0.0,
        "inventoryStatus": {"totalItems": 0, "lowStockItems": 0},
        "recentSales": [],
    }


@pytest.mark.asyncio
async def test_dashboard_totals_and_stock(staff_client: AsyncClient):
    lamp = await Item.create(name="Lamp", quantity=30, price=5.0)
    chair = await Item.create(name="Chair", quantity=12, price=40.0)
    await Item.create(name="Desk", quantity=3, price=100.0)
    ada = await Customer.create(name="Ada", address="1 Engine St", phone="555")

    await sell(lamp, 4, utc(2024, 1, 2, 10))
    await sell(chair, 3, utc(2024, 1, 3, 10), ada)

    data = (await staff_client.get("/api/v1/dashboard")).json()
    assert data["totalSales"] == 2
    assert data["totalRevenue"] == pytest.approx(4 * 5.0 + 3 * 40.0)
    # Chair drops to 9 after the sale, Desk started at 3
    assert data["inventoryStatus"] == {"totalItems": 3, "lowStockItems": 2}
    assert [s["itemName"] for s in data["recentSales"]] == ["Chair", "Lamp"]
    assert data["recentSales"][0]["customerName"] == "Ada"


@pytest.mark.asyncio
async def test_dashboard_recent_sales_are_the_latest_five(staff_client: AsyncClient):
    item = await Item.create(name="Widget", quantity=100, price=1.0)
    days = [5, 1, 7, 3, 2, 6, 4]
    for day in days:
        await sell(item, day, utc(2024, 3, day, 12))

    data = (await staff_client.get("/api/v1/dashboard")).json()
    assert data["totalSales"] == 7
    assert [s["date"][:10] for s in data["recentSales"]] == [
        "2024-03-07", "2024-03-06", "2024-03-05", "2024-03-04", "2024-03-03"
    ]


@pytest.mark.asyncio
async def test_dashboard_date_window(staff_client: AsyncClient):
    item = await Item.create(name="Widget", quantity=100, price=10.0)
    await sell(item, 1, utc(2024, 1, 31, 23, 59))
    await sell(item, 2, utc(2024, 2, 1, 0, 0))
    await sell(item, 3, utc(2024, 2, 29, 23, 59))
    await sell(item, 4, utc(2024, 3, 1, 0, 0))

    response = await staff_client.get(
        "/api/v1/dashboard", params={"startDate": "2024-02-01", "endDate": "2024-02-29"}
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["totalSales"] == 2
    assert data["totalRevenue"] == pytest.approx(50.0)
    assert [s["quantity"] for s in data["recentSales"]] == [3, 2]
    # Stock figures ignore the window
    assert data["inventoryStatus"]["totalItems"] == 1


@pytest.mark.asyncio
async def test_dashboard_errors(staff_client: AsyncClient, async_client: AsyncClient):
    response = await async_client.get("/api/v1/dashboard")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED

    response = await staff_client.get("/api/v1/dashboard", params={"startDate": "last week"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["field"] == "startDate"

    response = await staff_client.get(
        "/api/v1/dashboard", params={"startDate": "2024-03-01", "endDate": "2024-02-01"}
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
