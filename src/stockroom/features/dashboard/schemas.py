from typing import List

from ...common.schemas import CamelModel
from ..sales.schemas import SaleRecord


class InventoryStatus(CamelModel):
    total_items: int
    low_stock_items: int


class DashboardResponse(CamelModel):
    total_sales: int
    total_revenue: float
    inventory_status: InventoryStatus
    recent_sales: List[SaleRecord]
