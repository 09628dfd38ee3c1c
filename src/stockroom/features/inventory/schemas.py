from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
import datetime


class ItemBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="Name of the item")
    description: str = Field("", max_length=2000, description="Free-text description")
    quantity: int = Field(default=0, ge=0, description="Units on hand")
    price: float = Field(default=0.0, ge=0, description="Unit price")


class ItemCreate(ItemBase):
    pass


class ItemResponse(ItemBase):
    public_id: str = Field(..., description="Public unique identifier for the item (KSUID)")
    created_by: Optional[str] = Field(None, description="Email of the user who created the item")
    created_at: datetime.datetime
    updated_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)


class PaginatedItemResponse(BaseModel):
    items: List[ItemResponse]
    total: int
    page: int
    size: int
