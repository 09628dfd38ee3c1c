from pydantic import BaseModel, ConfigDict, Field, EmailStr
from typing import Optional
import datetime


class CustomerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    address: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1, max_length=50)
    email: Optional[EmailStr] = None


class CustomerResponse(CustomerCreate):
    public_id: str = Field(..., description="Public unique identifier for the customer (KSUID)")
    created_at: datetime.datetime
    updated_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)
