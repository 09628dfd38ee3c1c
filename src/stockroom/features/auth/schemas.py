"""Pydantic schemas for staff accounts and bearer tokens."""

from pydantic import BaseModel, ConfigDict, Field, EmailStr
from typing import Literal, Optional
import datetime


class UserCreate(BaseModel):
    email: EmailStr = Field(..., description="Login email address")
    password: str = Field(..., min_length=8, description="User password")
    role: Literal["admin", "staff"] = Field("staff", description="Account role")


class UserResponse(BaseModel):
    public_id: str = Field(..., description="Public unique identifier for the user (KSUID)")
    email: EmailStr
    role: str
    is_active: bool
    created_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)


class Token(BaseModel):
    access_token: str
    token_type: str


class TokenData(BaseModel):
    sub: Optional[str] = None
