"""API routes for catalog items."""
from fastapi import APIRouter, status, Query, Depends
from typing import Annotated

from .schemas import ItemCreate, ItemResponse, PaginatedItemResponse
from . import service

from ..auth.models import User as AuthUser
from ..auth.security import get_current_active_user, get_current_active_admin_user

router = APIRouter(
    prefix="/items",
    tags=["Items"],
    dependencies=[Depends(get_current_active_user)],
    responses={404: {"description": "Not found"}},
)


@router.post(
    "/",
    response_model=ItemResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new item",
)
async def create_item(
    item_in: ItemCreate,
    current_admin: Annotated[AuthUser, Depends(get_current_active_admin_user)],
):
    return await service.create_item(item_in, creator=current_admin)


@router.get("/", response_model=PaginatedItemResponse, summary="List items")
async def list_items(
    page: int = Query(1, ge=1, le=1_000_000, description="Page number"),
    size: int = Query(10, ge=1, le=100, description="Number of items per page"),
):
    return await service.list_items(page, size)


@router.get("/{item_public_id}", response_model=ItemResponse, summary="Get a specific item")
async def get_item(item_public_id: str):
    return await service.get_item(item_public_id)
