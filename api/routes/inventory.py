"""Inventory routes: listing, direct creation, take-out and type defaults"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
import logging
from typing import List

from api.dependencies import get_db
from app.config import settings
from domain.schemas.inventory_schemas import (
    InventoryItemCreate,
    InventoryItemResponse,
    ItemTypeDefaultResponse,
    TakeOutRequest,
    TakeOutResponse,
)
from services.inventory_service import InventoryService

router = APIRouter(tags=["Inventory"])
logger = logging.getLogger("freezer.api.inventory")


@router.get("/inventory", response_model=List[InventoryItemResponse])
def list_inventory(
    view: str = Query("single", description="meals, ingredient or single"),
    q: str = Query("", description="Substring of name or id code"),
    veggie: bool = Query(False),
    expiring: bool = Query(False),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    """
    Items currently in the freezer, oldest first.

    - ``meals``: ready meals (type M)
    - ``ingredient``: base ingredients (type Z)
    - ``single``: all other types
    """
    items = InventoryService.list_items(
        db, view, q=q, veggie=veggie, expiring=expiring, limit=limit, offset=offset
    )
    return [InventoryItemResponse.model_validate(i) for i in items]


@router.post(
    "/inventory",
    response_model=InventoryItemResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_inventory_item(payload: InventoryItemCreate, db: Session = Depends(get_db)):
    """Put a single item into the freezer"""
    item = InventoryService.create_item(db, payload)
    return InventoryItemResponse.model_validate(item)


@router.post("/inventory/takeout", response_model=TakeOutResponse)
def take_out_items(payload: TakeOutRequest, db: Session = Depends(get_db)):
    """Take the given items out of the freezer; all or nothing"""
    ids = InventoryService.take_out(db, payload.item_ids)
    return TakeOutResponse(item_ids=ids)


@router.get("/item-type-defaults", response_model=List[ItemTypeDefaultResponse])
def list_item_type_defaults(db: Session = Depends(get_db)):
    """Best-before, thawing and reheating defaults per item type"""
    return InventoryService.list_type_defaults(db)
