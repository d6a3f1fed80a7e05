"""Meal set availability and take-out routes"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
import logging
from typing import List, Optional

from api.dependencies import get_db
from app.config import settings
from app.exceptions import NotFoundError
from domain.schemas.inventory_schemas import TakeOutResponse
from domain.schemas.meal_set_schemas import (
    MealSetCreate,
    MealSetFilters,
    MealSetItemAssign,
    MealSetSummary,
    MealSetTakeOutRequest,
)
from services.availability_service import MealSetAvailabilityService
from services.meal_set_service import MealSetService

router = APIRouter(prefix="/meal_sets", tags=["Meal Sets"])
logger = logging.getLogger("freezer.api.meal_sets")


@router.get("", response_model=List[MealSetSummary])
def list_meal_sets(
    q: str = Query("", description="Case-insensitive substring of the name"),
    veggie: bool = Query(False, description="Only meals made of veggie items"),
    expiring: bool = Query(False, description="Only meals with an expiring item"),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    """
    Active meal sets that can currently be assembled at least once.

    Each entry carries the number of complete meals, the ``id_code`` values
    of the items that would be used (oldest first) and the dietary and
    expiry flags.
    """
    filters = MealSetFilters(q=q, veggie=veggie, expiring=expiring)
    return MealSetAvailabilityService.list_meal_sets(db, filters, limit, offset)


@router.post("", response_model=MealSetSummary, status_code=status.HTTP_201_CREATED)
def create_meal_set(payload: MealSetCreate, db: Session = Depends(get_db)):
    """Define a meal set with its role requirements"""
    meal_set = MealSetService.create_meal_set(db, payload)
    summary = MealSetAvailabilityService.compute_availability(db, meal_set)
    if summary is None:
        # a fresh set has no assigned items yet
        summary = MealSetSummary(
            id=meal_set.id,
            set_code=meal_set.set_code,
            name=meal_set.name,
            complete_count=0,
        )
    return summary


@router.get("/{meal_set_id}", response_model=MealSetSummary)
def get_meal_set(meal_set_id: int, db: Session = Depends(get_db)):
    """Availability of one meal set, including the selected item records"""
    summary = MealSetAvailabilityService.get_meal_set(db, meal_set_id)
    if summary is None:
        raise NotFoundError("not_found", f"Meal set {meal_set_id} not available")
    return summary


@router.post("/{meal_set_id}/items", status_code=status.HTTP_201_CREATED)
def assign_item(
    meal_set_id: int, payload: MealSetItemAssign, db: Session = Depends(get_db)
):
    """Make an inventory item a candidate for a role of the meal set"""
    assignment = MealSetService.assign_item(db, meal_set_id, payload)
    return {
        "meal_set_id": assignment.meal_set_id,
        "inventory_item_id": assignment.inventory_item_id,
        "role_type": assignment.role_type,
    }


@router.post("/{meal_set_id}/takeout", response_model=TakeOutResponse)
def take_out_meal(
    meal_set_id: int,
    payload: Optional[MealSetTakeOutRequest] = None,
    db: Session = Depends(get_db),
):
    """
    Take one meal out of the freezer.

    Without ``item_ids`` the oldest items for exactly one meal are chosen.
    """
    ids = MealSetService.take_out(
        db, meal_set_id, payload.item_ids if payload is not None else None
    )
    return TakeOutResponse(item_ids=ids)
