"""Set builder routes: planning components and packing boxes"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
import logging
from typing import List

from api.dependencies import get_db
from app.config import settings
from domain.schemas.set_schemas import (
    BoxRequest,
    PackedBoxResponse,
    SetCreateRequest,
    SetListItem,
    SetResponse,
    SetUpdateRequest,
)
from services.set_builder_service import SetBuilderService

router = APIRouter(prefix="/sets", tags=["Sets"])
logger = logging.getLogger("freezer.api.sets")


@router.get("", response_model=List[SetListItem])
def list_sets(
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    """Sets, most recently updated first"""
    return [
        SetListItem(
            id=set_plan.id,
            name=set_plan.name,
            note=set_plan.note,
            updated_at=set_plan.updated_at,
            box_count=box_count,
        )
        for set_plan, box_count in SetBuilderService.list_sets(db, limit, offset)
    ]


@router.post("", response_model=SetResponse, status_code=status.HTTP_201_CREATED)
def create_set(payload: SetCreateRequest, db: Session = Depends(get_db)):
    """
    Plan a new set.

    Components that lack a role, a valid source, or the fields their source
    requires are dropped; at least one must remain.
    """
    set_plan = SetBuilderService.create_set(db, payload)
    return SetResponse.model_validate(set_plan)


@router.get("/{set_id}", response_model=SetResponse)
def get_set(set_id: int, db: Session = Depends(get_db)):
    return SetResponse.model_validate(SetBuilderService.get_set(db, set_id))


@router.patch("/{set_id}", response_model=SetResponse)
def update_set(set_id: int, payload: SetUpdateRequest, db: Session = Depends(get_db)):
    """Replace name, note or the whole component list of a set"""
    set_plan = SetBuilderService.update_set(db, set_id, payload)
    return SetResponse.model_validate(set_plan)


@router.post(
    "/{set_id}/boxes",
    response_model=List[PackedBoxResponse],
    status_code=status.HTTP_201_CREATED,
)
def pack_boxes(set_id: int, boxes: List[BoxRequest], db: Session = Depends(get_db)):
    """
    Pack the set into boxes in one transaction.

    Every box yields one inventory item; real containers are flagged in use.
    If any container is unavailable nothing is written.
    """
    packed = SetBuilderService.pack_boxes(db, set_id, boxes)
    return [
        PackedBoxResponse(
            id=p.box.id,
            box_code=p.box.box_code,
            box_type=p.box.box_type,
            container_id=p.box.container_id,
            storage_type=p.storage_type,
            kcal_total=p.box.kcal_total,
            inventory_item_id=p.inventory_item_id,
            id_code=p.id_code,
        )
        for p in packed
    ]
