"""Container registry routes"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
import logging
from typing import List

from api.dependencies import get_db
from domain.schemas.container_schemas import (
    ContainerCreate,
    ContainerResponse,
    ContainerUpdate,
)
from services.container_service import ContainerService

router = APIRouter(prefix="/containers", tags=["Containers"])
logger = logging.getLogger("freezer.api.containers")


@router.get("", response_model=List[ContainerResponse])
def list_containers(
    active: str = Query("1", pattern="^(1|0|all)$"),
    free: bool = Query(False, description="Free containers plus the disposable bags"),
    db: Session = Depends(get_db),
):
    """List containers by active flag, or the ones available for packing"""
    return ContainerService.list_containers(db, active=active, free=free)


@router.post("", response_model=ContainerResponse, status_code=status.HTTP_201_CREATED)
def create_container(payload: ContainerCreate, db: Session = Depends(get_db)):
    container = ContainerService.create_container(db, payload)
    return ContainerResponse.model_validate(container)


@router.patch("/{container_id}", response_model=ContainerResponse)
def update_container(
    container_id: int, payload: ContainerUpdate, db: Session = Depends(get_db)
):
    """Change type, note or active flag; the in-use flag is managed by packing"""
    container = ContainerService.update_container(db, container_id, payload)
    return ContainerResponse.model_validate(container)
