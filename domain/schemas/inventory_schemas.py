from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime

from domain.enums import InventoryStatus, ItemType, StorageType


class InventoryItemCreate(BaseModel):
    """Schema for creating an inventory item directly.

    ``item_type``, ``name`` and ``frozen_at`` are checked by the service so
    that a missing value is reported as ``missing_field``.
    """

    item_type: Optional[ItemType] = None
    name: Optional[str] = None
    frozen_at: Optional[date] = None
    id_code: Optional[str] = Field(None, max_length=16)
    recipe_id: Optional[int] = None
    is_veggie: bool = False
    is_vegan: bool = False
    portion_text: Optional[str] = None
    weight_g: Optional[int] = Field(None, ge=0)
    volume_ml: Optional[int] = Field(None, ge=0)
    kcal: Optional[int] = Field(None, ge=0)
    best_before_at: Optional[date] = None
    storage_location: Optional[str] = None
    prep_notes: Optional[str] = None
    thaw_method: Optional[str] = None
    reheat_minutes: Optional[int] = Field(None, ge=0)
    storage_type: Optional[str] = Field(
        None, description="BOX (default), FREE, FREEZER_BAG or VACUUM_BAG"
    )
    container_id: Optional[int] = Field(
        None, description="Only kept when storage_type is BOX"
    )


class InventoryItemResponse(BaseModel):
    """Schema for inventory item response"""

    id: int
    id_code: str
    item_type: str
    name: str
    recipe_id: Optional[int] = None
    is_veggie: bool
    is_vegan: bool
    portion_text: Optional[str] = None
    kcal: Optional[int] = None
    frozen_at: date
    best_before_at: Optional[date] = None
    computed_best_before: Optional[date] = None
    thaw_method: Optional[str] = None
    reheat_minutes: Optional[int] = None
    storage_type: StorageType
    container_id: Optional[int] = None
    container_code: Optional[str] = None
    status: InventoryStatus
    status_changed_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class TakeOutRequest(BaseModel):
    """Explicit list of inventory item ids to take out"""

    item_ids: List[int] = Field(default_factory=list)


class TakeOutResponse(BaseModel):
    """Ids of the items that are now TAKEN_OUT"""

    success: bool = True
    item_ids: List[int]


class ItemTypeDefaultResponse(BaseModel):
    """Type defaults with the role (box type) name of the type"""

    item_type: str
    box_type: str
    note: Optional[str] = None
    best_before_days: int
    thaw_method: str
    reheat_minutes: Optional[int] = None
