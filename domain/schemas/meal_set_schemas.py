from pydantic import BaseModel, Field
from typing import Optional, List

from domain.schemas.inventory_schemas import InventoryItemResponse


class MealSetFilters(BaseModel):
    """Listing filters for meal sets"""

    q: str = ""
    veggie: bool = False
    expiring: bool = False


class RequirementCreate(BaseModel):
    """One role a meal needs, e.g. 2 x PROTEIN"""

    required_type: str = Field(..., min_length=1, max_length=16)
    required_count: int = Field(1, ge=1)
    require_veggie: bool = False


class MealSetCreate(BaseModel):
    """Schema for defining a meal set"""

    set_code: str = Field(..., min_length=1, max_length=32)
    name: str = Field(..., min_length=1, max_length=255)
    requirements: List[RequirementCreate] = Field(default_factory=list)


class MealSetItemAssign(BaseModel):
    """Assign an inventory item to a meal set under a role"""

    inventory_item_id: int
    role_type: str = Field(..., min_length=1, max_length=16)


class MealSetTakeOutRequest(BaseModel):
    """Explicit item ids; when empty the oldest items for one meal are chosen"""

    item_ids: Optional[List[int]] = None


class MealSetSummary(BaseModel):
    """Availability of one meal set"""

    id: int
    set_code: str
    name: str
    complete_count: int
    fifo_ids: List[str] = Field(default_factory=list)
    is_veggie: bool = False
    is_vegan: bool = False
    is_expiring: bool = False
    items: Optional[List[InventoryItemResponse]] = None
