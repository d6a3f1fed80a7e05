"""
Domain schemas package - Pydantic models for validation.
"""

from domain.schemas.inventory_schemas import (
    InventoryItemCreate,
    InventoryItemResponse,
    TakeOutRequest,
    TakeOutResponse,
    ItemTypeDefaultResponse,
)
from domain.schemas.container_schemas import (
    ContainerCreate,
    ContainerUpdate,
    ContainerResponse,
)
from domain.schemas.meal_set_schemas import (
    MealSetFilters,
    RequirementCreate,
    MealSetCreate,
    MealSetItemAssign,
    MealSetTakeOutRequest,
    MealSetSummary,
)
from domain.schemas.set_schemas import (
    ComponentInput,
    SetCreateRequest,
    SetUpdateRequest,
    BoxRequest,
    SetComponentResponse,
    SetBoxResponse,
    SetResponse,
    SetListItem,
    PackedBoxResponse,
)

__all__ = [
    # Inventory schemas
    "InventoryItemCreate",
    "InventoryItemResponse",
    "TakeOutRequest",
    "TakeOutResponse",
    "ItemTypeDefaultResponse",
    # Container schemas
    "ContainerCreate",
    "ContainerUpdate",
    "ContainerResponse",
    # Meal set schemas
    "MealSetFilters",
    "RequirementCreate",
    "MealSetCreate",
    "MealSetItemAssign",
    "MealSetTakeOutRequest",
    "MealSetSummary",
    # Set builder schemas
    "ComponentInput",
    "SetCreateRequest",
    "SetUpdateRequest",
    "BoxRequest",
    "SetComponentResponse",
    "SetBoxResponse",
    "SetResponse",
    "SetListItem",
    "PackedBoxResponse",
]
