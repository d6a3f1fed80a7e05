from pydantic import BaseModel, Field
from typing import Optional, List, Union
from datetime import datetime

from domain.enums import SourceType, StorageType


class ComponentInput(BaseModel):
    """A planned component as sent by the client.

    Components that do not validate are dropped rather than rejected.
    """

    component_type: Optional[str] = None
    source_type: Optional[str] = None
    recipe_id: Optional[int] = None
    free_text: Optional[str] = None
    amount_text: Optional[str] = None
    kcal_total: Optional[int] = Field(None, ge=0)


class SetCreateRequest(BaseModel):
    """Schema for creating a set"""

    name: Optional[str] = None
    note: Optional[str] = None
    components: List[ComponentInput] = Field(default_factory=list)


class SetUpdateRequest(BaseModel):
    """Schema for updating a set; omitted fields keep their stored values"""

    name: Optional[str] = None
    note: Optional[str] = None
    components: Optional[List[ComponentInput]] = None


class BoxRequest(BaseModel):
    """One box to pack: a container (or bag token) and the components inside"""

    container_id: Union[int, str, None] = Field(
        None,
        description="Container id, FREEZER_BAG / VACUUM_BAG, or legacy -1 / -2",
    )
    box_type: str = Field(..., min_length=1, max_length=16)
    portion_factor: Optional[float] = Field(None, gt=0)
    portion_text: Optional[str] = None
    component_ids: List[int] = Field(default_factory=list)


class SetComponentResponse(BaseModel):
    id: int
    component_type: str
    source_type: SourceType
    recipe_id: Optional[int] = None
    free_text: Optional[str] = None
    amount_text: Optional[str] = None
    kcal_total: Optional[int] = None
    sort_order: int

    model_config = {"from_attributes": True}


class SetBoxResponse(BaseModel):
    id: int
    box_code: str
    box_type: str
    container_id: Optional[int] = None
    portion_factor: Optional[float] = None
    portion_text: Optional[str] = None
    kcal_total: Optional[int] = None
    component_ids: List[int] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class SetResponse(BaseModel):
    id: int
    name: str
    note: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    components: List[SetComponentResponse] = Field(default_factory=list)
    boxes: List[SetBoxResponse] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class SetListItem(BaseModel):
    id: int
    name: str
    note: Optional[str] = None
    updated_at: Optional[datetime] = None
    box_count: int = 0


class PackedBoxResponse(BaseModel):
    """A box created by a packing request and the inventory item bound to it"""

    id: int
    box_code: str
    box_type: str
    container_id: Optional[int] = None
    storage_type: StorageType
    kcal_total: Optional[int] = None
    inventory_item_id: int
    id_code: str
