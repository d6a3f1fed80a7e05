from pydantic import BaseModel, Field
from typing import Optional


class ContainerCreate(BaseModel):
    """Schema for registering a reusable container"""

    container_code: Optional[str] = Field(None, max_length=32)
    container_type_id: Optional[int] = None
    note: Optional[str] = None
    is_active: bool = True


class ContainerUpdate(BaseModel):
    """Partial container update; only fields present in the body are applied"""

    container_type_id: Optional[int] = None
    note: Optional[str] = None
    is_active: Optional[bool] = None


class ContainerResponse(BaseModel):
    """A persisted container, or a virtual bag (no numeric id, ``bag_kind`` set)"""

    id: Optional[int] = None
    container_code: str
    container_type_id: Optional[int] = None
    is_active: bool
    in_use: bool
    note: Optional[str] = None
    bag_kind: Optional[str] = None

    model_config = {"from_attributes": True}
