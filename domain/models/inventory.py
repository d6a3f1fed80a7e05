"""
Inventory models: physical freezer items, their type defaults, code counters
and the append-only event log.
"""

from datetime import date, timedelta
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from domain.enums import InventoryEventType, InventoryStatus, StorageType
from domain.models.database import Base


def _values(enum_cls):
    return [member.value for member in enum_cls]


class ItemTypeDefault(Base):
    """Per-type defaults (shelf life, thawing, reheating)"""

    __tablename__ = "item_type_defaults"

    item_type = Column(String(1), primary_key=True)
    note = Column(String(255))
    best_before_days = Column(Integer, nullable=False)
    thaw_method = Column(String(32), nullable=False, default="NONE")
    reheat_minutes = Column(Integer)


class IdCounter(Base):
    """Running counter behind the sequential inventory ``id_code``"""

    __tablename__ = "id_counters"

    item_type = Column(
        String(1), ForeignKey("item_type_defaults.item_type"), primary_key=True
    )
    next_number = Column(Integer, nullable=False, default=1)


class InventoryItem(Base):
    """A physical item in the freezer"""

    __tablename__ = "inventory_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    id_code = Column(String(16), unique=True, nullable=False)
    item_type = Column(
        String(1), ForeignKey("item_type_defaults.item_type"), nullable=False
    )
    name = Column(String(255), nullable=False)
    recipe_id = Column(Integer, ForeignKey("recipes.id", ondelete="SET NULL"))
    is_veggie = Column(Boolean, nullable=False, default=False)
    is_vegan = Column(Boolean, nullable=False, default=False)
    portion_text = Column(String(50))
    weight_g = Column(Integer)
    volume_ml = Column(Integer)
    kcal = Column(Integer)
    frozen_at = Column(Date, nullable=False)
    best_before_at = Column(Date)
    storage_location = Column(String(255))
    prep_notes = Column(Text)
    thaw_method = Column(String(32))
    reheat_minutes = Column(Integer)
    storage_type = Column(
        SQLEnum(StorageType, native_enum=False, values_callable=_values, length=16),
        nullable=False,
        default=StorageType.BOX,
    )
    container_id = Column(Integer, ForeignKey("containers.id"))
    status = Column(
        SQLEnum(InventoryStatus, native_enum=False, values_callable=_values, length=16),
        nullable=False,
        default=InventoryStatus.IN_FREEZER,
    )
    status_changed_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    type_default = relationship("ItemTypeDefault", lazy="joined")
    container = relationship("Container", lazy="joined")
    events = relationship(
        "InventoryEvent", back_populates="item", order_by="InventoryEvent.id"
    )

    __table_args__ = (
        CheckConstraint(
            "container_id IS NULL OR storage_type = 'BOX'",
            name="ck_inventory_container_only_in_box",
        ),
    )

    @property
    def computed_best_before(self) -> Optional[date]:
        """Explicit best-before date, else frozen date plus the type's shelf life."""
        if self.best_before_at is not None:
            return self.best_before_at
        if self.frozen_at is None or self.type_default is None:
            return None
        return self.frozen_at + timedelta(days=self.type_default.best_before_days)

    @property
    def container_code(self) -> Optional[str]:
        return self.container.container_code if self.container is not None else None


class InventoryEvent(Base):
    """Append-only log of inventory transitions"""

    __tablename__ = "inventory_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    inventory_item_id = Column(
        Integer, ForeignKey("inventory_items.id"), nullable=False, index=True
    )
    event_type = Column(
        SQLEnum(
            InventoryEventType, native_enum=False, values_callable=_values, length=32
        ),
        nullable=False,
    )
    from_status = Column(String(16))
    to_status = Column(String(16))
    occurred_at = Column(DateTime(timezone=True), server_default=func.now())

    item = relationship("InventoryItem", back_populates="events")
