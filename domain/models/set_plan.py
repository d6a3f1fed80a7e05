"""
Set-builder models: a named plan of components that is packed into boxes.
"""

from sqlalchemy import (
    Column,
    DateTime,
    Enum as SQLEnum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from domain.enums import SourceType
from domain.models.database import Base


class SetPlan(Base):
    """A named grouping of planned components"""

    __tablename__ = "sets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    note = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    components = relationship(
        "SetComponent",
        back_populates="set_plan",
        cascade="all, delete-orphan",
        order_by=lambda: [SetComponent.sort_order, SetComponent.id],
    )
    boxes = relationship(
        "SetBox",
        back_populates="set_plan",
        cascade="all, delete-orphan",
        order_by="SetBox.id",
    )


class SetComponent(Base):
    """One planned component: a recipe portion or a free-text item"""

    __tablename__ = "set_components"

    id = Column(Integer, primary_key=True, autoincrement=True)
    set_id = Column(Integer, ForeignKey("sets.id", ondelete="CASCADE"), nullable=False)
    component_type = Column(String(16), nullable=False)
    source_type = Column(
        SQLEnum(
            SourceType,
            native_enum=False,
            values_callable=lambda e: [m.value for m in e],
            length=8,
        ),
        nullable=False,
    )
    recipe_id = Column(Integer, ForeignKey("recipes.id"))
    free_text = Column(String(255))
    amount_text = Column(String(100))
    kcal_total = Column(Integer)
    sort_order = Column(Integer, nullable=False, default=0)

    set_plan = relationship("SetPlan", back_populates="components")


class SetBox(Base):
    """A packed physical unit: one container or bag holding some components"""

    __tablename__ = "set_boxes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    set_id = Column(Integer, ForeignKey("sets.id", ondelete="CASCADE"), nullable=False)
    container_id = Column(Integer, ForeignKey("containers.id"))
    box_code = Column(String(16), nullable=False)
    box_type = Column(String(16), nullable=False)
    portion_factor = Column(Float)
    portion_text = Column(String(50))
    kcal_total = Column(Integer)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    set_plan = relationship("SetPlan", back_populates="boxes")
    component_links = relationship(
        "SetBoxComponent", cascade="all, delete-orphan", order_by="SetBoxComponent.id"
    )

    @property
    def component_ids(self) -> list[int]:
        return [link.set_component_id for link in self.component_links]


class SetBoxComponent(Base):
    """Join row between a box and the components packed into it"""

    __tablename__ = "set_box_components"

    id = Column(Integer, primary_key=True, autoincrement=True)
    set_box_id = Column(
        Integer, ForeignKey("set_boxes.id", ondelete="CASCADE"), nullable=False
    )
    set_component_id = Column(Integer, nullable=False)
