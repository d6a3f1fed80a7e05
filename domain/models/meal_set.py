"""
Meal-set models: a meal recipe made of several component roles, the role
requirements, and the inventory items assigned to each role.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from domain.models.database import Base


class MealSet(Base):
    """A meal made from several component roles"""

    __tablename__ = "meal_sets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    set_code = Column(String(32), unique=True, nullable=False)
    name = Column(String(255), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    requirements = relationship(
        "MealSetRequirement",
        back_populates="meal_set",
        cascade="all, delete-orphan",
        order_by="MealSetRequirement.id",
    )
    items = relationship(
        "MealSetItem", back_populates="meal_set", cascade="all, delete-orphan"
    )


class MealSetRequirement(Base):
    """How many items of one role a single meal needs"""

    __tablename__ = "meal_set_requirements"

    id = Column(Integer, primary_key=True, autoincrement=True)
    meal_set_id = Column(
        Integer, ForeignKey("meal_sets.id", ondelete="CASCADE"), nullable=False
    )
    required_type = Column(String(16), nullable=False)
    required_count = Column(Integer, nullable=False, default=1)
    require_veggie = Column(Boolean, nullable=False, default=False)

    meal_set = relationship("MealSet", back_populates="requirements")

    __table_args__ = (
        CheckConstraint("required_count >= 1", name="ck_requirement_count_positive"),
    )


class MealSetItem(Base):
    """Assignment of an inventory item to a meal set under a role"""

    __tablename__ = "meal_set_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    meal_set_id = Column(
        Integer, ForeignKey("meal_sets.id", ondelete="CASCADE"), nullable=False
    )
    inventory_item_id = Column(
        Integer, ForeignKey("inventory_items.id"), nullable=False
    )
    role_type = Column(String(16), nullable=False)

    meal_set = relationship("MealSet", back_populates="items")
    item = relationship("InventoryItem")

    __table_args__ = (
        UniqueConstraint(
            "meal_set_id", "inventory_item_id", name="uq_meal_set_item"
        ),
    )
