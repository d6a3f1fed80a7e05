"""
Recipe catalog rows referenced by set components and inventory items.
"""

from sqlalchemy import Boolean, Column, Integer, String, Text

from domain.models.database import Base


class Recipe(Base):
    """Recipe with per-portion calories"""

    __tablename__ = "recipes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), unique=True, nullable=False)
    recipe_type = Column(String(16))
    kcal_per_portion = Column(Integer)
    yield_portions = Column(Integer)
    is_veggie = Column(Boolean, nullable=False, default=False)
    is_vegan = Column(Boolean, nullable=False, default=False)
    default_best_before_days = Column(Integer)
    description = Column(Text)
