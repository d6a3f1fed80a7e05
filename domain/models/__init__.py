"""
Domain models package - SQLAlchemy ORM models.
"""

from domain.models.database import (
    Base,
    engine,
    SessionLocal,
    init_database,
    get_db_session,
    unit_of_work,
)
from domain.models.inventory import (
    ItemTypeDefault,
    IdCounter,
    InventoryItem,
    InventoryEvent,
)
from domain.models.container import Container
from domain.models.recipe import Recipe
from domain.models.meal_set import MealSet, MealSetRequirement, MealSetItem
from domain.models.set_plan import SetPlan, SetComponent, SetBox, SetBoxComponent

__all__ = [
    # Database
    "Base",
    "engine",
    "SessionLocal",
    "init_database",
    "get_db_session",
    "unit_of_work",
    # Inventory models
    "ItemTypeDefault",
    "IdCounter",
    "InventoryItem",
    "InventoryEvent",
    # Container models
    "Container",
    # Recipe models
    "Recipe",
    # Meal set models
    "MealSet",
    "MealSetRequirement",
    "MealSetItem",
    # Set builder models
    "SetPlan",
    "SetComponent",
    "SetBox",
    "SetBoxComponent",
]
