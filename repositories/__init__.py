"""
Repositories package - Data access layer.
"""

from repositories.base import BaseRepository
from repositories.inventory_repository import InventoryRepository
from repositories.item_type_default_repository import ItemTypeDefaultRepository
from repositories.container_repository import ContainerRepository
from repositories.recipe_repository import RecipeRepository
from repositories.meal_set_repository import MealSetRepository
from repositories.set_repository import SetRepository

__all__ = [
    "BaseRepository",
    "InventoryRepository",
    "ItemTypeDefaultRepository",
    "ContainerRepository",
    "RecipeRepository",
    "MealSetRepository",
    "SetRepository",
]
