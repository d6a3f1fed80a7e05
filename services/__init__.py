"""Services package - Business logic layer"""

from services.code_service import CodeService
from services.inventory_service import InventoryService
from services.container_service import ContainerService
from services.availability_service import MealSetAvailabilityService
from services.meal_set_service import MealSetService
from services.set_builder_service import SetBuilderService

__all__ = [
    "CodeService",
    "InventoryService",
    "ContainerService",
    "MealSetAvailabilityService",
    "MealSetService",
    "SetBuilderService",
]
