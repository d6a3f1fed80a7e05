"""API routes package"""

from . import health, inventory, containers, meal_sets, sets

__all__ = ["health", "inventory", "containers", "meal_sets", "sets"]
