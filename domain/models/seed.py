"""
Reference rows every installation needs: item-type defaults and id counters.
"""

import logging

from sqlalchemy.orm import Session

from domain.enums import ItemType
from domain.models.inventory import IdCounter, ItemTypeDefault

logger = logging.getLogger("freezer.seed")

# item_type -> (note, best_before_days, thaw_method, reheat_minutes)
DEFAULT_ITEM_TYPES = {
    ItemType.MEAL: ("Complete meal", 90, "FRIDGE_OVERNIGHT", 12),
    ItemType.PROTEIN: ("Meat, fish, tofu", 120, "FRIDGE_OVERNIGHT", 10),
    ItemType.SAUCE: ("Sauces and soups", 90, "POT", 8),
    ItemType.SIDE: ("Side dishes", 90, "MICROWAVE", 5),
    ItemType.BASE: ("Ingredients and stocks", 180, "NONE", None),
    ItemType.BREAKFAST: ("Breakfast", 60, "ROOM_TEMPERATURE", None),
    ItemType.DESSERT: ("Desserts", 90, "FRIDGE", None),
    ItemType.MISC: ("Everything else", 90, "NONE", None),
}


def seed_reference_data(db: Session) -> None:
    """Insert missing type defaults and counters; existing rows are left alone."""
    existing_defaults = {row.item_type for row in db.query(ItemTypeDefault).all()}
    existing_counters = {row.item_type for row in db.query(IdCounter).all()}

    for item_type, (note, days, thaw, reheat) in DEFAULT_ITEM_TYPES.items():
        if item_type.value not in existing_defaults:
            db.add(
                ItemTypeDefault(
                    item_type=item_type.value,
                    note=note,
                    best_before_days=days,
                    thaw_method=thaw,
                    reheat_minutes=reheat,
                )
            )
            logger.info(f"Seeded defaults for item type {item_type.value}")
    db.flush()

    for item_type in DEFAULT_ITEM_TYPES:
        if item_type.value not in existing_counters:
            db.add(IdCounter(item_type=item_type.value, next_number=1))
    db.flush()
