"""
Domain enums for the freezer inventory.
Contains all enumeration types used across the domain models.
"""

import enum


class ItemType(str, enum.Enum):
    """Inventory item types, stored by their single-letter code"""

    MEAL = "M"
    PROTEIN = "P"
    SAUCE = "S"
    SIDE = "B"
    BASE = "Z"
    BREAKFAST = "F"
    DESSERT = "D"
    MISC = "X"

    @classmethod
    def for_role(cls, role: str) -> "ItemType":
        """Map a role / box type name (e.g. ``PROTEIN``) to its item type.

        Unknown roles fall back to MISC.
        """
        try:
            return cls[(role or "").strip().upper()]
        except KeyError:
            return cls.MISC

    @property
    def role(self) -> str:
        return self.name


class InventoryStatus(str, enum.Enum):
    """Lifecycle status of a physical inventory item"""

    IN_FREEZER = "IN_FREEZER"
    TAKEN_OUT = "TAKEN_OUT"


class StorageType(str, enum.Enum):
    """How an item is stored in the freezer"""

    BOX = "BOX"
    FREE = "FREE"
    FREEZER_BAG = "FREEZER_BAG"
    VACUUM_BAG = "VACUUM_BAG"


class BagKind(str, enum.Enum):
    """Disposable bags that never occupy a container row"""

    FREEZER_BAG = "FREEZER_BAG"
    VACUUM_BAG = "VACUUM_BAG"


class SourceType(str, enum.Enum):
    """Where a set component comes from"""

    RECIPE = "RECIPE"
    FREE = "FREE"


class InventoryEventType(str, enum.Enum):
    """Entries of the append-only inventory event log"""

    CREATED = "CREATED"
    STATUS_CHANGED = "STATUS_CHANGED"
