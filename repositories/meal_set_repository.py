"""
Meal Set Repository - meal sets, their role requirements and assigned items
"""

from typing import List, Optional
from sqlalchemy.orm import Session

from domain.enums import InventoryStatus
from domain.models import InventoryItem, MealSet, MealSetItem, MealSetRequirement
from repositories.base import BaseRepository


class MealSetRepository(BaseRepository[MealSet]):
    """Repository for meal set data access"""

    def __init__(self, db: Session):
        super().__init__(db, MealSet)

    def list_active(self, q: str = "", limit: int = 20, offset: int = 0) -> List[MealSet]:
        query = self.db.query(MealSet).filter(MealSet.is_active.is_(True))
        if q:
            query = query.filter(MealSet.name.ilike(f"%{q}%"))
        return query.order_by(MealSet.name.asc()).offset(offset).limit(limit).all()

    def get_active(self, meal_set_id: int) -> Optional[MealSet]:
        return (
            self.db.query(MealSet)
            .filter(MealSet.id == meal_set_id, MealSet.is_active.is_(True))
            .first()
        )

    def get_by_code(self, set_code: str) -> Optional[MealSet]:
        return self.db.query(MealSet).filter(MealSet.set_code == set_code).first()

    def load_requirements(self, meal_set_id: int) -> List[MealSetRequirement]:
        return (
            self.db.query(MealSetRequirement)
            .filter(MealSetRequirement.meal_set_id == meal_set_id)
            .order_by(MealSetRequirement.id)
            .all()
        )

    def load_available_items(
        self, meal_set_id: int, role: str, require_veggie: bool
    ) -> List[InventoryItem]:
        """
        Items in the freezer assigned to ``role`` of the meal set, oldest first.

        Ordered by frozen date, then id, so the order is deterministic.
        """
        query = (
            self.db.query(InventoryItem)
            .join(MealSetItem, MealSetItem.inventory_item_id == InventoryItem.id)
            .filter(
                MealSetItem.meal_set_id == meal_set_id,
                MealSetItem.role_type == role,
                InventoryItem.status == InventoryStatus.IN_FREEZER,
            )
        )
        if require_veggie:
            query = query.filter(InventoryItem.is_veggie.is_(True))
        return query.order_by(
            InventoryItem.frozen_at.asc(), InventoryItem.id.asc()
        ).all()

    def get_assignment(self, meal_set_id: int, inventory_item_id: int) -> Optional[MealSetItem]:
        return (
            self.db.query(MealSetItem)
            .filter(
                MealSetItem.meal_set_id == meal_set_id,
                MealSetItem.inventory_item_id == inventory_item_id,
            )
            .first()
        )
