"""
Inventory Repository - Data access layer for freezer items
"""

from datetime import date, datetime, timezone
from typing import List, Optional, Sequence

from sqlalchemy import or_
from sqlalchemy.orm import Session

from domain.enums import InventoryEventType, InventoryStatus, ItemType
from domain.models import IdCounter, InventoryEvent, InventoryItem
from repositories.base import BaseRepository

MEAL_TYPES = [ItemType.MEAL.value]
INGREDIENT_TYPES = [ItemType.BASE.value]


class InventoryRepository(BaseRepository[InventoryItem]):
    """Repository for inventory item data access"""

    def __init__(self, db: Session):
        super().__init__(db, InventoryItem)

    def get_by_code(self, id_code: str) -> Optional[InventoryItem]:
        return (
            self.db.query(InventoryItem)
            .filter(InventoryItem.id_code == id_code)
            .first()
        )

    def lock_items(self, item_ids: Sequence[int]) -> List[InventoryItem]:
        """Select the given items FOR UPDATE"""
        if not item_ids:
            return []
        return (
            self.db.query(InventoryItem)
            .filter(InventoryItem.id.in_(list(item_ids)))
            .order_by(InventoryItem.id)
            .with_for_update(of=InventoryItem)
            .populate_existing()
            .all()
        )

    def list_items(
        self,
        view: str,
        q: str = "",
        veggie: bool = False,
        expiring_until: Optional[date] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[InventoryItem]:
        """
        List items in the freezer, oldest first.

        ``view`` selects meals (type M), ingredients (type Z) or single
        components (everything else). When ``expiring_until`` is given only
        items whose computed best-before date is on or before it are returned.
        """
        query = self.db.query(InventoryItem).filter(
            InventoryItem.status == InventoryStatus.IN_FREEZER
        )

        if view == "meals":
            query = query.filter(InventoryItem.item_type.in_(MEAL_TYPES))
        elif view == "ingredient":
            query = query.filter(InventoryItem.item_type.in_(INGREDIENT_TYPES))
        else:
            query = query.filter(
                InventoryItem.item_type.notin_(MEAL_TYPES + INGREDIENT_TYPES)
            )

        if q:
            pattern = f"%{q}%"
            query = query.filter(
                or_(InventoryItem.name.ilike(pattern), InventoryItem.id_code.ilike(pattern))
            )
        if veggie:
            query = query.filter(InventoryItem.is_veggie.is_(True))

        query = query.order_by(InventoryItem.frozen_at.asc(), InventoryItem.id.asc())

        if expiring_until is None:
            return query.offset(offset).limit(limit).all()

        # computed best-before depends on per-type shelf life, evaluated in Python
        expiring = [
            item
            for item in query.all()
            if item.computed_best_before is not None
            and item.computed_best_before <= expiring_until
        ]
        return expiring[offset : offset + limit]

    def mark_taken_out(self, items: Sequence[InventoryItem]) -> None:
        """Flip items to TAKEN_OUT and log one event per item"""
        now = datetime.now(timezone.utc)
        for item in items:
            item.status = InventoryStatus.TAKEN_OUT
            item.status_changed_at = now
            self.db.add(
                InventoryEvent(
                    inventory_item_id=item.id,
                    event_type=InventoryEventType.STATUS_CHANGED,
                    from_status=InventoryStatus.IN_FREEZER.value,
                    to_status=InventoryStatus.TAKEN_OUT.value,
                )
            )
        self.db.flush()

    def add_created_event(self, item: InventoryItem) -> InventoryEvent:
        event = InventoryEvent(
            inventory_item_id=item.id,
            event_type=InventoryEventType.CREATED,
            to_status=InventoryStatus.IN_FREEZER.value,
        )
        self.db.add(event)
        self.db.flush()
        return event

    def lock_counter(self, item_type: str) -> IdCounter:
        """Lock the id counter row for ``item_type``, creating it on first use"""
        counter = (
            self.db.query(IdCounter)
            .filter(IdCounter.item_type == item_type)
            .with_for_update()
            .populate_existing()
            .first()
        )
        if counter is None:
            counter = IdCounter(item_type=item_type, next_number=1)
            self.db.add(counter)
            self.db.flush()
        return counter
