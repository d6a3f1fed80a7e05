from typing import List, Optional, Sequence
from sqlalchemy.orm import Session
import logging

from app.exceptions import ConflictError, NotFoundError, ServiceValidationError
from domain.models import MealSet, MealSetItem, MealSetRequirement, unit_of_work
from domain.schemas.meal_set_schemas import MealSetCreate, MealSetItemAssign
from repositories import InventoryRepository, MealSetRepository
from services.availability_service import MealSetAvailabilityService
from services.inventory_service import InventoryService

logger = logging.getLogger("freezer.meal_sets")


class MealSetService:
    @staticmethod
    def create_meal_set(db: Session, data: MealSetCreate) -> MealSet:
        """
        Define a meal set and its role requirements.

        Each role may appear once; an item fills at most one role.

        Raises:
            ServiceValidationError: ``duplicate_role``
            ConflictError: ``duplicate_set_code``
        """
        repo = MealSetRepository(db)
        code = data.set_code.strip()
        roles = [r.required_type.strip().upper() for r in data.requirements]
        repeated = sorted({role for role in roles if roles.count(role) > 1})
        if repeated:
            raise ServiceValidationError(
                "duplicate_role",
                "Each role may be required only once per meal set",
                {"roles": repeated},
            )
        if repo.get_by_code(code) is not None:
            raise ConflictError("duplicate_set_code", f"Meal set {code} already exists")

        with unit_of_work(db):
            meal_set = repo.add(MealSet(set_code=code, name=data.name.strip()))
            for role, requirement in zip(roles, data.requirements):
                meal_set.requirements.append(
                    MealSetRequirement(
                        required_type=role,
                        required_count=requirement.required_count,
                        require_veggie=requirement.require_veggie,
                    )
                )
            db.flush()

        logger.info(
            f"Created meal set {code} with {len(data.requirements)} requirement(s)"
        )
        return meal_set

    @staticmethod
    def assign_item(db: Session, meal_set_id: int, data: MealSetItemAssign) -> MealSetItem:
        """Make an inventory item a candidate for one role of a meal set"""
        repo = MealSetRepository(db)
        if repo.get_active(meal_set_id) is None:
            raise NotFoundError("not_found", f"Meal set {meal_set_id} not found")
        if InventoryRepository(db).get_by_id(data.inventory_item_id) is None:
            raise NotFoundError(
                "not_found", f"Inventory item {data.inventory_item_id} not found"
            )
        if repo.get_assignment(meal_set_id, data.inventory_item_id) is not None:
            raise ConflictError(
                "duplicate_assignment",
                f"Item {data.inventory_item_id} already belongs to meal set {meal_set_id}",
            )

        with unit_of_work(db):
            assignment = MealSetItem(
                meal_set_id=meal_set_id,
                inventory_item_id=data.inventory_item_id,
                role_type=data.role_type.strip().upper(),
            )
            db.add(assignment)
            db.flush()
        return assignment

    @staticmethod
    def take_out(
        db: Session, meal_set_id: int, item_ids: Optional[Sequence[int]] = None
    ) -> List[int]:
        """
        Take out one meal of a meal set.

        Without explicit ``item_ids`` the oldest items for a single meal are
        chosen. Status is re-checked under lock by the inventory take-out.

        Raises:
            NotFoundError: ``not_found`` for an unknown set,
                ``no_items_available`` if one meal cannot be assembled
        """
        if MealSetRepository(db).get_active(meal_set_id) is None:
            raise NotFoundError("not_found", f"Meal set {meal_set_id} not found")

        ids = list(item_ids or [])
        if not ids:
            ids = MealSetAvailabilityService.choose_fifo_items_for_single_take_out(
                db, meal_set_id
            )
        if not ids:
            raise NotFoundError(
                "no_items_available", f"No complete meal available for set {meal_set_id}"
            )
        return InventoryService.take_out(db, ids)
