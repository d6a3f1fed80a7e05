"""
Meal-Set Availability Engine.

Computes how many complete meals a meal set can currently be assembled into,
which items would be consumed (oldest first), and the dietary and expiry
flags of the resulting meal.
"""

from datetime import date
from typing import List, Optional, Sequence, Tuple
from sqlalchemy.orm import Session
import logging

from domain.models import InventoryItem, MealSet, MealSetRequirement
from domain.schemas.inventory_schemas import InventoryItemResponse
from domain.schemas.meal_set_schemas import MealSetFilters, MealSetSummary
from repositories import MealSetRepository
from services.inventory_service import expiring_cutoff

logger = logging.getLogger("freezer.availability")


def count_complete_meals(
    candidates: Sequence[Tuple[MealSetRequirement, Sequence[InventoryItem]]],
) -> int:
    """Minimum over roles of floor(candidates / required_count); 0 if any role is short"""
    complete = None
    for requirement, available in candidates:
        required = max(1, requirement.required_count)
        possible = len(available) // required
        complete = possible if complete is None else min(complete, possible)
        if complete == 0:
            break
    return complete or 0


def select_fifo(
    candidates: Sequence[Tuple[MealSetRequirement, Sequence[InventoryItem]]],
    complete_count: int,
) -> List[InventoryItem]:
    """Take exactly ``required_count * complete_count`` oldest items per role"""
    selected: List[InventoryItem] = []
    for requirement, available in candidates:
        take = max(1, requirement.required_count) * complete_count
        selected.extend(available[:take])
    return selected


class MealSetAvailabilityService:
    @staticmethod
    def compute_availability(
        db: Session,
        meal_set: MealSet,
        filters: Optional[MealSetFilters] = None,
        include_items: bool = False,
        today: Optional[date] = None,
    ) -> Optional[MealSetSummary]:
        """
        Build the availability summary of ``meal_set``.

        A set without requirements is reported with ``complete_count = 0``.
        Otherwise the summary is None when no complete meal can be assembled,
        or when the ``expiring`` / ``veggie`` filters reject the selection.

        Candidates for a role must be veggie if the requirement or the
        ``veggie`` filter asks for it. Roles are evaluated in order and the
        scan stops at the first role with no complete meal, so no items are
        picked from roles that were not reached.
        """
        filters = filters or MealSetFilters()
        repo = MealSetRepository(db)
        requirements = repo.load_requirements(meal_set.id)

        if not requirements:
            return MealSetSummary(
                id=meal_set.id,
                set_code=meal_set.set_code,
                name=meal_set.name,
                complete_count=0,
                items=[] if include_items else None,
            )

        candidates = []
        for requirement in requirements:
            needs_veggie = requirement.require_veggie or filters.veggie
            available = repo.load_available_items(
                meal_set.id, requirement.required_type, needs_veggie
            )
            candidates.append((requirement, available))
            if len(available) < max(1, requirement.required_count):
                break

        complete_count = count_complete_meals(candidates)
        if complete_count < 1:
            return None

        selected = select_fifo(candidates, complete_count)
        cutoff = expiring_cutoff(today)

        all_veggie = all(item.is_veggie for item in selected)
        all_vegan = all(item.is_vegan for item in selected)
        has_expiring = any(
            item.computed_best_before is not None
            and item.computed_best_before <= cutoff
            for item in selected
        )

        if filters.expiring and not has_expiring:
            return None
        if filters.veggie and not all_veggie:
            return None

        return MealSetSummary(
            id=meal_set.id,
            set_code=meal_set.set_code,
            name=meal_set.name,
            complete_count=complete_count,
            fifo_ids=[item.id_code for item in selected],
            is_veggie=all_veggie,
            is_vegan=all_vegan,
            is_expiring=has_expiring,
            items=(
                [InventoryItemResponse.model_validate(i) for i in selected]
                if include_items
                else None
            ),
        )

    @staticmethod
    def list_meal_sets(
        db: Session,
        filters: Optional[MealSetFilters] = None,
        limit: int = 20,
        offset: int = 0,
        today: Optional[date] = None,
    ) -> List[MealSetSummary]:
        """Active meal sets by name; sets without a complete meal are dropped"""
        filters = filters or MealSetFilters()
        result = []
        for meal_set in MealSetRepository(db).list_active(filters.q.strip(), limit, offset):
            summary = MealSetAvailabilityService.compute_availability(
                db, meal_set, filters, today=today
            )
            if summary is not None and summary.complete_count >= 1:
                result.append(summary)
        return result

    @staticmethod
    def get_meal_set(
        db: Session,
        meal_set_id: int,
        filters: Optional[MealSetFilters] = None,
        today: Optional[date] = None,
    ) -> Optional[MealSetSummary]:
        """Summary with the full selected item records, or None when no meal is available"""
        meal_set = MealSetRepository(db).get_active(meal_set_id)
        if meal_set is None:
            return None
        summary = MealSetAvailabilityService.compute_availability(
            db, meal_set, filters, include_items=True, today=today
        )
        if summary is None or summary.complete_count < 1:
            return None
        return summary

    @staticmethod
    def choose_fifo_items_for_single_take_out(db: Session, meal_set_id: int) -> List[int]:
        """
        Ids of the oldest items making up exactly one meal.

        Only the requirements' own veggie flags apply. Returns an empty list
        when the set has no requirements or any role is short.
        """
        repo = MealSetRepository(db)
        requirements = repo.load_requirements(meal_set_id)
        if not requirements:
            return []

        selected: List[int] = []
        for requirement in requirements:
            available = repo.load_available_items(
                meal_set_id, requirement.required_type, requirement.require_veggie
            )
            required = max(1, requirement.required_count)
            if len(available) < required:
                logger.debug(
                    f"Meal set {meal_set_id}: role {requirement.required_type} "
                    f"has {len(available)} of {required} items"
                )
                return []
            selected.extend(item.id for item in available[:required])
        return selected
