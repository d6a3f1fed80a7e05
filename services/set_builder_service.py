"""
Set Builder - plans components for a set and packs them into boxes.

Packing follows "optimistic plan, pessimistic commit": boxes are validated
against the stored plan without locks, then every referenced container is
locked and re-checked against a fresh free list before anything is written.
The whole packing request is one unit of work.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional, Sequence, Tuple
from sqlalchemy.orm import Session
import logging

from app.exceptions import ConflictError, NotFoundError, ServiceValidationError
from domain.container_ref import ContainerRef, parse_container_ref
from domain.enums import ItemType, SourceType
from domain.models import SetBox, SetComponent, SetPlan, unit_of_work
from domain.schemas.set_schemas import (
    BoxRequest,
    ComponentInput,
    SetCreateRequest,
    SetUpdateRequest,
)
from repositories import ContainerRepository, RecipeRepository, SetRepository
from services.code_service import CodeService
from services.inventory_service import InventoryService
from services.text import optional_text

logger = logging.getLogger("freezer.sets")


@dataclass
class PlannedBox:
    """A box request that passed validation"""

    container: ContainerRef
    box_type: str
    portion_factor: Optional[float]
    portion_text: Optional[str]
    component_ids: List[int] = field(default_factory=list)


@dataclass
class PackedBox:
    box: SetBox
    storage_type: str
    inventory_item_id: int
    id_code: str


def box_kcal(
    component_kcals: Sequence[Optional[int]], portion_factor: Optional[float]
) -> Optional[int]:
    """
    Calories of a box.

    None when any component's calories are unknown; otherwise the sum,
    scaled by ``portion_factor`` and rounded half up when a factor is given.
    """
    if any(kcal is None for kcal in component_kcals):
        return None
    total = sum(int(kcal) for kcal in component_kcals)
    if portion_factor is None:
        return total
    scaled = Decimal(total) * Decimal(str(portion_factor))
    return int(scaled.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class SetBuilderService:
    @staticmethod
    def normalize_components(
        db: Session, components: Sequence[ComponentInput]
    ) -> List[SetComponent]:
        """
        Turn client components into unsaved rows with a dense ``sort_order``.

        A component needs a role and a source of RECIPE (with ``recipe_id``)
        or FREE (with ``free_text`` and an explicit ``kcal_total``). Anything
        else is dropped. RECIPE components without calories take the
        recipe's ``kcal_per_portion``.

        Raises:
            NotFoundError: ``recipe_not_found`` for an unknown recipe id
        """
        recipes = RecipeRepository(db)
        result: List[SetComponent] = []
        for component in components:
            role = (component.component_type or "").strip().upper()
            source = (component.source_type or "").strip().upper()
            if not role or source not in SourceType.__members__:
                continue

            kcal = component.kcal_total
            recipe_id = None
            free_text = None
            if source == SourceType.RECIPE.value:
                if component.recipe_id is None:
                    continue
                recipe = recipes.get_by_id(component.recipe_id)
                if recipe is None:
                    raise NotFoundError(
                        "recipe_not_found",
                        f"Recipe {component.recipe_id} not found",
                        {"recipe_id": component.recipe_id},
                    )
                recipe_id = recipe.id
                if kcal is None:
                    kcal = recipe.kcal_per_portion
            else:
                free_text = optional_text(component.free_text)
                if free_text is None or kcal is None:
                    continue

            result.append(
                SetComponent(
                    component_type=role[:16],
                    source_type=SourceType(source),
                    recipe_id=recipe_id,
                    free_text=free_text,
                    amount_text=optional_text(component.amount_text, 100),
                    kcal_total=kcal,
                    sort_order=len(result),
                )
            )
        return result

    @staticmethod
    def plan_components(
        db: Session,
        set_id: Optional[int],
        name: Optional[str],
        note: Optional[str],
        components: Optional[Sequence[ComponentInput]],
    ) -> SetPlan:
        """
        Create a set (``set_id`` None) or replace name, note and components
        of an existing one. Components are deleted and re-inserted as a whole;
        ``components=None`` keeps the stored ones of an existing set.

        Raises:
            ServiceValidationError: ``missing_name``, ``missing_components``
            NotFoundError: ``not_found``, ``recipe_not_found``
        """
        repo = SetRepository(db)
        set_plan = None
        if set_id is not None:
            set_plan = repo.get_by_id(set_id)
            if set_plan is None:
                raise NotFoundError("not_found", f"Set {set_id} not found")

        clean_name = optional_text(name)
        if clean_name is None:
            raise ServiceValidationError("missing_name", "Set name is required")

        planned = None
        if components is not None or set_plan is None:
            planned = SetBuilderService.normalize_components(db, components or [])
            if not planned:
                raise ServiceValidationError(
                    "missing_components", "At least one valid component is required"
                )

        with unit_of_work(db):
            if set_plan is None:
                set_plan = repo.add(SetPlan(name=clean_name, note=optional_text(note)))
            else:
                set_plan.name = clean_name
                set_plan.note = optional_text(note)
                set_plan.updated_at = datetime.now(timezone.utc)
            if planned is not None:
                repo.replace_components(set_plan, planned)

        logger.info(
            f"Planned set {set_plan.id} '{set_plan.name}' with "
            f"{len(set_plan.components)} component(s)"
        )
        return set_plan

    @staticmethod
    def create_set(db: Session, data: SetCreateRequest) -> SetPlan:
        return SetBuilderService.plan_components(
            db, None, data.name, data.note, data.components
        )

    @staticmethod
    def update_set(db: Session, set_id: int, data: SetUpdateRequest) -> SetPlan:
        """Update a set; fields missing from the request keep their stored values"""
        set_plan = SetBuilderService.get_set(db, set_id)
        provided = data.model_fields_set

        name = data.name if "name" in provided else set_plan.name
        note = data.note if "note" in provided else set_plan.note
        return SetBuilderService.plan_components(
            db, set_id, name, note, data.components
        )

    @staticmethod
    def get_set(db: Session, set_id: int) -> SetPlan:
        set_plan = SetRepository(db).get_by_id(set_id)
        if set_plan is None:
            raise NotFoundError("not_found", f"Set {set_id} not found")
        return set_plan

    @staticmethod
    def list_sets(db: Session, limit: int = 50, offset: int = 0) -> List[Tuple[SetPlan, int]]:
        return SetRepository(db).list_with_box_counts(limit, offset)

    @staticmethod
    def plan_boxes(
        boxes: Sequence[BoxRequest], component_map: Dict[int, SetComponent]
    ) -> List[PlannedBox]:
        """
        Validate box requests against the stored components.

        Raises:
            ServiceValidationError: ``invalid_container``, ``invalid_component``,
                ``portion_missing``
            ConflictError: ``duplicate_container`` when a real container
                appears in more than one box
        """
        planned: List[PlannedBox] = []
        used_containers = set()
        for index, box in enumerate(boxes):
            container = parse_container_ref(box.container_id)
            if not container.is_bag:
                if container.id in used_containers:
                    raise ConflictError(
                        "duplicate_container",
                        f"Container {container.id} is used by more than one box",
                        {"container_id": container.id, "box_index": index},
                    )
                used_containers.add(container.id)

            component_ids = list(dict.fromkeys(box.component_ids))
            unknown = [cid for cid in component_ids if cid not in component_map]
            if not component_ids or unknown:
                raise ServiceValidationError(
                    "invalid_component",
                    "Box references no or unknown components",
                    {"box_index": index, "component_ids": unknown},
                )

            portion_text = optional_text(box.portion_text, 50)
            if box.portion_factor is None and portion_text is None:
                raise ServiceValidationError(
                    "portion_missing",
                    "Box needs a portion factor or a portion text",
                    {"box_index": index},
                )

            planned.append(
                PlannedBox(
                    container=container,
                    box_type=box.box_type.strip().upper()[:16],
                    portion_factor=box.portion_factor,
                    portion_text=portion_text,
                    component_ids=component_ids,
                )
            )
        return planned

    @staticmethod
    def pack_boxes(
        db: Session,
        set_id: int,
        boxes: Sequence[BoxRequest],
        today: Optional[date] = None,
    ) -> List[PackedBox]:
        """
        Pack components of a set into containers and bags.

        For each box, in request order: generate a box code, compute the
        calorie total, store the box with its component links, flag a real
        container in use and create one inventory item frozen today.
        Either every box is created or none is.

        Raises:
            NotFoundError: ``not_found``
            ServiceValidationError: ``missing_boxes``, ``invalid_component``,
                ``portion_missing``, ``invalid_container``
            ConflictError: ``duplicate_container``, ``container_not_available``
        """
        set_plan = SetBuilderService.get_set(db, set_id)
        if not boxes:
            raise ServiceValidationError("missing_boxes", "No boxes to pack")

        component_map = {c.id: c for c in set_plan.components}
        planned = SetBuilderService.plan_boxes(boxes, component_map)
        frozen_at = today or date.today()

        set_repo = SetRepository(db)
        container_repo = ContainerRepository(db)
        packed: List[PackedBox] = []

        with unit_of_work(db):
            real_ids = [p.container.id for p in planned if not p.container.is_bag]
            container_repo.lock(real_ids)
            free_ids = {c.id for c in container_repo.list_free()}
            unavailable = [cid for cid in real_ids if cid not in free_ids]
            if unavailable:
                raise ConflictError(
                    "container_not_available",
                    "Container is not available",
                    {"container_ids": unavailable},
                )

            for plan in planned:
                box_code = CodeService.next_box_code(db, plan.box_type)
                kcal_total = box_kcal(
                    [component_map[cid].kcal_total for cid in plan.component_ids],
                    plan.portion_factor,
                )
                box = set_repo.add_box(
                    SetBox(
                        set_id=set_plan.id,
                        container_id=plan.container.container_id,
                        box_code=box_code,
                        box_type=plan.box_type,
                        portion_factor=plan.portion_factor,
                        portion_text=plan.portion_text,
                        kcal_total=kcal_total,
                    ),
                    plan.component_ids,
                )

                if not plan.container.is_bag:
                    container_repo.set_in_use([plan.container.id], True)

                item = InventoryService.insert_item(
                    db,
                    item_type=ItemType.for_role(plan.box_type).value,
                    name=set_plan.name,
                    frozen_at=frozen_at,
                    portion_text=plan.portion_text,
                    kcal=kcal_total,
                    storage_type=plan.container.storage_type,
                    container_id=plan.container.container_id,
                )
                packed.append(
                    PackedBox(
                        box=box,
                        storage_type=plan.container.storage_type.value,
                        inventory_item_id=item.id,
                        id_code=item.id_code,
                    )
                )
            db.expire(set_plan, ["boxes"])

        logger.info(
            f"Packed {len(packed)} box(es) for set {set_plan.id}: "
            f"{[p.box.box_code for p in packed]}"
        )
        return packed
