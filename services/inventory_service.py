from datetime import date, timedelta
from typing import List, Optional, Sequence
from sqlalchemy.orm import Session
import logging

from app.config import settings
from app.exceptions import ConflictError, NotFoundError, ServiceValidationError
from domain.enums import InventoryStatus, ItemType, StorageType
from domain.models import InventoryItem, ItemTypeDefault, unit_of_work
from domain.schemas.inventory_schemas import InventoryItemCreate
from repositories import (
    ContainerRepository,
    InventoryRepository,
    ItemTypeDefaultRepository,
)
from services.code_service import CodeService
from services.text import optional_text

logger = logging.getLogger("freezer.inventory")

INVENTORY_VIEWS = ("meals", "ingredient", "single")


class InventoryService:
    @staticmethod
    def list_items(
        db: Session,
        view: str = "single",
        q: str = "",
        veggie: bool = False,
        expiring: bool = False,
        limit: int = 20,
        offset: int = 0,
        today: Optional[date] = None,
    ) -> List[InventoryItem]:
        """
        List items currently in the freezer, oldest first.

        Args:
            view: ``meals``, ``ingredient`` or ``single`` (any other value
                is treated as ``single``)
            expiring: only items whose computed best-before date lies within
                the configured window from ``today``
        """
        if view not in INVENTORY_VIEWS:
            view = "single"
        expiring_until = None
        if expiring:
            expiring_until = expiring_cutoff(today)
        return InventoryRepository(db).list_items(
            view,
            q=q.strip(),
            veggie=veggie,
            expiring_until=expiring_until,
            limit=limit,
            offset=offset,
        )

    @staticmethod
    def list_type_defaults(db: Session) -> List[dict]:
        """Type defaults with the role name that maps onto each type"""
        result = []
        for row in ItemTypeDefaultRepository(db).list_defaults():
            try:
                box_type = ItemType(row.item_type).role
            except ValueError:
                continue
            result.append(
                {
                    "item_type": row.item_type,
                    "box_type": box_type,
                    "note": row.note,
                    "best_before_days": row.best_before_days,
                    "thaw_method": row.thaw_method,
                    "reheat_minutes": row.reheat_minutes,
                }
            )
        return result

    @staticmethod
    def create_item(db: Session, data: InventoryItemCreate) -> InventoryItem:
        """
        Create an item in the freezer.

        Validates required fields and the storage type before touching the
        database. A container is only kept for BOX storage; it is locked,
        must be free, and is flagged in use together with the insert.

        Raises:
            ServiceValidationError: ``missing_field``, ``invalid_storage_type``
            ConflictError: ``container_not_available``, ``duplicate_id_code``
        """
        for field in ("item_type", "name", "frozen_at"):
            value = getattr(data, field)
            if value is None or (isinstance(value, str) and not value.strip()):
                raise ServiceValidationError(
                    "missing_field", f"Missing field: {field}", {"field": field}
                )

        raw_storage = (data.storage_type or StorageType.BOX.value).strip().upper()
        try:
            storage_type = StorageType(raw_storage)
        except ValueError:
            raise ServiceValidationError(
                "invalid_storage_type", f"Invalid storage type: {data.storage_type}"
            )

        container_id = data.container_id if storage_type == StorageType.BOX else None

        with unit_of_work(db):
            if container_id is not None:
                InventoryService.claim_container(db, container_id)

            item = InventoryService.insert_item(
                db,
                item_type=data.item_type.value,
                name=data.name.strip(),
                frozen_at=data.frozen_at,
                id_code=optional_text(data.id_code, 16),
                recipe_id=data.recipe_id,
                is_veggie=data.is_veggie,
                is_vegan=data.is_vegan,
                portion_text=optional_text(data.portion_text, 50),
                weight_g=data.weight_g,
                volume_ml=data.volume_ml,
                kcal=data.kcal,
                best_before_at=data.best_before_at,
                storage_location=optional_text(data.storage_location),
                prep_notes=optional_text(data.prep_notes, 2000),
                thaw_method=optional_text(data.thaw_method, 32),
                reheat_minutes=data.reheat_minutes,
                storage_type=storage_type,
                container_id=container_id,
            )

        logger.info(f"Created inventory item {item.id_code} ({item.name})")
        return item

    @staticmethod
    def claim_container(db: Session, container_id: int) -> None:
        """Lock a container and flag it in use; it must be active and free"""
        repo = ContainerRepository(db)
        locked = repo.lock([container_id])
        if not locked or not locked[0].is_active or locked[0].in_use:
            raise ConflictError(
                "container_not_available",
                f"Container {container_id} is not available",
                {"container_id": container_id},
            )
        repo.set_in_use([container_id], True)

    @staticmethod
    def insert_item(
        db: Session,
        *,
        item_type: str,
        name: str,
        frozen_at: date,
        storage_type: StorageType = StorageType.BOX,
        container_id: Optional[int] = None,
        id_code: Optional[str] = None,
        thaw_method: Optional[str] = None,
        reheat_minutes: Optional[int] = None,
        **fields,
    ) -> InventoryItem:
        """
        Insert one item inside the caller's unit of work (no commit).

        Draws the ``id_code`` from the type counter unless one is given,
        fills thawing and reheating from the type defaults, and logs a
        CREATED event.
        """
        repo = InventoryRepository(db)
        if storage_type != StorageType.BOX:
            container_id = None

        if id_code is None:
            id_code = CodeService.next_inventory_code(db, item_type)
        elif repo.get_by_code(id_code) is not None:
            raise ConflictError(
                "duplicate_id_code", f"Inventory code {id_code} already exists"
            )

        defaults: Optional[ItemTypeDefault] = ItemTypeDefaultRepository(
            db
        ).get_for_type(item_type)
        if thaw_method is None:
            thaw_method = defaults.thaw_method if defaults else "NONE"
        if reheat_minutes is None and defaults is not None:
            reheat_minutes = defaults.reheat_minutes

        item = repo.add(
            InventoryItem(
                id_code=id_code,
                item_type=item_type,
                name=name,
                frozen_at=frozen_at,
                thaw_method=thaw_method,
                reheat_minutes=reheat_minutes,
                storage_type=storage_type,
                container_id=container_id,
                status=InventoryStatus.IN_FREEZER,
                **fields,
            )
        )
        repo.add_created_event(item)
        return item

    @staticmethod
    def take_out(db: Session, item_ids: Sequence[int]) -> List[int]:
        """
        Take items out of the freezer as one atomic operation.

        Rows are locked first; every item must exist and still be in the
        freezer, otherwise nothing changes. Real containers backing the items
        are released.

        Raises:
            ServiceValidationError: ``no_items_selected``, ``invalid_status``
            NotFoundError: ``not_found`` if any id is unknown
        """
        ids = list(dict.fromkeys(int(i) for i in item_ids))
        if not ids:
            raise ServiceValidationError("no_items_selected", "No items selected")

        repo = InventoryRepository(db)
        with unit_of_work(db):
            items = repo.lock_items(ids)
            if len(items) != len(ids):
                missing = sorted(set(ids) - {item.id for item in items})
                raise NotFoundError(
                    "not_found", "Inventory item not found", {"item_ids": missing}
                )

            not_in_freezer = [
                item.id for item in items if item.status != InventoryStatus.IN_FREEZER
            ]
            if not_in_freezer:
                raise ServiceValidationError(
                    "invalid_status",
                    "Item is not in the freezer",
                    {"item_ids": not_in_freezer},
                )

            repo.mark_taken_out(items)
            container_ids = [
                item.container_id for item in items if item.container_id is not None
            ]
            ContainerRepository(db).set_in_use(container_ids, False)

        logger.info(f"Took out {len(ids)} item(s): {ids}")
        return ids


def expiring_cutoff(today: Optional[date] = None) -> date:
    """Last best-before date that still counts as expiring"""
    today = today or date.today()
    return today + timedelta(days=settings.expiring_window_days)
