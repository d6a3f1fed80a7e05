"""
Code Service - sequential, type-prefixed codes for inventory items and boxes.

Inventory ``id_code`` values come from a per-type counter and are never
reused. Box codes take the smallest number not held by a box or container
that is currently in use, so they are reused once a container is freed.
"""

import logging
import re
from typing import Iterable

from sqlalchemy.orm import Session

from domain.enums import ItemType
from repositories import ContainerRepository, InventoryRepository, SetRepository

logger = logging.getLogger("freezer.codes")

_NUMBER = re.compile(r"^(\d+)")


def format_code(prefix: str, number: int) -> str:
    return f"{prefix}{number:03d}"


def smallest_unused(numbers: Iterable[int]) -> int:
    """Smallest positive integer not in ``numbers``"""
    used = set(numbers)
    candidate = 1
    while candidate in used:
        candidate += 1
    return candidate


def used_numbers(codes: Iterable[str], prefix: str) -> set[int]:
    """Positive numbers behind codes that start with ``prefix``"""
    result = set()
    for code in codes:
        if not code or not code.startswith(prefix):
            continue
        match = _NUMBER.match(code[len(prefix):])
        if match and int(match.group(1)) > 0:
            result.add(int(match.group(1)))
    return result


class CodeService:
    @staticmethod
    def next_inventory_code(db: Session, item_type: str) -> str:
        """
        Draw the next ``id_code`` for ``item_type``.

        The counter row is locked for the rest of the caller's transaction,
        so concurrent creations of the same type serialize here.
        """
        counter = InventoryRepository(db).lock_counter(item_type)
        number = counter.next_number
        counter.next_number = number + 1
        db.flush()
        return format_code(item_type, number)

    @staticmethod
    def next_box_code(db: Session, box_type: str) -> str:
        """
        Smallest free code for ``box_type`` among in-use boxes and containers.

        Only boxes whose container is in use and in-use containers whose code
        carries the same prefix are considered.
        """
        prefix = ItemType.for_role(box_type).value
        codes = SetRepository(db).in_use_box_codes(box_type)
        codes += ContainerRepository(db).in_use_codes_with_prefix(prefix)
        code = format_code(prefix, smallest_unused(used_numbers(codes, prefix)))
        logger.debug(f"Generated box code {code} for {box_type}")
        return code
