"""
Set Repository - set-builder plans, their components and packed boxes
"""

from typing import List, Sequence, Tuple
from sqlalchemy import func
from sqlalchemy.orm import Session

from domain.models import Container, SetBox, SetBoxComponent, SetComponent, SetPlan
from repositories.base import BaseRepository


class SetRepository(BaseRepository[SetPlan]):
    """Repository for set-builder data access"""

    def __init__(self, db: Session):
        super().__init__(db, SetPlan)

    def list_with_box_counts(
        self, limit: int = 50, offset: int = 0
    ) -> List[Tuple[SetPlan, int]]:
        """Sets, most recently updated first, with their number of boxes"""
        box_count = (
            self.db.query(func.count(SetBox.id))
            .filter(SetBox.set_id == SetPlan.id)
            .correlate(SetPlan)
            .scalar_subquery()
        )
        rows = (
            self.db.query(SetPlan, box_count)
            .order_by(SetPlan.updated_at.desc(), SetPlan.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return [(row[0], int(row[1] or 0)) for row in rows]

    def replace_components(
        self, set_plan: SetPlan, components: Sequence[SetComponent]
    ) -> List[SetComponent]:
        """Delete all components of the set and insert ``components`` in order"""
        self.db.query(SetComponent).filter(
            SetComponent.set_id == set_plan.id
        ).delete(synchronize_session=False)
        self.db.flush()
        self.db.expire(set_plan, ["components"])

        for component in components:
            component.set_id = set_plan.id
            self.db.add(component)
        self.db.flush()
        self.db.expire(set_plan, ["components"])
        return list(set_plan.components)

    def add_box(self, box: SetBox, component_ids: Sequence[int]) -> SetBox:
        """Insert a box and its component links"""
        self.db.add(box)
        self.db.flush()
        for component_id in component_ids:
            box.component_links.append(
                SetBoxComponent(set_box_id=box.id, set_component_id=component_id)
            )
        self.db.flush()
        return box

    def in_use_box_codes(self, box_type: str) -> List[str]:
        """Codes of boxes of ``box_type`` whose container is still in use"""
        rows = (
            self.db.query(SetBox.box_code)
            .join(Container, Container.id == SetBox.container_id)
            .filter(SetBox.box_type == box_type, Container.in_use.is_(True))
            .all()
        )
        return [row[0] for row in rows]
