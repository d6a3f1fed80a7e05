"""
Container Repository - Data access layer for reusable freezer containers
"""

from typing import List, Optional, Sequence
from sqlalchemy.orm import Session

from domain.models import Container
from repositories.base import BaseRepository


class ContainerRepository(BaseRepository[Container]):
    """Repository for container data access"""

    def __init__(self, db: Session):
        super().__init__(db, Container)

    def get_by_code(self, container_code: str) -> Optional[Container]:
        return (
            self.db.query(Container)
            .filter(Container.container_code == container_code)
            .first()
        )

    def list_containers(self, active: Optional[bool] = True) -> List[Container]:
        """List containers; ``active=None`` returns active and inactive ones"""
        query = self.db.query(Container)
        if active is not None:
            query = query.filter(Container.is_active.is_(active))
        return query.order_by(Container.container_code.asc()).all()

    def list_free(self) -> List[Container]:
        """Active containers that currently back no item"""
        return (
            self.db.query(Container)
            .filter(Container.is_active.is_(True), Container.in_use.is_(False))
            .order_by(Container.container_code.asc())
            .all()
        )

    def lock(self, container_ids: Sequence[int]) -> List[Container]:
        """Select the given containers FOR UPDATE and refresh them from the row"""
        ids = sorted(set(container_ids))
        if not ids:
            return []
        return (
            self.db.query(Container)
            .filter(Container.id.in_(ids))
            .order_by(Container.id)
            .with_for_update()
            .populate_existing()
            .all()
        )

    def set_in_use(self, container_ids: Sequence[int], in_use: bool) -> None:
        ids = sorted(set(container_ids))
        if not ids:
            return
        self.db.query(Container).filter(Container.id.in_(ids)).update(
            {Container.in_use: in_use}, synchronize_session="fetch"
        )
        self.db.flush()

    def in_use_codes_with_prefix(self, prefix: str) -> List[str]:
        rows = (
            self.db.query(Container.container_code)
            .filter(
                Container.in_use.is_(True),
                Container.container_code.like(f"{prefix}%"),
            )
            .all()
        )
        return [row[0] for row in rows]
