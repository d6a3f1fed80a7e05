"""
Item Type Default Repository - per-type shelf life and reheating defaults
"""

from typing import List, Optional
from sqlalchemy.orm import Session

from domain.models import ItemTypeDefault
from repositories.base import BaseRepository


class ItemTypeDefaultRepository(BaseRepository[ItemTypeDefault]):
    """Repository for item type defaults"""

    def __init__(self, db: Session):
        super().__init__(db, ItemTypeDefault)

    def list_defaults(self) -> List[ItemTypeDefault]:
        return self.db.query(ItemTypeDefault).order_by(ItemTypeDefault.item_type).all()

    def get_for_type(self, item_type: str) -> Optional[ItemTypeDefault]:
        return self.db.get(ItemTypeDefault, item_type)
