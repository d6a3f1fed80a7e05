"""
Recipe Repository - lookup of recipe names and calories
"""

from sqlalchemy.orm import Session

from domain.models import Recipe
from repositories.base import BaseRepository


class RecipeRepository(BaseRepository[Recipe]):
    """Repository for recipe lookups"""

    def __init__(self, db: Session):
        super().__init__(db, Recipe)
