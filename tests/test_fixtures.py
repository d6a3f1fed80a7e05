"""
Shared test fixtures and utilities for the freezer inventory test suite.

Every test gets a fresh in-memory SQLite database with the reference rows
seeded. The ``client`` fixture routes API requests through the same session,
so tests can arrange data with the factories below and assert through
either the API or the session.
"""

from datetime import date, timedelta
from typing import Generator, Optional, Sequence, Tuple

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from api.dependencies import get_db
from domain.models import (
    Base,
    Container,
    MealSet,
    MealSetItem,
    MealSetRequirement,
    Recipe,
    unit_of_work,
)
from domain.models.database import build_engine
from domain.models.seed import seed_reference_data
from domain.enums import StorageType
from main import app
from services.inventory_service import InventoryService

TODAY = date(2026, 3, 1)


# =============================================================================
# DATABASE SESSION FIXTURES
# =============================================================================


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """
    Create a database session on a fresh in-memory schema.

    The engine uses a single shared connection so that the session and
    requests served by the TestClient thread see the same database.

    Yields:
        Session: SQLAlchemy database session with reference data seeded
    """
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)

    session = SessionLocal()
    with unit_of_work(session):
        seed_reference_data(session)

    try:
        yield session
    finally:
        session.rollback()
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """TestClient whose requests use ``db_session``"""
    app.dependency_overrides[get_db] = lambda: db_session
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


# =============================================================================
# FACTORIES
# =============================================================================


def make_item(
    db: Session,
    item_type: str = "P",
    name: str = "Chicken curry",
    frozen_at: Optional[date] = None,
    is_veggie: bool = False,
    is_vegan: bool = False,
    best_before_at: Optional[date] = None,
    storage_type: StorageType = StorageType.FREEZER_BAG,
    container_id: Optional[int] = None,
    **fields,
):
    """
    Create an inventory item in the freezer.

    Items default to a freezer bag so they do not need a container, and to
    a frozen date 30 days before ``TODAY``.

    Example:
        >>> sauce = make_item(db, "S", "Tomato sauce", is_veggie=True)
        >>> sauce.id_code
        'S001'
    """
    with unit_of_work(db):
        item = InventoryService.insert_item(
            db,
            item_type=item_type,
            name=name,
            frozen_at=frozen_at or TODAY - timedelta(days=30),
            is_veggie=is_veggie,
            is_vegan=is_vegan,
            best_before_at=best_before_at,
            storage_type=storage_type,
            container_id=container_id,
            **fields,
        )
    return item


def make_container(
    db: Session,
    container_code: str = "C01",
    in_use: bool = False,
    is_active: bool = True,
    note: Optional[str] = None,
) -> Container:
    """Create a reusable container, free and active by default"""
    with unit_of_work(db):
        container = Container(
            container_code=container_code,
            in_use=in_use,
            is_active=is_active,
            note=note,
        )
        db.add(container)
        db.flush()
    return container


def make_recipe(
    db: Session,
    name: str = "Bolognese",
    kcal_per_portion: Optional[int] = 450,
    is_veggie: bool = False,
) -> Recipe:
    with unit_of_work(db):
        recipe = Recipe(
            name=name,
            kcal_per_portion=kcal_per_portion,
            is_veggie=is_veggie,
            is_vegan=False,
        )
        db.add(recipe)
        db.flush()
    return recipe


def make_meal_set(
    db: Session,
    set_code: str = "MS1",
    name: str = "Curry night",
    requirements: Sequence[Tuple[str, int, bool]] = (("PROTEIN", 1, False),),
    is_active: bool = True,
) -> MealSet:
    """
    Create a meal set.

    Args:
        requirements: ``(role, required_count, require_veggie)`` tuples,
            evaluated in the given order
    """
    with unit_of_work(db):
        meal_set = MealSet(set_code=set_code, name=name, is_active=is_active)
        db.add(meal_set)
        db.flush()
        for role, count, veggie in requirements:
            db.add(
                MealSetRequirement(
                    meal_set_id=meal_set.id,
                    required_type=role,
                    required_count=count,
                    require_veggie=veggie,
                )
            )
        db.flush()
    return meal_set


def assign(db: Session, meal_set: MealSet, role: str, *items) -> None:
    """Make ``items`` candidates for ``role`` of ``meal_set``"""
    with unit_of_work(db):
        for item in items:
            db.add(
                MealSetItem(
                    meal_set_id=meal_set.id,
                    inventory_item_id=item.id,
                    role_type=role,
                )
            )
        db.flush()


def days_ago(days: int) -> date:
    return TODAY - timedelta(days=days)
