"""
Tests for the set builder: component planning and the packing transaction.

The packing tests cover every rejection code, all-or-nothing behaviour,
calorie aggregation and the reuse of box code numbers.
"""

import pytest
from sqlalchemy.orm import Session, sessionmaker

from app.exceptions import ConflictError, NotFoundError, ServiceValidationError
from domain.enums import InventoryStatus, SourceType, StorageType
from domain.models import (
    Base,
    Container,
    IdCounter,
    InventoryItem,
    SetBox,
    SetBoxComponent,
    unit_of_work,
)
from domain.models.database import build_engine
from domain.models.seed import seed_reference_data
from domain.schemas.set_schemas import (
    BoxRequest,
    ComponentInput,
    SetCreateRequest,
    SetUpdateRequest,
)
from services.inventory_service import InventoryService
from services.set_builder_service import SetBuilderService, box_kcal
from test_fixtures import TODAY, db_session, make_container, make_recipe


def free_component(role="PROTEIN", text="Grilled chicken", kcal=300, **extra):
    return ComponentInput(
        component_type=role, source_type="FREE", free_text=text, kcal_total=kcal, **extra
    )


def make_set(db, components=None, name="Sunday batch"):
    components = components or [
        free_component("PROTEIN", "Grilled chicken", 300),
        free_component("SIDE", "Rice", 200),
    ]
    return SetBuilderService.create_set(
        db, SetCreateRequest(name=name, components=components)
    )


def pack(db, set_plan, *boxes):
    return SetBuilderService.pack_boxes(db, set_plan.id, list(boxes), today=TODAY)


def box(container_id, component_ids, box_type="PROTEIN", portion_factor=1.0, **extra):
    return BoxRequest(
        container_id=container_id,
        box_type=box_type,
        portion_factor=portion_factor,
        component_ids=component_ids,
        **extra,
    )


# =============================================================================
# CALORIES
# =============================================================================


def test_box_kcal_sum_without_factor():
    assert box_kcal([300, 200], None) == 500


def test_box_kcal_unknown_component_makes_total_unknown():
    assert box_kcal([300, None], 1.0) is None


def test_box_kcal_rounds_half_up():
    assert box_kcal([333, 100], 0.5) == 217
    assert box_kcal([101], 1.5) == 152
    assert box_kcal([100], 0.333) == 33


# =============================================================================
# PLANNING
# =============================================================================


def test_create_set_normalises_components(db_session: Session):
    """
    Verifies:
    - invalid components are dropped and the rest get a dense sort order
    - role names are upper-cased and amount text is cut to 100 characters
    - RECIPE components take the recipe calories when none are given
    """
    recipe = make_recipe(db_session, "Bolognese", kcal_per_portion=450)
    set_plan = make_set(
        db_session,
        [
            ComponentInput(component_type="", source_type="FREE", free_text="x", kcal_total=1),
            ComponentInput(component_type="sauce", source_type="RECIPE", recipe_id=recipe.id),
            ComponentInput(component_type="SIDE", source_type="OTHER", free_text="x", kcal_total=1),
            ComponentInput(component_type="SIDE", source_type="RECIPE"),
            ComponentInput(component_type="SIDE", source_type="FREE", free_text="Peas"),
            free_component("side", "  Pasta  ", 350, amount_text="g" * 150),
        ],
    )

    components = set_plan.components
    assert [c.component_type for c in components] == ["SAUCE", "SIDE"]
    assert [c.sort_order for c in components] == [0, 1]
    assert components[0].source_type == SourceType.RECIPE
    assert components[0].kcal_total == 450
    assert components[1].free_text == "Pasta"
    assert len(components[1].amount_text) == 100


def test_recipe_component_keeps_explicit_kcal(db_session: Session):
    recipe = make_recipe(db_session, kcal_per_portion=450)
    set_plan = make_set(
        db_session,
        [ComponentInput(component_type="SAUCE", source_type="RECIPE", recipe_id=recipe.id, kcal_total=0)],
    )
    assert set_plan.components[0].kcal_total == 0


def test_create_set_requires_name(db_session: Session):
    with pytest.raises(ServiceValidationError) as exc:
        make_set(db_session, name="  ")
    assert exc.value.code == "missing_name"


def test_create_set_requires_a_valid_component(db_session: Session):
    with pytest.raises(ServiceValidationError) as exc:
        SetBuilderService.create_set(
            db_session,
            SetCreateRequest(
                name="Empty",
                components=[ComponentInput(component_type="SIDE", source_type="FREE")],
            ),
        )
    assert exc.value.code == "missing_components"


def test_create_set_unknown_recipe(db_session: Session):
    with pytest.raises(NotFoundError) as exc:
        make_set(
            db_session,
            [ComponentInput(component_type="SAUCE", source_type="RECIPE", recipe_id=999)],
        )
    assert exc.value.code == "recipe_not_found"


def test_update_set_keeps_omitted_fields(db_session: Session):
    set_plan = make_set(db_session)
    set_plan_id = set_plan.id
    SetBuilderService.update_set(
        db_session, set_plan_id, SetUpdateRequest(note="for the week")
    )

    updated = SetBuilderService.get_set(db_session, set_plan_id)
    assert updated.name == "Sunday batch"
    assert updated.note == "for the week"
    assert [c.free_text for c in updated.components] == ["Grilled chicken", "Rice"]


def test_update_set_replaces_components(db_session: Session):
    set_plan = make_set(db_session)

    updated = SetBuilderService.update_set(
        db_session,
        set_plan.id,
        SetUpdateRequest(name="Monday batch", components=[free_component("SAUCE", "Pesto", 120)]),
    )

    assert updated.name == "Monday batch"
    assert [(c.component_type, c.free_text) for c in updated.components] == [
        ("SAUCE", "Pesto")
    ]


def test_update_unknown_set(db_session: Session):
    with pytest.raises(NotFoundError) as exc:
        SetBuilderService.update_set(db_session, 404, SetUpdateRequest(name="x"))
    assert exc.value.code == "not_found"


def test_list_sets_with_box_counts(db_session: Session):
    first = make_set(db_session, name="First")
    second = make_set(db_session, name="Second")
    container = make_container(db_session, "C01")
    pack(db_session, first, box(container.id, [first.components[0].id]))

    listed = SetBuilderService.list_sets(db_session)

    assert [s.id for s, _ in listed] == [second.id, first.id]
    assert dict((s.id, count) for s, count in listed) == {first.id: 1, second.id: 0}


# =============================================================================
# PACKING
# =============================================================================


def test_pack_boxes_creates_boxes_and_items(db_session: Session):
    """
    One box in a real container and one in a freezer bag.

    Verifies:
    - one inventory item per box, named after the set and frozen today
    - the real container is flagged in use, the bag has no container
    - box calories and component links are stored
    """
    set_plan = make_set(db_session)
    chicken, rice = set_plan.components
    container = make_container(db_session, "C01")

    packed = pack(
        db_session,
        set_plan,
        box(container.id, [chicken.id, rice.id], "PROTEIN", 1.0),
        box("FREEZER_BAG", [rice.id], "SIDE", None, portion_text="one bowl"),
    )

    assert [p.box.box_code for p in packed] == ["P001", "B001"]
    assert [p.storage_type for p in packed] == ["BOX", "FREEZER_BAG"]
    assert [p.box.kcal_total for p in packed] == [500, 200]
    assert [p.id_code for p in packed] == ["P001", "B001"]

    items = db_session.query(InventoryItem).order_by(InventoryItem.id).all()
    assert [i.name for i in items] == ["Sunday batch", "Sunday batch"]
    assert all(i.frozen_at == TODAY for i in items)
    assert all(i.status == InventoryStatus.IN_FREEZER for i in items)
    assert items[0].container_id == container.id
    assert items[0].storage_type == StorageType.BOX
    assert items[1].container_id is None
    assert items[1].portion_text == "one bowl"
    assert items[1].kcal == 200

    db_session.refresh(container)
    assert container.in_use is True

    stored = SetBuilderService.get_set(db_session, set_plan.id)
    assert [b.component_ids for b in stored.boxes] == [[chicken.id, rice.id], [rice.id]]


def test_pack_boxes_accepts_legacy_bag_tokens(db_session: Session):
    set_plan = make_set(db_session)
    component_id = set_plan.components[0].id

    packed = pack(
        db_session,
        set_plan,
        box(-1, [component_id]),
        box("-2", [component_id]),
        box(None, [component_id]),
        box("vacuum_bag", [component_id]),
    )

    assert [p.storage_type for p in packed] == [
        "FREEZER_BAG",
        "VACUUM_BAG",
        "FREEZER_BAG",
        "VACUUM_BAG",
    ]
    assert all(p.box.container_id is None for p in packed)


def test_pack_boxes_unknown_role_uses_misc_type(db_session: Session):
    set_plan = make_set(db_session)

    packed = pack(db_session, set_plan, box("FREEZER_BAG", [set_plan.components[0].id], "snack"))

    assert packed[0].box.box_type == "SNACK"
    assert packed[0].box.box_code == "X001"
    assert packed[0].id_code == "X001"


def test_pack_boxes_unknown_calories(db_session: Session):
    recipe = make_recipe(db_session, kcal_per_portion=None)
    set_plan = make_set(
        db_session,
        [
            ComponentInput(component_type="SAUCE", source_type="RECIPE", recipe_id=recipe.id),
            free_component("SIDE", "Rice", 200),
        ],
    )
    sauce, rice = set_plan.components

    packed = pack(db_session, set_plan, box("FREEZER_BAG", [sauce.id, rice.id], "SAUCE", 2.0))

    assert packed[0].box.kcal_total is None
    item = db_session.get(InventoryItem, packed[0].inventory_item_id)
    assert item.kcal is None


def test_pack_boxes_scales_and_rounds_calories(db_session: Session):
    set_plan = make_set(
        db_session,
        [free_component("PROTEIN", "Chicken", 333), free_component("SIDE", "Rice", 100)],
    )
    ids = [c.id for c in set_plan.components]

    packed = pack(db_session, set_plan, box("FREEZER_BAG", ids, "PROTEIN", 0.5))

    assert packed[0].box.kcal_total == 217


def test_pack_boxes_deduplicates_component_ids(db_session: Session):
    set_plan = make_set(db_session)
    chicken = set_plan.components[0]

    packed = pack(db_session, set_plan, box("FREEZER_BAG", [chicken.id, chicken.id]))

    assert packed[0].box.kcal_total == 300
    assert db_session.query(SetBoxComponent).count() == 1


def test_box_code_fills_gaps(db_session: Session):
    """In-use containers P001 and P003 leave P002 as the next PROTEIN code"""
    make_container(db_session, "P001", in_use=True)
    make_container(db_session, "P003", in_use=True)
    first = make_container(db_session, "C01")
    second = make_container(db_session, "C02")
    set_plan = make_set(db_session)
    chicken = set_plan.components[0]

    packed = pack(
        db_session,
        set_plan,
        box(first.id, [chicken.id]),
        box(second.id, [chicken.id]),
    )

    assert [p.box.box_code for p in packed] == ["P002", "P004"]


def test_box_code_reused_after_container_is_freed(db_session: Session):
    container = make_container(db_session, "C01")
    set_plan = make_set(db_session)
    chicken = set_plan.components[0]

    first = pack(db_session, set_plan, box(container.id, [chicken.id]))
    InventoryService.take_out(db_session, [first[0].inventory_item_id])
    second = pack(db_session, set_plan, box(container.id, [chicken.id]))

    assert first[0].box.box_code == "P001"
    assert second[0].box.box_code == "P001"
    # inventory codes are never reused
    assert second[0].id_code == "P002"


def test_bag_boxes_do_not_hold_codes(db_session: Session):
    set_plan = make_set(db_session)
    chicken = set_plan.components[0]

    packed = pack(
        db_session,
        set_plan,
        box("FREEZER_BAG", [chicken.id]),
        box("VACUUM_BAG", [chicken.id]),
    )

    assert [p.box.box_code for p in packed] == ["P001", "P001"]


# =============================================================================
# PACKING REJECTIONS
# =============================================================================


def test_pack_unknown_set(db_session: Session):
    with pytest.raises(NotFoundError) as exc:
        SetBuilderService.pack_boxes(db_session, 123, [box("FREEZER_BAG", [1])])
    assert exc.value.code == "not_found"


def test_pack_requires_boxes(db_session: Session):
    set_plan = make_set(db_session)

    with pytest.raises(ServiceValidationError) as exc:
        pack(db_session, set_plan)
    assert exc.value.code == "missing_boxes"


@pytest.mark.parametrize("component_ids", [[], [999]])
def test_pack_invalid_component(db_session: Session, component_ids):
    set_plan = make_set(db_session)

    with pytest.raises(ServiceValidationError) as exc:
        pack(db_session, set_plan, box("FREEZER_BAG", component_ids))
    assert exc.value.code == "invalid_component"


def test_pack_component_of_another_set(db_session: Session):
    set_plan = make_set(db_session)
    other = make_set(db_session, name="Other")

    with pytest.raises(ServiceValidationError) as exc:
        pack(db_session, set_plan, box("FREEZER_BAG", [other.components[0].id]))
    assert exc.value.code == "invalid_component"


def test_pack_portion_missing(db_session: Session):
    set_plan = make_set(db_session)

    with pytest.raises(ServiceValidationError) as exc:
        pack(
            db_session,
            set_plan,
            box("FREEZER_BAG", [set_plan.components[0].id], portion_factor=None, portion_text="  "),
        )
    assert exc.value.code == "portion_missing"


@pytest.mark.parametrize("container_id", ["abc", 0, -3, "1.5"])
def test_pack_invalid_container(db_session: Session, container_id):
    set_plan = make_set(db_session)

    with pytest.raises(ServiceValidationError) as exc:
        pack(db_session, set_plan, box(container_id, [set_plan.components[0].id]))
    assert exc.value.code == "invalid_container"


def test_pack_duplicate_container(db_session: Session):
    container = make_container(db_session, "C01")
    set_plan = make_set(db_session)
    chicken = set_plan.components[0]

    with pytest.raises(ConflictError) as exc:
        pack(
            db_session,
            set_plan,
            box(container.id, [chicken.id]),
            box(str(container.id), [chicken.id]),
        )
    assert exc.value.code == "duplicate_container"
    assert db_session.query(SetBox).count() == 0


@pytest.mark.parametrize("state", ["in_use", "inactive", "unknown"])
def test_pack_container_not_available_writes_nothing(db_session: Session, state):
    """
    A busy, inactive or unknown container rejects the whole request.

    Verifies:
    - no box and no inventory item is created
    - the free container in the same request stays free
    """
    free = make_container(db_session, "C01")
    busy = make_container(
        db_session,
        "C02",
        in_use=(state == "in_use"),
        is_active=(state != "inactive"),
    )
    busy_id = 9999 if state == "unknown" else busy.id
    set_plan = make_set(db_session)
    chicken = set_plan.components[0]

    with pytest.raises(ConflictError) as exc:
        pack(
            db_session,
            set_plan,
            box(free.id, [chicken.id]),
            box(busy_id, [chicken.id]),
        )

    assert exc.value.code == "container_not_available"
    assert db_session.query(SetBox).count() == 0
    assert db_session.query(InventoryItem).count() == 0
    db_session.refresh(free)
    assert free.in_use is False


def test_pack_container_claimed_by_another_session(tmp_path):
    """
    A container taken by a committed transaction after this session loaded
    it is rejected; the fresh free list wins over the stale object.
    """
    engine = build_engine(f"sqlite:///{tmp_path / 'freezer.db'}")
    Base.metadata.create_all(bind=engine)
    Sessions = sessionmaker(bind=engine, expire_on_commit=False)
    session_a = Sessions()
    session_b = Sessions()
    try:
        with unit_of_work(session_a):
            seed_reference_data(session_a)
        container = make_container(session_a, "C01")
        set_plan = make_set(session_a)
        chicken = set_plan.components[0]
        assert session_a.get(Container, container.id).in_use is False

        with unit_of_work(session_b):
            session_b.get(Container, container.id).in_use = True

        with pytest.raises(ConflictError) as exc:
            pack(session_a, set_plan, box(container.id, [chicken.id]))

        assert exc.value.code == "container_not_available"
        assert session_a.query(SetBox).count() == 0
        assert session_a.query(InventoryItem).count() == 0
    finally:
        session_a.close()
        session_b.close()
        engine.dispose()


def test_pack_failure_mid_request_rolls_back(db_session: Session, monkeypatch):
    """Nothing from the first box survives when the second one fails"""
    first = make_container(db_session, "C01")
    second = make_container(db_session, "C02")
    set_plan = make_set(db_session)
    chicken = set_plan.components[0]

    original = InventoryService.insert_item
    calls = []

    def failing_insert(db, **kwargs):
        calls.append(kwargs)
        if len(calls) == 2:
            raise RuntimeError("disk full")
        return original(db, **kwargs)

    monkeypatch.setattr(InventoryService, "insert_item", failing_insert)

    with pytest.raises(RuntimeError):
        pack(
            db_session,
            set_plan,
            box(first.id, [chicken.id]),
            box(second.id, [chicken.id]),
        )

    assert db_session.query(SetBox).count() == 0
    assert db_session.query(SetBoxComponent).count() == 0
    assert db_session.query(InventoryItem).count() == 0
    assert db_session.query(Container).filter(Container.in_use.is_(True)).count() == 0
    counter = db_session.get(IdCounter, "P")
    assert counter.next_number == 1
