"""
Tests for the container registry, container references and code helpers.
"""

import pytest
from sqlalchemy.orm import Session

from app.exceptions import ConflictError, NotFoundError, ServiceValidationError
from domain.container_ref import DisposableBag, RealContainer, parse_container_ref
from domain.enums import BagKind, StorageType
from domain.schemas.container_schemas import ContainerCreate, ContainerUpdate
from services.code_service import format_code, smallest_unused, used_numbers
from services.container_service import ContainerService
from test_fixtures import db_session, make_container


# =============================================================================
# CONTAINER REFERENCES
# =============================================================================


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, DisposableBag(BagKind.FREEZER_BAG)),
        (-1, DisposableBag(BagKind.FREEZER_BAG)),
        ("-2", DisposableBag(BagKind.VACUUM_BAG)),
        ("freezer_bag", DisposableBag(BagKind.FREEZER_BAG)),
        ("VACUUM_BAG", DisposableBag(BagKind.VACUUM_BAG)),
        (7, RealContainer(7)),
        (" 12 ", RealContainer(12)),
    ],
)
def test_parse_container_ref(raw, expected):
    assert parse_container_ref(raw) == expected


@pytest.mark.parametrize("raw", [0, -5, "box", "", True, 2.5])
def test_parse_container_ref_rejects(raw):
    with pytest.raises(ServiceValidationError) as exc:
        parse_container_ref(raw)
    assert exc.value.code == "invalid_container"


def test_container_ref_storage_types():
    assert RealContainer(3).storage_type == StorageType.BOX
    assert RealContainer(3).container_id == 3
    assert DisposableBag(BagKind.VACUUM_BAG).storage_type == StorageType.VACUUM_BAG
    assert DisposableBag(BagKind.VACUUM_BAG).container_id is None


# =============================================================================
# CODE HELPERS
# =============================================================================


def test_format_code_pads_to_three_digits():
    assert format_code("P", 2) == "P002"
    assert format_code("S", 1234) == "S1234"


def test_smallest_unused():
    assert smallest_unused([]) == 1
    assert smallest_unused([1, 3]) == 2
    assert smallest_unused([2, 3]) == 1
    assert smallest_unused([1, 2, 3]) == 4


def test_used_numbers_ignores_other_prefixes_and_noise():
    codes = ["P001", "P003-old", "S002", "PX", "P000", None, "P12"]
    assert used_numbers(codes, "P") == {1, 3, 12}


# =============================================================================
# REGISTRY
# =============================================================================


def test_free_list_appends_virtual_bags(db_session: Session):
    make_container(db_session, "C02")
    make_container(db_session, "C01")
    make_container(db_session, "C03", in_use=True)
    make_container(db_session, "C04", is_active=False)

    listed = ContainerService.list_containers(db_session, free=True)

    assert [c["container_code"] for c in listed] == [
        "C01",
        "C02",
        "Freezer bag",
        "Vacuum bag",
    ]
    assert [c["bag_kind"] for c in listed[-2:]] == ["FREEZER_BAG", "VACUUM_BAG"]
    assert all(c["id"] is None for c in listed[-2:])


def test_list_by_active_flag(db_session: Session):
    make_container(db_session, "C01")
    make_container(db_session, "C02", is_active=False)

    def codes(active):
        return [c["container_code"] for c in ContainerService.list_containers(db_session, active)]

    assert codes("1") == ["C01"]
    assert codes("0") == ["C02"]
    assert codes("all") == ["C01", "C02"]


def test_create_container(db_session: Session):
    container = ContainerService.create_container(
        db_session, ContainerCreate(container_code=" P010 ", container_type_id=2, note="1 l")
    )

    assert container.container_code == "P010"
    assert container.in_use is False
    assert container.is_active is True


def test_create_container_requires_code(db_session: Session):
    with pytest.raises(ServiceValidationError) as exc:
        ContainerService.create_container(db_session, ContainerCreate(container_code=" "))
    assert exc.value.code == "missing_field"


def test_create_container_duplicate_code(db_session: Session):
    make_container(db_session, "C01")

    with pytest.raises(ConflictError) as exc:
        ContainerService.create_container(db_session, ContainerCreate(container_code="C01"))
    assert exc.value.code == "duplicate_container_code"


def test_update_container_applies_given_fields(db_session: Session):
    container = make_container(db_session, "C01", note="lid cracked")

    updated = ContainerService.update_container(
        db_session, container.id, ContainerUpdate(is_active=False)
    )
    assert updated.is_active is False
    assert updated.note == "lid cracked"

    updated = ContainerService.update_container(
        db_session, container.id, ContainerUpdate(note=None)
    )
    assert updated.note is None
    assert updated.is_active is False


def test_update_unknown_container(db_session: Session):
    with pytest.raises(NotFoundError):
        ContainerService.update_container(db_session, 55, ContainerUpdate(note="x"))
