from typing import List, Optional
from sqlalchemy.orm import Session
import logging

from app.exceptions import ConflictError, NotFoundError, ServiceValidationError
from domain.enums import BagKind
from domain.models import Container, unit_of_work
from domain.schemas.container_schemas import ContainerCreate, ContainerUpdate
from repositories import ContainerRepository
from services.text import optional_text

logger = logging.getLogger("freezer.containers")

BAG_LABELS = {
    BagKind.FREEZER_BAG: "Freezer bag",
    BagKind.VACUUM_BAG: "Vacuum bag",
}


def virtual_bags() -> List[dict]:
    """The disposable bags, always free and never persisted"""
    return [
        {
            "id": None,
            "container_code": BAG_LABELS[kind],
            "container_type_id": None,
            "is_active": True,
            "in_use": False,
            "note": "Disposable",
            "bag_kind": kind.value,
        }
        for kind in BagKind
    ]


def _as_dict(container: Container) -> dict:
    return {
        "id": container.id,
        "container_code": container.container_code,
        "container_type_id": container.container_type_id,
        "is_active": container.is_active,
        "in_use": container.in_use,
        "note": container.note,
        "bag_kind": None,
    }


class ContainerService:
    @staticmethod
    def list_containers(db: Session, active: str = "1", free: bool = False) -> List[dict]:
        """
        List containers.

        With ``free`` the active, unused containers are returned followed by
        the two virtual bags. Otherwise ``active`` selects ``1`` (active),
        ``0`` (inactive) or ``all``.
        """
        repo = ContainerRepository(db)
        if free:
            return [_as_dict(c) for c in repo.list_free()] + virtual_bags()

        flag: Optional[bool] = {"1": True, "0": False, "all": None}.get(active, True)
        return [_as_dict(c) for c in repo.list_containers(flag)]

    @staticmethod
    def create_container(db: Session, data: ContainerCreate) -> Container:
        """Register a reusable container; the code must be unique"""
        code = optional_text(data.container_code, 32)
        if code is None:
            raise ServiceValidationError(
                "missing_field", "Missing field: container_code", {"field": "container_code"}
            )

        repo = ContainerRepository(db)
        if repo.get_by_code(code) is not None:
            raise ConflictError(
                "duplicate_container_code", f"Container code {code} already exists"
            )

        with unit_of_work(db):
            container = repo.add(
                Container(
                    container_code=code,
                    container_type_id=data.container_type_id,
                    note=optional_text(data.note),
                    is_active=data.is_active,
                    in_use=False,
                )
            )
        logger.info(f"Registered container {code}")
        return container

    @staticmethod
    def update_container(
        db: Session, container_id: int, data: ContainerUpdate
    ) -> Container:
        """Apply the fields present in ``data`` to a container"""
        repo = ContainerRepository(db)
        container = repo.get_by_id(container_id)
        if container is None:
            raise NotFoundError("not_found", f"Container {container_id} not found")

        provided = data.model_fields_set
        with unit_of_work(db):
            if "container_type_id" in provided:
                container.container_type_id = data.container_type_id
            if "note" in provided:
                container.note = optional_text(data.note)
            if "is_active" in provided and data.is_active is not None:
                container.is_active = data.is_active
            db.flush()
        return container
