"""
Container references as they arrive from clients, resolved once at the
boundary into either a persisted container or a disposable bag.
"""

from dataclasses import dataclass
from typing import Union

from app.exceptions import ServiceValidationError
from domain.enums import BagKind, StorageType

# Legacy numeric sentinels still sent by older clients
_LEGACY_BAG_TOKENS = {"-1": BagKind.FREEZER_BAG, "-2": BagKind.VACUUM_BAG}


@dataclass(frozen=True)
class RealContainer:
    id: int

    is_bag = False

    @property
    def storage_type(self) -> StorageType:
        return StorageType.BOX

    @property
    def container_id(self) -> int:
        return self.id


@dataclass(frozen=True)
class DisposableBag:
    kind: BagKind

    is_bag = True

    @property
    def storage_type(self) -> StorageType:
        return StorageType(self.kind.value)

    @property
    def container_id(self) -> None:
        return None


ContainerRef = Union[RealContainer, DisposableBag]


def parse_container_ref(raw) -> ContainerRef:
    """
    Resolve a raw container reference.

    Accepts a positive container id (int or numeric string), a bag token
    (``FREEZER_BAG`` / ``VACUUM_BAG``), the legacy ``-1`` / ``-2`` sentinels,
    or ``None`` which means a freezer bag.

    Raises:
        ServiceValidationError: ``invalid_container`` for anything else
    """
    if raw is None:
        return DisposableBag(BagKind.FREEZER_BAG)
    if isinstance(raw, bool):
        raise ServiceValidationError("invalid_container", f"Invalid container: {raw!r}")

    token = str(raw).strip().upper()
    if token in _LEGACY_BAG_TOKENS:
        return DisposableBag(_LEGACY_BAG_TOKENS[token])
    if token in BagKind.__members__:
        return DisposableBag(BagKind[token])
    if token.isdigit() and int(token) > 0:
        return RealContainer(int(token))

    raise ServiceValidationError("invalid_container", f"Invalid container: {raw!r}")
