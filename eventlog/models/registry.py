"""Resolution of typed uuids to resource classes and kinds."""
from __future__ import annotations

import re
from collections.abc import Mapping

from sqlalchemy import select
from sqlalchemy.orm import Session

from .base import Base, Resource

UUID_RE = re.compile(r"^[0-9a-z]{5}-([0-9a-z]{5})-[0-9a-z]{15}$")


def type_prefix(uuid: str | None) -> str | None:
    """Return the five-character type segment of a uuid, or None if malformed."""

    if not uuid:
        return None
    match = UUID_RE.match(uuid)
    return match.group(1) if match else None


_classes: dict[str, type[Resource]] = {}
_kinds: dict[str, str] = {}
_mapper_count = -1


def _refresh() -> None:
    # Rebuilt only when a class has been mapped since the last lookup.
    global _classes, _kinds, _mapper_count
    mappers = Base.registry.mappers
    if len(mappers) == _mapper_count:
        return
    classes: dict[str, type[Resource]] = {}
    for mapper in mappers:
        cls = mapper.class_
        prefix = getattr(cls, "uuid_prefix", None)
        if prefix and issubclass(cls, Resource):
            classes[prefix] = cls
    _classes = classes
    _kinds = {prefix: cls.kind() for prefix, cls in classes.items()}
    _mapper_count = len(mappers)


def resource_classes() -> dict[str, type[Resource]]:
    """Map every mapped resource's uuid type prefix to its class."""

    _refresh()
    return dict(_classes)


def kind_registry() -> Mapping[str, str]:
    """Snapshot of uuid type prefix -> kind string, shared between callers."""

    _refresh()
    return _kinds


def kind_for_uuid(uuid: str | None, registry: Mapping[str, str]) -> str | None:
    prefix = type_prefix(uuid)
    if prefix is None:
        return None
    return registry.get(prefix)


def resource_class_for_uuid(uuid: str | None) -> type[Resource] | None:
    prefix = type_prefix(uuid)
    if prefix is None:
        return None
    _refresh()
    return _classes.get(prefix)


def find_resource(session: Session, uuid: str | None) -> Resource | None:
    """Load the live resource with this uuid, if its type is known and it exists."""

    cls = resource_class_for_uuid(uuid)
    if cls is None:
        return None
    return session.scalar(select(cls).where(cls.uuid == uuid))


def uuid_exists(session: Session, uuid: str) -> bool:
    """True when the uuid names a pending or persisted, not deleted, resource."""

    cls = resource_class_for_uuid(uuid)
    if cls is None:
        return False
    for obj in session.new:
        if isinstance(obj, cls) and obj.uuid == uuid:
            return True
    with session.no_autoflush:
        obj = session.scalar(select(cls).where(cls.uuid == uuid))
    return obj is not None and obj not in session.deleted


__all__ = [
    "UUID_RE",
    "find_resource",
    "kind_for_uuid",
    "kind_registry",
    "resource_class_for_uuid",
    "resource_classes",
    "type_prefix",
    "uuid_exists",
]
