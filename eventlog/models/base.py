"""Declarative base and the shared resource behaviour of every logged entity."""
from __future__ import annotations

import hashlib
import json
import secrets
from datetime import datetime
from typing import Any, ClassVar, Protocol, runtime_checkable

from sqlalchemy import DateTime, String, inspect
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column
from sqlalchemy.types import TypeDecorator

from eventlog.config import get_settings
from eventlog.core.actor import Actor
from eventlog.utils.errors import InvalidReference
from eventlog.utils.time import ensure_utc, utcnow

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def _json_safe(value: Any) -> Any:
    if isinstance(value, datetime):
        return ensure_utc(value).isoformat()
    if isinstance(value, dict):
        return {key: _json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(item) for item in value]
    return value


def compute_etag(attributes: dict[str, Any]) -> str:
    """Return a short content hash of an attribute snapshot."""

    canonical = json.dumps(_json_safe(attributes), sort_keys=True, default=str)
    return to_base36(int(hashlib.md5(canonical.encode("utf-8")).hexdigest(), 16))


def filter_logged(attributes: dict[str, Any]) -> dict[str, Any]:
    """Drop unlogged columns and make the snapshot JSON-serializable."""

    unlogged = set(get_settings().UNLOGGED_ATTRIBUTES)
    return {key: _json_safe(value) for key, value in attributes.items() if key not in unlogged}


class UTCDateTime(TypeDecorator):
    """Timezone-aware datetime that comes back aware even from SQLite."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return ensure_utc(value)

    def process_result_value(self, value, dialect):
        return ensure_utc(value)


@runtime_checkable
class Loggable(Protocol):
    """What a log entry needs to know about the entity it describes."""

    uuid: str | None
    owner_uuid: str | None
    created_at: datetime | None
    modified_at: datetime | None

    @property
    def etag(self) -> str | None: ...

    @property
    def logged_attributes(self) -> dict[str, Any] | None: ...


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)


class Resource(Base):
    """An entity addressed by a typed uuid whose mutations are logged."""

    __abstract__ = True

    uuid_prefix: ClassVar[str]
    uuid_reference_columns: ClassVar[tuple[str, ...]] = ("owner_uuid",)

    uuid: Mapped[str] = mapped_column(String(27), unique=True, index=True, nullable=False)
    owner_uuid: Mapped[str | None] = mapped_column(String(27), nullable=True)
    modified_by_user_uuid: Mapped[str | None] = mapped_column(String(27), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, nullable=False)
    modified_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, nullable=False)

    @classmethod
    def kind(cls) -> str:
        name = cls.__name__
        return f"{get_settings().KIND_NAMESPACE}#{name[0].lower()}{name[1:]}"

    @classmethod
    def generate_uuid(cls) -> str:
        random_part = to_base36(secrets.randbelow(36**15)).rjust(15, "0")
        return f"{get_settings().UUID_PREFIX}-{cls.uuid_prefix}-{random_part}"

    @classmethod
    def _snapshot_attrs(cls) -> list:
        # The integer primary key is storage detail; uuid is the identity.
        return [attr for attr in inspect(cls).column_attrs if not attr.columns[0].primary_key]

    def apply_defaults(self) -> None:
        """Fill unset columns from their scalar defaults before the INSERT would."""

        for attr in self._snapshot_attrs():
            default = attr.columns[0].default
            if default is not None and default.is_scalar and getattr(self, attr.key) is None:
                setattr(self, attr.key, default.arg)

    def attribute_values(self) -> dict[str, Any]:
        return {attr.key: getattr(self, attr.key) for attr in self._snapshot_attrs()}

    def previous_attribute_values(self) -> dict[str, Any]:
        """Column values as they were before the pending, unflushed changes."""

        state = inspect(self)
        values: dict[str, Any] = {}
        for attr in self._snapshot_attrs():
            history = state.attrs[attr.key].history
            if history.deleted:
                values[attr.key] = history.deleted[0]
            else:
                values[attr.key] = getattr(self, attr.key)
        return values

    @property
    def etag(self) -> str:
        return compute_etag(self.attribute_values())

    @property
    def logged_attributes(self) -> dict[str, Any]:
        return filter_logged(self.attribute_values())

    def ensure_valid_uuids(self, session: Session) -> None:
        """Reject uuid references to entities that do not exist."""

        from eventlog.models.registry import uuid_exists

        system_uuid = get_settings().system_user_uuid
        for column in self.uuid_reference_columns:
            value = getattr(self, column)
            if value is None or value == self.uuid or value == system_uuid:
                continue
            if not uuid_exists(session, value):
                raise InvalidReference(
                    f"{column} {value} does not refer to an existing object",
                    column=column,
                    uuid=value,
                )

    def permission_to_create(self, actor: Actor | None) -> bool:
        return actor is not None

    def permission_to_update(self, actor: Actor | None) -> bool:
        if actor is None:
            return False
        # Ownership is judged on the stored owner, not on a pending reassignment.
        owner_uuid = self.previous_attribute_values()["owner_uuid"]
        return actor.is_admin or actor.uuid in (owner_uuid, self.uuid)

    def permission_to_delete(self, actor: Actor | None) -> bool:
        return self.permission_to_update(actor)


__all__ = [
    "Base",
    "Loggable",
    "Resource",
    "UTCDateTime",
    "compute_etag",
    "filter_logged",
    "to_base36",
]
