"""Audit log model."""
from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Index, String, Text
from sqlalchemy.ext.mutable import MutableDict
from sqlalchemy.orm import Mapped, Session, mapped_column

from eventlog.core.actor import Actor
from eventlog.services.event_log import (
    EventLogRecorder,
    log_permission_to_create,
    log_permission_to_delete,
    log_permission_to_update,
)

from .base import Resource, UTCDateTime


class Log(Resource):
    """A historical record of one create, update or destroy of another resource."""

    __tablename__ = "logs"
    __table_args__ = (
        Index("ix_logs_object_uuid", "object_uuid"),
        Index("ix_logs_event_at", "event_at"),
    )

    uuid_prefix = "57u5n"

    # object_uuid may outlive its subject, so it is never checked for existence.
    object_uuid: Mapped[str | None] = mapped_column(String(255), nullable=False)
    object_owner_uuid: Mapped[str | None] = mapped_column(String(27), nullable=True)
    event_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    event_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    properties: Mapped[dict[str, Any]] = mapped_column(
        MutableDict.as_mutable(JSON), default=dict, nullable=False
    )

    def __init__(self, **kwargs: Any):
        kwargs.setdefault("properties", {})
        super().__init__(**kwargs)

    @property
    def object_kind(self) -> str | None:
        return EventLogRecorder().object_kind(self)

    def ensure_valid_uuids(self, session: Session) -> None:
        # Logs can reference objects that have since been deleted.
        return None

    def permission_to_create(self, actor: Actor | None) -> bool:
        return log_permission_to_create(actor)

    def permission_to_update(self, actor: Actor | None) -> bool:
        return log_permission_to_update(actor)

    def permission_to_delete(self, actor: Actor | None) -> bool:
        return log_permission_to_delete(actor)
