"""Construction of log entries describing changes to other entities.

The recorder only shapes the entry it is handed: it fills identity and
ownership from the subject, merges point-in-time snapshots into the
``properties`` bag and derives ``event_at`` from the event type. Storage,
validation failures and permission denials belong to the persistence layer
(see ``eventlog.services.change_log``), which asks the policy predicates
defined here.
"""
from __future__ import annotations

import copy
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from eventlog.core.actor import Actor
from eventlog.utils.time import utcnow

Clock = Callable[[], datetime]


def log_permission_to_create(actor: Actor | None) -> bool:
    """Anyone may append to the log."""

    return True


def log_permission_to_update(actor: Actor | None) -> bool:
    """Only administrators may rewrite history."""

    return actor is not None and actor.is_admin


log_permission_to_delete = log_permission_to_update


class EventLogRecorder:
    """Populate log entries from the entities they describe.

    ``clock`` supplies "now" for destroy events and default event times;
    ``registry`` is a uuid type prefix -> kind snapshot used to resolve
    ``object_kind``. When omitted, the registry is built from the mapped
    resource classes on each lookup.
    """

    def __init__(self, clock: Clock = utcnow, registry: Mapping[str, str] | None = None):
        self.clock = clock
        self.registry = registry

    def fill_object(self, entry: Any, subject: Any) -> Any:
        if entry.object_uuid is None:
            entry.object_uuid = subject.uuid
        entry.object_owner_uuid = getattr(subject, "owner_uuid", None)
        if entry.summary is None:
            entry.summary = f"{entry.event_type} of {subject.uuid}"
        return entry

    def fill_properties(
        self,
        entry: Any,
        age: str,
        etag: str | None,
        attributes: Any,
    ) -> Any:
        if entry.properties is None:
            entry.properties = {}
        entry.properties.update(
            {
                f"{age}_etag": etag,
                f"{age}_attributes": copy.deepcopy(attributes),
            }
        )
        return entry

    def update_to(self, entry: Any, subject: Any | None) -> Any:
        self.fill_properties(
            entry,
            "new",
            getattr(subject, "etag", None),
            getattr(subject, "logged_attributes", None),
        )
        if entry.event_type == "create":
            if subject is not None:
                entry.event_at = subject.created_at
        elif entry.event_type == "update":
            if subject is not None:
                entry.event_at = subject.modified_at
        elif entry.event_type == "destroy":
            entry.event_at = self.clock()
        return entry

    def object_kind(self, entry: Any) -> str | None:
        from eventlog.models.registry import kind_for_uuid, kind_registry

        registry = self.registry if self.registry is not None else kind_registry()
        return kind_for_uuid(entry.object_uuid, registry)

    def set_default_event_at(self, entry: Any) -> Any:
        if entry.event_at is None:
            entry.event_at = self.clock()
        return entry

    permission_to_create = staticmethod(log_permission_to_create)
    permission_to_update = staticmethod(log_permission_to_update)
    permission_to_delete = staticmethod(log_permission_to_delete)


__all__ = [
    "Clock",
    "EventLogRecorder",
    "log_permission_to_create",
    "log_permission_to_delete",
    "log_permission_to_update",
]
