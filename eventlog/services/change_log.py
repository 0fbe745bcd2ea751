"""Session hooks that enforce resource policy and record every change as a Log.

Installed on a session factory with :func:`install`; ``eventlog.db`` does this
for every factory it builds. The acting user travels in ``session.info``;
use :func:`acting_as`.
"""
from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any

from sqlalchemy import event
from sqlalchemy.orm import Session

from eventlog.core.actor import Actor
from eventlog.core.logging import get_logger
from eventlog.models.base import Resource, compute_etag, filter_logged
from eventlog.models.log import Log
from eventlog.services.event_log import Clock, EventLogRecorder
from eventlog.utils.errors import MissingRequiredField, PermissionDenied
from eventlog.utils.time import utcnow

logger = get_logger(__name__)

ACTOR_KEY = "actor"
CLOCK_KEY = "clock"


@contextmanager
def acting_as(session: Session, actor: Actor | None, *, clock: Clock | None = None) -> Iterator[Session]:
    """Attribute flushes inside the block to ``actor``, optionally with a fixed clock."""

    previous_actor = session.info.get(ACTOR_KEY)
    previous_clock = session.info.get(CLOCK_KEY)
    session.info[ACTOR_KEY] = actor
    if clock is not None:
        session.info[CLOCK_KEY] = clock
    try:
        yield session
    finally:
        session.info[ACTOR_KEY] = previous_actor
        if previous_clock is None:
            session.info.pop(CLOCK_KEY, None)
        else:
            session.info[CLOCK_KEY] = previous_clock


def current_actor(session: Session) -> Actor | None:
    return session.info.get(ACTOR_KEY)


def recorder_for(session: Session) -> EventLogRecorder:
    return EventLogRecorder(clock=session.info.get(CLOCK_KEY, utcnow))


def _check_permission(obj: Resource, action: str, actor: Actor | None) -> None:
    allowed = getattr(obj, f"permission_to_{action}")(actor)
    if not allowed:
        logger.warning(
            "Permission denied",
            extra={
                "action": action,
                "kind": obj.kind(),
                "uuid": obj.uuid,
                "actor": actor.uuid if actor else None,
            },
        )
        raise PermissionDenied(
            f"{action} of {obj.kind()} {obj.uuid or '(new)'} is not permitted",
            action=action,
            uuid=obj.uuid,
        )


def _stamp_new(obj: Resource, actor: Actor | None, now: datetime) -> None:
    obj.apply_defaults()
    if obj.uuid is None:
        obj.uuid = type(obj).generate_uuid()
    if obj.owner_uuid is None and actor is not None:
        obj.owner_uuid = actor.uuid
    if obj.created_at is None:
        obj.created_at = now
    obj.modified_at = now
    obj.modified_by_user_uuid = actor.uuid if actor else None


def _validate_log(log: Log, recorder: EventLogRecorder) -> None:
    recorder.set_default_event_at(log)
    if not log.object_uuid:
        raise MissingRequiredField("object_uuid is required", field="object_uuid")


def _start_log(
    event_type: str,
    subject: Resource,
    actor: Actor | None,
    now: datetime,
    recorder: EventLogRecorder,
) -> Log:
    log = Log(event_type=event_type)
    _stamp_new(log, actor, now)
    return recorder.fill_object(log, subject)


def record_changes(session: Session, flush_context, instances) -> None:
    actor = current_actor(session)
    recorder = recorder_for(session)
    now = recorder.clock()
    change_logs: list[Log] = []

    for obj in list(session.new):
        if not isinstance(obj, Resource):
            continue
        _check_permission(obj, "create", actor)
        _stamp_new(obj, actor, now)
        obj.ensure_valid_uuids(session)
        if isinstance(obj, Log):
            # Don't log changes to logs.
            _validate_log(obj, recorder)
            continue
        log = _start_log("create", obj, actor, now, recorder)
        recorder.fill_properties(log, "old", None, None)
        recorder.update_to(log, obj)
        change_logs.append(log)

    for obj in list(session.dirty):
        if not isinstance(obj, Resource) or not session.is_modified(obj, include_collections=False):
            continue
        _check_permission(obj, "update", actor)
        previous = obj.previous_attribute_values()
        obj.modified_at = now
        obj.modified_by_user_uuid = actor.uuid if actor else None
        obj.ensure_valid_uuids(session)
        if isinstance(obj, Log):
            _validate_log(obj, recorder)
            continue
        log = _start_log("update", obj, actor, now, recorder)
        recorder.fill_properties(log, "old", compute_etag(previous), filter_logged(previous))
        recorder.update_to(log, obj)
        change_logs.append(log)

    for obj in list(session.deleted):
        if not isinstance(obj, Resource):
            continue
        _check_permission(obj, "delete", actor)
        if isinstance(obj, Log):
            continue
        previous = obj.previous_attribute_values()
        log = _start_log("destroy", obj, actor, now, recorder)
        recorder.fill_properties(log, "old", compute_etag(previous), filter_logged(previous))
        recorder.update_to(log, None)
        change_logs.append(log)

    for log in change_logs:
        _validate_log(log, recorder)
        session.add(log)
        logger.debug(
            "Change logged",
            extra={"event_type": log.event_type, "object_uuid": log.object_uuid, "log_uuid": log.uuid},
        )


def install(target: Any) -> None:
    """Attach :func:`record_changes` to a ``sessionmaker`` or ``Session`` class."""

    if not event.contains(target, "before_flush", record_changes):
        event.listen(target, "before_flush", record_changes)


__all__ = ["acting_as", "current_actor", "install", "record_changes", "recorder_for"]
