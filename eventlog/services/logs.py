"""Log service: queries and explicit log writes on behalf of an actor."""
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from eventlog.core.actor import Actor
from eventlog.models.log import Log
from eventlog.models.registry import find_resource
from eventlog.schemas.log import LogCreate, LogUpdate
from eventlog.services.change_log import acting_as, recorder_for
from eventlog.utils.errors import EventLogError

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 100
MAX_LIMIT = 1000


def _commit(db: Session) -> None:
    try:
        db.commit()
    except EventLogError:
        db.rollback()
        raise


def list_logs(
    db: Session,
    *,
    object_uuid: str | None = None,
    event_type: str | None = None,
    limit: int = DEFAULT_LIMIT,
) -> list[Log]:
    """Return logs, most recent event first."""

    stmt = select(Log)
    if object_uuid:
        stmt = stmt.where(Log.object_uuid == object_uuid)
    if event_type:
        stmt = stmt.where(Log.event_type == event_type)
    stmt = stmt.order_by(Log.event_at.desc(), Log.id.desc()).limit(min(limit, MAX_LIMIT))
    return list(db.scalars(stmt).all())


def get_log(db: Session, uuid: str) -> Log | None:
    return db.scalar(select(Log).where(Log.uuid == uuid))


def create_log(db: Session, payload: LogCreate, *, actor: Actor | None) -> Log:
    """Persist a log entry, capturing the subject's owner when it still exists."""

    log = Log(**payload.model_dump())
    with acting_as(db, actor):
        subject = find_resource(db, payload.object_uuid)
        if subject is not None:
            recorder_for(db).fill_object(log, subject)
        db.add(log)
        _commit(db)
    db.refresh(log)
    logger.info(
        "Log created",
        extra={"log_uuid": log.uuid, "object_uuid": log.object_uuid, "event_type": log.event_type},
    )
    return log


def update_log(db: Session, log: Log, payload: LogUpdate, *, actor: Actor | None) -> Log:
    """Set the summary and merge properties; the flush hook enforces admin-only policy."""

    with acting_as(db, actor):
        if payload.summary is not None:
            log.summary = payload.summary
        if payload.properties:
            log.properties.update(payload.properties)
        _commit(db)
    db.refresh(log)
    return log


def delete_log(db: Session, log: Log, *, actor: Actor | None) -> None:
    with acting_as(db, actor):
        db.delete(log)
        _commit(db)
    logger.info("Log deleted", extra={"log_uuid": log.uuid, "actor": actor.uuid if actor else None})


__all__ = ["create_log", "delete_log", "get_log", "list_logs", "update_log"]
