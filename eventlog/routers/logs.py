"""Log endpoints."""
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from eventlog.core.actor import Actor
from eventlog.db import get_db
from eventlog.models.log import Log
from eventlog.schemas.log import LogCreate, LogRead, LogUpdate
from eventlog.security import require_actor
from eventlog.services import logs as log_service
from eventlog.utils.errors import error_response

router = APIRouter(prefix="/logs", tags=["logs"])


def _get_or_404(db: Session, uuid: str) -> Log:
    log = log_service.get_log(db, uuid)
    if log is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=error_response("LOG_NOT_FOUND", "Log not found."),
        )
    return log


@router.get("", response_model=list[LogRead], status_code=status.HTTP_200_OK)
def list_logs(
    object_uuid: str | None = Query(default=None),
    event_type: str | None = Query(default=None),
    limit: int = Query(default=log_service.DEFAULT_LIMIT, ge=1, le=log_service.MAX_LIMIT),
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> list[Log]:
    return log_service.list_logs(db, object_uuid=object_uuid, event_type=event_type, limit=limit)


@router.get("/{uuid}", response_model=LogRead)
def get_log(uuid: str, db: Session = Depends(get_db), actor: Actor = Depends(require_actor)) -> Log:
    return _get_or_404(db, uuid)


@router.post("", response_model=LogRead, status_code=status.HTTP_201_CREATED)
def create_log(
    payload: LogCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Log:
    """Append a log entry."""

    return log_service.create_log(db, payload, actor=actor)


@router.patch("/{uuid}", response_model=LogRead)
def update_log(
    uuid: str,
    payload: LogUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Log:
    """Amend a log entry (administrators only)."""

    log = _get_or_404(db, uuid)
    return log_service.update_log(db, log, payload, actor=actor)


@router.delete("/{uuid}", status_code=status.HTTP_204_NO_CONTENT)
def delete_log(uuid: str, db: Session = Depends(get_db), actor: Actor = Depends(require_actor)) -> Response:
    """Remove a log entry (administrators only)."""

    log = _get_or_404(db, uuid)
    log_service.delete_log(db, log, actor=actor)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
