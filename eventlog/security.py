"""Resolution of the acting user for API requests.

Authentication happens upstream; the gateway forwards the authenticated
user's uuid in ``X-Actor-Uuid``.
"""
from __future__ import annotations

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from eventlog.core.actor import Actor
from eventlog.db import get_db
from eventlog.models.user import User
from eventlog.utils.errors import error_response


def require_actor(
    db: Session = Depends(get_db),
    x_actor_uuid: str | None = Header(default=None, alias="X-Actor-Uuid"),
) -> Actor:
    """Return the active user behind the request as an :class:`Actor`."""

    if not x_actor_uuid:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error_response("NO_ACTOR", "X-Actor-Uuid header required."),
        )

    user = db.scalar(select(User).where(User.uuid == x_actor_uuid.strip()))
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error_response("UNKNOWN_ACTOR", "Unknown or inactive user."),
        )
    return Actor.from_user(user)


__all__ = ["require_actor"]
