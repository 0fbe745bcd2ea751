"""The acting user on whose behalf a session writes."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from eventlog.config import get_settings


@dataclass(frozen=True)
class Actor:
    uuid: str
    is_admin: bool = False

    @classmethod
    def from_user(cls, user: Any) -> "Actor":
        return cls(uuid=user.uuid, is_admin=bool(user.is_admin))


def system_actor() -> Actor:
    """Return the built-in administrative actor used by scripts and migrations."""

    return Actor(uuid=get_settings().system_user_uuid, is_admin=True)


__all__ = ["Actor", "system_actor"]
