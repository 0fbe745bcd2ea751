"""User model."""
from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from eventlog.core.actor import Actor

from .base import Resource


class User(Resource):
    """An account whose uuid identifies the actor behind a change."""

    __tablename__ = "users"

    uuid_prefix = "tpzed"

    email: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)
    first_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def permission_to_create(self, actor: Actor | None) -> bool:
        return actor is not None and actor.is_admin

    def permission_to_update(self, actor: Actor | None) -> bool:
        if actor is None:
            return False
        if actor.is_admin:
            return True
        # Users may edit their own profile but not grant themselves admin.
        previous = self.previous_attribute_values()
        return actor.uuid == self.uuid and previous["is_admin"] == self.is_admin

    def permission_to_delete(self, actor: Actor | None) -> bool:
        return actor is not None and actor.is_admin
