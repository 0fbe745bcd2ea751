"""Log schemas."""
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class LogCreate(BaseModel):
    object_uuid: str = Field(min_length=1, max_length=255)
    event_type: str = Field(min_length=1, max_length=64)
    event_at: datetime | None = None
    object_owner_uuid: str | None = Field(default=None, max_length=27)
    summary: str | None = None
    properties: dict[str, Any] = Field(default_factory=dict)


class LogUpdate(BaseModel):
    summary: str | None = None
    properties: dict[str, Any] | None = None


class LogRead(BaseModel):
    uuid: str
    owner_uuid: str | None
    created_at: datetime
    modified_at: datetime
    modified_by_user_uuid: str | None
    object_uuid: str
    object_owner_uuid: str | None
    object_kind: str | None
    event_at: datetime | None
    event_type: str | None
    summary: str | None
    properties: dict[str, Any]

    model_config = ConfigDict(from_attributes=True)
