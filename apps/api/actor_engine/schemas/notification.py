"""Notification schemas."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import Field

from actor_engine.schemas.base import CamelModel


class NotificationCreate(CamelModel):
    recipient_actor_id: UUID
    source_actor_id: UUID | None = None
    kind: str = Field(min_length=1, max_length=50)
    object_type: str | None = None
    object_id: str | None = None
    link_path: str | None = None
    context: dict[str, Any] | None = None


class OrganizationNotificationCreate(CamelModel):
    source_actor_id: UUID | None = None
    kind: str = Field(min_length=1, max_length=50)
    object_type: str | None = None
    object_id: str | None = None
    link_path: str | None = None
    context: dict[str, Any] | None = None


class NotificationRead(CamelModel):
    id: UUID
    recipient_actor_id: UUID
    actor_id: UUID | None
    kind: str
    object_type: str | None
    object_id: str | None
    link_path: str | None
    context: dict[str, Any]
    is_seen: bool
    is_read: bool
    created_at: datetime


class NotificationMarkRead(CamelModel):
    id: UUID
    actor_id: UUID


class NotificationActorRef(CamelModel):
    actor_id: UUID


class MarkAllSeenResponse(CamelModel):
    ok: bool
    updated: int


class NotificationCountResponse(CamelModel):
    unread: int
    unseen: int


class FanOutResponse(CamelModel):
    ok: bool
    delivered: int
