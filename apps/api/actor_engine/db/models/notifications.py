"""SQLAlchemy ORM models."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    ForeignKey,
    Index,
    String,
    Uuid,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from actor_engine.db.base import Base
from actor_engine.utils.time import utcnow


class Notification(Base):
    """
    In-app notification delivered to one actor.

    actor_id is the source actor; NULL marks a system notification.
    """

    __tablename__ = "notifications"
    __table_args__ = (
        Index("idx_notif_recipient_created", "recipient_actor_id", "created_at"),
        Index("idx_notif_recipient_unread", "recipient_actor_id", "is_read"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    recipient_actor_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("actors.id", ondelete="CASCADE"), nullable=False
    )
    actor_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("actors.id", ondelete="SET NULL"), nullable=True
    )

    # Notification kind (enum value)
    kind: Mapped[str] = mapped_column(String(50), nullable=False)

    # Object reference (for click-through)
    object_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    object_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    link_path: Mapped[str | None] = mapped_column(String(500), nullable=True)
    context: Mapped[dict[str, Any]] = mapped_column(
        JSON().with_variant(JSONB, "postgresql"), default=dict, nullable=False
    )

    is_seen: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=text("false"), nullable=False
    )
    is_read: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=text("false"), nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
