"""SQLAlchemy ORM models for follow edges, follow requests and blocks."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from actor_engine.db.base import Base
from actor_engine.db.enums import FollowRequestStatus
from actor_engine.utils.time import utcnow


class FollowEdge(Base):
    """
    Directed follow relation between two actors.

    One row per ordered pair; unfollow deactivates and re-follow reactivates.
    """

    __tablename__ = "follow_edges"
    __table_args__ = (
        UniqueConstraint("follower_actor_id", "followed_actor_id", name="uq_follow_edge_pair"),
        CheckConstraint("follower_actor_id <> followed_actor_id", name="ck_follow_edge_not_self"),
        Index("idx_follow_edge_followed_active", "followed_actor_id", "is_active"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    follower_actor_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("actors.id", ondelete="CASCADE"), nullable=False
    )
    followed_actor_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("actors.id", ondelete="CASCADE"), nullable=False
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default=text("true"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow, nullable=False)


class FollowRequest(Base):
    """
    Follow-request state for one ordered (requester, target) pair.

    The unique pair constraint keeps at most one pending/accepted row per pair.
    A declined row is reset to pending on re-send; cancel deletes the row.
    """

    __tablename__ = "follow_requests"
    __table_args__ = (
        UniqueConstraint("requester_actor_id", "target_actor_id", name="uq_follow_request_pair"),
        CheckConstraint("requester_actor_id <> target_actor_id", name="ck_follow_request_not_self"),
        Index("idx_follow_request_target_status", "target_actor_id", "status", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    requester_actor_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("actors.id", ondelete="CASCADE"), nullable=False
    )
    target_actor_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("actors.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(20), default=FollowRequestStatus.PENDING.value, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow, nullable=False)


class BlockEdge(Base):
    """
    Block relation, stored directed but enforced in both directions.
    """

    __tablename__ = "block_edges"
    __table_args__ = (
        UniqueConstraint("blocker_actor_id", "blocked_actor_id", name="uq_block_edge_pair"),
        CheckConstraint("blocker_actor_id <> blocked_actor_id", name="ck_block_edge_not_self"),
        Index("idx_block_edge_blocked", "blocked_actor_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    blocker_actor_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("actors.id", ondelete="CASCADE"), nullable=False
    )
    blocked_actor_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("actors.id", ondelete="CASCADE"), nullable=False
    )
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
