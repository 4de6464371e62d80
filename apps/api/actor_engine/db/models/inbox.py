"""SQLAlchemy ORM models for conversations and per-actor inbox state."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from actor_engine.db.base import Base
from actor_engine.db.enums import InboxFolder
from actor_engine.utils.time import utcnow


class Conversation(Base):
    """
    A message thread.

    One-to-one threads carry a canonical pair_key ("<low id>::<high id>") with a
    unique constraint, so creating (A, B) and (B, A) yields the same row.
    """

    __tablename__ = "conversations"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    is_group: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=text("false"), nullable=False
    )
    pair_key: Mapped[str | None] = mapped_column(String(100), unique=True, nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    members: Mapped[list["ConversationMember"]] = relationship(
        back_populates="conversation",
        cascade="all, delete-orphan",
    )


class ConversationMember(Base):
    """Actor membership in a conversation. Leaving a group deactivates the row."""

    __tablename__ = "conversation_members"
    __table_args__ = (
        UniqueConstraint("conversation_id", "actor_id", name="uq_conversation_member"),
        Index("idx_conversation_member_actor", "actor_id", "is_active"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    conversation_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False
    )
    actor_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("actors.id", ondelete="CASCADE"), nullable=False
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default=text("true"), nullable=False
    )
    joined_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    conversation: Mapped["Conversation"] = relationship(back_populates="members")


class InboxEntry(Base):
    """
    Per-(conversation, actor) visibility and unread state.

    archived and archived_until_new are independent hide reasons; see
    inbox_service.visible_entry_clause for how they combine. history_cutoff_at
    only advises message listings and never affects membership or counters.
    """

    __tablename__ = "inbox_entries"
    __table_args__ = (
        UniqueConstraint("conversation_id", "actor_id", name="uq_inbox_entry"),
        CheckConstraint("unread_count >= 0", name="ck_inbox_entry_unread_non_negative"),
        Index("idx_inbox_entry_actor_last_message", "actor_id", "last_message_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    conversation_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False
    )
    actor_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("actors.id", ondelete="CASCADE"), nullable=False
    )

    # Visibility flags
    archived: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=text("false"), nullable=False
    )
    archived_until_new: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=text("false"), nullable=False
    )
    pinned: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=text("false"), nullable=False
    )
    muted: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=text("false"), nullable=False
    )
    history_cutoff_at: Mapped[datetime | None] = mapped_column(nullable=True)
    folder: Mapped[str] = mapped_column(
        String(20), default=InboxFolder.INBOX.value, nullable=False
    )

    # Read model
    last_message_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    last_message_at: Mapped[datetime | None] = mapped_column(nullable=True)
    last_read_message_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    last_read_at: Mapped[datetime | None] = mapped_column(nullable=True)
    unread_count: Mapped[int] = mapped_column(
        Integer, default=0, server_default=text("0"), nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow, nullable=False)
