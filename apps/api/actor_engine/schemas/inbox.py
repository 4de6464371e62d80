"""Inbox and conversation schemas."""

from datetime import datetime
from typing import Any
from uuid import UUID

from actor_engine.db.enums import InboxFolder
from actor_engine.schemas.base import CamelModel


class InboxEntryRead(CamelModel):
    conversation_id: UUID
    actor_id: UUID
    archived: bool
    archived_until_new: bool
    pinned: bool
    muted: bool
    history_cutoff_at: datetime | None
    folder: InboxFolder
    last_message_id: UUID | None
    last_message_at: datetime | None
    last_read_message_id: UUID | None
    last_read_at: datetime | None
    unread_count: int
    created_at: datetime
    updated_at: datetime


class EntryRef(CamelModel):
    conversation_id: UUID
    actor_id: UUID


class InboxFlagsRequest(EntryRef):
    # Unknown keys are dropped by the service
    patch: dict[str, Any] = {}


class InboxReadRequest(EntryRef):
    last_message_id: UUID | None = None


class MuteRequest(EntryRef):
    muted: bool = True


class PinRequest(EntryRef):
    pinned: bool = True


class DeleteForMeRequest(EntryRef):
    archive: bool = False


class FolderRequest(EntryRef):
    folder: InboxFolder


class OneToOneRequest(CamelModel):
    actor_a: UUID
    actor_b: UUID


class DirectConversationRequest(CamelModel):
    from_actor_id: UUID
    to_actor_id: UUID


class ConversationResponse(CamelModel):
    conversation_id: UUID


class MessageReceived(CamelModel):
    sender_actor_id: UUID
    message_id: UUID
    sent_at: datetime | None = None


class MessageReceivedResponse(CamelModel):
    ok: bool
    recipients: int
