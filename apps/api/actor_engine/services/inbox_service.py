"""
Inbox Visibility Engine - conversations and per-actor inbox entries.

An entry is visible when it is not archived, and when hidden until new, only
while it has unread messages:

    NOT archived AND (NOT archived_until_new OR unread_count > 0)

Unread counters only move through single UPDATE statements
(unread_count + 1, unread_count = 0).
"""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import and_, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from actor_engine.db.enums import InboxFolder
from actor_engine.db.models import Conversation, ConversationMember, InboxEntry
from actor_engine.services import actor_service, block_service
from actor_engine.services.errors import (
    BlockedError,
    InvalidOperationError,
    NotFoundError,
    StorageError,
    storage_errors,
)
from actor_engine.utils.datetime_parsing import parse_timestamp
from actor_engine.utils.time import utcnow


logger = logging.getLogger(__name__)

# Patchable inbox flags, keyed by accepted spelling
FLAG_FIELDS = {
    "archived": "archived",
    "archived_until_new": "archived_until_new",
    "archivedUntilNew": "archived_until_new",
    "pinned": "pinned",
    "muted": "muted",
    "history_cutoff_at": "history_cutoff_at",
    "historyCutoffAt": "history_cutoff_at",
}


def visible_entry_clause():
    return and_(
        InboxEntry.archived.is_(False),
        or_(InboxEntry.archived_until_new.is_(False), InboxEntry.unread_count > 0),
    )


def pair_key_for(actor_a: UUID, actor_b: UUID) -> str:
    """Canonical one-to-one key: "<low id>::<high id>"."""
    low, high = sorted([str(actor_a), str(actor_b)])
    return f"{low}::{high}"


# =============================================================================
# Entries
# =============================================================================


def get_entry(db: Session, conversation_id: UUID, actor_id: UUID) -> InboxEntry | None:
    return db.execute(
        select(InboxEntry).where(
            InboxEntry.conversation_id == conversation_id,
            InboxEntry.actor_id == actor_id,
        )
    ).scalar_one_or_none()


def _ensure_entry(db: Session, conversation_id: UUID, actor_id: UUID) -> InboxEntry:
    entry = get_entry(db, conversation_id, actor_id)
    if entry is not None:
        return entry
    try:
        with db.begin_nested():
            entry = InboxEntry(conversation_id=conversation_id, actor_id=actor_id)
            db.add(entry)
    except IntegrityError:
        entry = get_entry(db, conversation_id, actor_id)
        if entry is None:
            raise
    return entry


@storage_errors
def ensure_entry(db: Session, conversation_id: UUID, actor_id: UUID) -> InboxEntry:
    """Get or create the inbox entry for an actor in a conversation."""
    if db.get(Conversation, conversation_id) is None:
        raise NotFoundError(f"conversation {conversation_id} not found")
    actor_service.get_actor(db, actor_id)
    entry = _ensure_entry(db, conversation_id, actor_id)
    db.commit()
    return entry


def list_visible_inbox(
    db: Session,
    actor_id: UUID,
    folder: InboxFolder | str | None = None,
    include_archived: bool = False,
) -> list[InboxEntry]:
    """
    Visible entries for an actor, most recent message first.

    Entries without messages sort last, newest entry first. include_archived
    skips the visibility predicate and returns every entry the actor has.
    """
    query = select(InboxEntry).where(InboxEntry.actor_id == actor_id)
    if not include_archived:
        query = query.where(visible_entry_clause())
    if folder is not None:
        query = query.where(InboxEntry.folder == _folder_value(folder))
    query = query.order_by(
        InboxEntry.last_message_at.desc().nulls_last(),
        InboxEntry.created_at.desc(),
    )
    return list(db.execute(query).scalars().all())


@storage_errors
def mark_read(
    db: Session,
    conversation_id: UUID,
    actor_id: UUID,
    last_seen_message_id: UUID | None = None,
) -> bool:
    """
    Reset the unread counter for an actor's entry.

    Idempotent. Returns False when the actor has no entry.
    """
    values: dict[str, Any] = {"unread_count": 0, "last_read_at": utcnow()}
    if last_seen_message_id is not None:
        values["last_read_message_id"] = last_seen_message_id

    result = db.execute(
        update(InboxEntry)
        .where(
            InboxEntry.conversation_id == conversation_id,
            InboxEntry.actor_id == actor_id,
        )
        .values(**values)
    )
    db.commit()
    if result.rowcount == 0:
        logger.debug("mark_read: no entry for actor %s in %s", actor_id, conversation_id)
        return False
    return True


_BOOL_STRINGS = {"true": True, "false": False, "1": True, "0": False}


def _parse_flag(key: str, raw_value: Any) -> bool:
    if isinstance(raw_value, bool):
        return raw_value
    if isinstance(raw_value, int) and raw_value in (0, 1):
        return bool(raw_value)
    if isinstance(raw_value, str) and raw_value.strip().lower() in _BOOL_STRINGS:
        return _BOOL_STRINGS[raw_value.strip().lower()]
    raise InvalidOperationError(f"invalid boolean for {key}: {raw_value!r}")


def _normalize_patch(patch: dict[str, Any]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for key, raw_value in (patch or {}).items():
        field_name = FLAG_FIELDS.get(key)
        if field_name is None:
            logger.debug("Dropping unknown inbox flag %r", key)
            continue
        if field_name == "history_cutoff_at":
            if raw_value is None:
                values[field_name] = None
                continue
            parsed = parse_timestamp(raw_value)
            if parsed is None:
                raise InvalidOperationError(f"invalid timestamp for {key}: {raw_value!r}")
            values[field_name] = parsed
        else:
            values[field_name] = _parse_flag(key, raw_value)
    return values


@storage_errors
def set_flags(db: Session, conversation_id: UUID, actor_id: UUID, patch: dict[str, Any]) -> bool:
    """
    Apply a whitelisted patch of visibility flags.

    Unknown keys are dropped. Returns False when the actor has no entry; an
    empty effective patch is a no-op.
    """
    values = _normalize_patch(patch)

    if not values:
        return get_entry(db, conversation_id, actor_id) is not None

    result = db.execute(
        update(InboxEntry)
        .where(
            InboxEntry.conversation_id == conversation_id,
            InboxEntry.actor_id == actor_id,
        )
        .values(**values)
    )
    db.commit()
    if result.rowcount == 0:
        logger.debug("set_flags: no entry for actor %s in %s", actor_id, conversation_id)
        return False
    logger.info("Inbox flags %s set for actor %s in %s", sorted(values), actor_id, conversation_id)
    return True


def archive(db: Session, conversation_id: UUID, actor_id: UUID) -> bool:
    return set_flags(db, conversation_id, actor_id, {"archived": True, "archived_until_new": False})


def hide_until_new(db: Session, conversation_id: UUID, actor_id: UUID) -> bool:
    return set_flags(db, conversation_id, actor_id, {"archived": False, "archived_until_new": True})


def unarchive(db: Session, conversation_id: UUID, actor_id: UUID) -> bool:
    return set_flags(db, conversation_id, actor_id, {"archived": False, "archived_until_new": False})


def set_muted(db: Session, conversation_id: UUID, actor_id: UUID, muted: bool) -> bool:
    return set_flags(db, conversation_id, actor_id, {"muted": muted})


def set_pinned(db: Session, conversation_id: UUID, actor_id: UUID, pinned: bool) -> bool:
    return set_flags(db, conversation_id, actor_id, {"pinned": pinned})


def clear_history_from_now(db: Session, conversation_id: UUID, actor_id: UUID) -> bool:
    """Hide earlier messages for this actor only. Membership and unread are untouched."""
    return set_flags(db, conversation_id, actor_id, {"history_cutoff_at": utcnow()})


def _folder_value(folder: InboxFolder | str) -> str:
    if isinstance(folder, InboxFolder):
        return folder.value
    if not InboxFolder.has_value(folder):
        raise InvalidOperationError(f"unknown inbox folder '{folder}'")
    return folder


@storage_errors
def move_to_folder(db: Session, conversation_id: UUID, actor_id: UUID, folder: InboxFolder | str) -> bool:
    folder_value = _folder_value(folder)
    result = db.execute(
        update(InboxEntry)
        .where(
            InboxEntry.conversation_id == conversation_id,
            InboxEntry.actor_id == actor_id,
        )
        .values(folder=folder_value)
    )
    db.commit()
    return result.rowcount > 0


# =============================================================================
# Conversations
# =============================================================================


def _find_conversation_by_pair_key(db: Session, pair_key: str) -> Conversation | None:
    return db.execute(
        select(Conversation).where(Conversation.pair_key == pair_key)
    ).scalar_one_or_none()


def _find_member(db: Session, conversation_id: UUID, actor_id: UUID) -> ConversationMember | None:
    return db.execute(
        select(ConversationMember).where(
            ConversationMember.conversation_id == conversation_id,
            ConversationMember.actor_id == actor_id,
        )
    ).scalar_one_or_none()


def _ensure_member(db: Session, conversation_id: UUID, actor_id: UUID) -> ConversationMember:
    member = _find_member(db, conversation_id, actor_id)
    if member is not None:
        return member
    try:
        with db.begin_nested():
            member = ConversationMember(conversation_id=conversation_id, actor_id=actor_id)
            db.add(member)
    except IntegrityError:
        member = _find_member(db, conversation_id, actor_id)
        if member is None:
            raise
    return member


def _require_actors(db: Session, *actor_ids: UUID) -> None:
    found = {actor.id for actor in actor_service.actors_of(db, list(actor_ids))}
    missing = [str(actor_id) for actor_id in actor_ids if actor_id not in found]
    if missing:
        raise NotFoundError(f"actor(s) not found: {', '.join(missing)}")


@storage_errors
def get_or_create_one_to_one(db: Session, actor_a: UUID, actor_b: UUID) -> UUID:
    """
    Return the one-to-one conversation between two actors, creating it if absent.

    Argument order does not matter. A concurrent creator losing the
    unique-constraint race re-reads the winner's conversation exactly once.
    """
    if actor_a == actor_b:
        raise InvalidOperationError("cannot open a conversation with yourself")
    _require_actors(db, actor_a, actor_b)

    pair_key = pair_key_for(actor_a, actor_b)
    conversation = _find_conversation_by_pair_key(db, pair_key)
    if conversation is None:
        try:
            with db.begin_nested():
                conversation = Conversation(is_group=False, pair_key=pair_key)
                db.add(conversation)
            logger.info("Created one-to-one conversation %s (%s)", conversation.id, pair_key)
        except IntegrityError:
            logger.info("Conversation %s created concurrently; re-reading", pair_key)
            conversation = _find_conversation_by_pair_key(db, pair_key)
            if conversation is None:
                raise StorageError(f"conversation {pair_key} vanished after conflict")

    conversation_id = conversation.id
    for actor_id in (actor_a, actor_b):
        _ensure_member(db, conversation_id, actor_id)
        _ensure_entry(db, conversation_id, actor_id)
    db.commit()
    return conversation_id


@storage_errors
def start_direct_conversation(db: Session, from_actor_id: UUID, to_actor_id: UUID) -> UUID:
    """
    Open (or reopen) a direct thread on behalf of from_actor_id.

    Raises:
        BlockedError: a block exists between the two actors
    """
    if from_actor_id == to_actor_id:
        raise InvalidOperationError("cannot open a conversation with yourself")
    if block_service.is_blocked_between(db, from_actor_id, to_actor_id):
        raise BlockedError("conversation not allowed")

    conversation_id = get_or_create_one_to_one(db, from_actor_id, to_actor_id)
    unarchive(db, conversation_id, from_actor_id)
    return conversation_id


def _require_active_member(db: Session, conversation_id: UUID, actor_id: UUID) -> ConversationMember:
    member = _find_member(db, conversation_id, actor_id)
    if member is None or not member.is_active:
        raise InvalidOperationError(f"actor {actor_id} is not a member of {conversation_id}")
    return member


@storage_errors
def record_incoming_message(
    db: Session,
    conversation_id: UUID,
    sender_actor_id: UUID,
    message_id: UUID,
    sent_at: Any = None,
) -> int:
    """
    Apply a new message to every active member's inbox entry.

    Recipients get the last-message pointer and an atomic unread increment;
    the sender only gets the pointer, as do members blocked in either
    direction. Archive flags are left alone.
    Returns the number of recipients whose unread count was incremented.
    """
    if db.get(Conversation, conversation_id) is None:
        raise NotFoundError(f"conversation {conversation_id} not found")
    _require_active_member(db, conversation_id, sender_actor_id)

    message_at = parse_timestamp(sent_at) if sent_at is not None else None
    if message_at is None:
        message_at = utcnow()

    member_ids = list(
        db.execute(
            select(ConversationMember.actor_id).where(
                ConversationMember.conversation_id == conversation_id,
                ConversationMember.is_active.is_(True),
            )
        ).scalars().all()
    )
    for actor_id in member_ids:
        _ensure_entry(db, conversation_id, actor_id)

    # Out-of-order deliveries never move the pointer backwards
    db.execute(
        update(InboxEntry)
        .where(
            InboxEntry.conversation_id == conversation_id,
            InboxEntry.actor_id.in_(member_ids),
            or_(InboxEntry.last_message_at.is_(None), InboxEntry.last_message_at <= message_at),
        )
        .values(last_message_id=message_id, last_message_at=message_at)
        .execution_options(synchronize_session=False)
    )

    # No unread across a block in either direction
    block_set = block_service.get_block_set(db, sender_actor_id)
    recipients = [
        actor_id
        for actor_id in member_ids
        if actor_id != sender_actor_id and not block_set.hides(actor_id)
    ]
    incremented = 0
    if recipients:
        result = db.execute(
            update(InboxEntry)
            .where(
                InboxEntry.conversation_id == conversation_id,
                InboxEntry.actor_id.in_(recipients),
            )
            .values(unread_count=InboxEntry.unread_count + 1)
            .execution_options(synchronize_session=False)
        )
        incremented = result.rowcount

    db.commit()
    logger.info(
        "Message %s in %s from %s: %s recipient(s)",
        message_id,
        conversation_id,
        sender_actor_id,
        incremented,
    )
    return incremented


@storage_errors
def leave_conversation(db: Session, conversation_id: UUID, actor_id: UUID) -> bool:
    """
    Leave a conversation.

    Group: membership is deactivated and the entry archived.
    Direct: the thread is hidden for this actor until a new message arrives.
    """
    conversation = db.get(Conversation, conversation_id)
    if conversation is None:
        raise NotFoundError(f"conversation {conversation_id} not found")
    member = _require_active_member(db, conversation_id, actor_id)

    if conversation.is_group:
        member.is_active = False
        flags = {"archived": True, "archived_until_new": False}
    else:
        flags = {"archived": False, "archived_until_new": True}

    _ensure_entry(db, conversation_id, actor_id)
    db.execute(
        update(InboxEntry)
        .where(
            InboxEntry.conversation_id == conversation_id,
            InboxEntry.actor_id == actor_id,
        )
        .values(unread_count=0, **flags)
    )
    db.commit()
    logger.info("Actor %s left conversation %s", actor_id, conversation_id)
    return True


@storage_errors
def delete_thread_for_me(
    db: Session,
    conversation_id: UUID,
    actor_id: UUID,
    archive: bool = False,
) -> bool:
    """
    One-sided delete: history cutoff now, pointer cleared, unread reset.

    The thread comes back on the next message unless archive is set.
    Returns False when the actor has no entry.
    """
    if archive:
        flags = {"archived": True, "archived_until_new": False}
    else:
        flags = {"archived": False, "archived_until_new": True}

    result = db.execute(
        update(InboxEntry)
        .where(
            InboxEntry.conversation_id == conversation_id,
            InboxEntry.actor_id == actor_id,
        )
        .values(
            history_cutoff_at=utcnow(),
            last_message_id=None,
            last_message_at=None,
            unread_count=0,
            **flags,
        )
    )
    db.commit()
    return result.rowcount > 0
