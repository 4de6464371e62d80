"""
Notification Service - block-aware in-app notifications.

Delivery across a block is a silent no-op: callers cannot tell a suppressed
notification from a delivered one. Listings filter blocked sources after the
query, with the viewer's block set computed once per call.
"""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from actor_engine.core.config import settings
from actor_engine.db.enums import NotificationKind
from actor_engine.db.models import Actor, Notification
from actor_engine.services import actor_service, block_service
from actor_engine.services.errors import NotFoundError, storage_errors


logger = logging.getLogger(__name__)


# =============================================================================
# Delivery
# =============================================================================


def _kind_value(kind: NotificationKind | str) -> str:
    return kind.value if isinstance(kind, NotificationKind) else str(kind)


def create_notification(
    db: Session,
    recipient_actor_id: UUID,
    source_actor_id: UUID | None,
    kind: NotificationKind | str,
    object_type: str | None = None,
    object_id: str | None = None,
    link_path: str | None = None,
    context: dict[str, Any] | None = None,
) -> Notification | None:
    """
    Add a notification to the session unless suppressed. Does not commit.

    Raises NotFoundError when the recipient or a non-system source is unknown.

    Returns None when suppressed:
    - recipient and source are the same actor
    - a block exists between them, either direction
    - the source is sandboxed and the recipient is not

    A None source is a system notification and is always delivered.
    """
    recipient = db.get(Actor, recipient_actor_id)
    if recipient is None:
        raise NotFoundError(f"recipient actor {recipient_actor_id} not found")

    kind_value = _kind_value(kind)

    if source_actor_id is not None:
        source = db.get(Actor, source_actor_id)
        if source is None:
            raise NotFoundError(f"source actor {source_actor_id} not found")
        if source_actor_id == recipient_actor_id:
            logger.debug("Skipping self notification %s for %s", kind_value, recipient_actor_id)
            return None
        if block_service.is_blocked_between(db, recipient_actor_id, source_actor_id):
            logger.debug(
                "Suppressed %s notification %s -> %s (blocked)",
                kind_value,
                source_actor_id,
                recipient_actor_id,
            )
            return None
        if source.is_sandboxed and not recipient.is_sandboxed:
            logger.debug(
                "Suppressed %s notification from sandboxed actor %s",
                kind_value,
                source_actor_id,
            )
            return None

    notification = Notification(
        recipient_actor_id=recipient_actor_id,
        actor_id=source_actor_id,
        kind=kind_value,
        object_type=object_type,
        object_id=str(object_id) if object_id is not None else None,
        link_path=link_path,
        context=dict(context or {}),
    )
    db.add(notification)
    db.flush()
    return notification


@storage_errors
def notify(
    db: Session,
    recipient_actor_id: UUID,
    source_actor_id: UUID | None,
    kind: NotificationKind | str,
    object_type: str | None = None,
    object_id: str | None = None,
    link_path: str | None = None,
    context: dict[str, Any] | None = None,
) -> None:
    """Deliver one notification. Suppression is silent."""
    notification = create_notification(
        db,
        recipient_actor_id,
        source_actor_id,
        kind,
        object_type=object_type,
        object_id=object_id,
        link_path=link_path,
        context=context,
    )
    db.commit()
    if notification is not None:
        logger.info(
            "Notification %s (%s) delivered to %s",
            notification.id,
            notification.kind,
            recipient_actor_id,
        )


@storage_errors
def notify_organization_managers(
    db: Session,
    organization_id: UUID,
    source_actor_id: UUID | None,
    kind: NotificationKind | str,
    object_type: str | None = None,
    object_id: str | None = None,
    link_path: str | None = None,
    context: dict[str, Any] | None = None,
) -> int:
    """
    Fan a notification out to every manager of an organization.

    Each manager is evaluated independently, so one manager's block only
    suppresses their own copy. Returns the number of rows created.
    """
    if source_actor_id is not None:
        actor_service.get_actor(db, source_actor_id)
    manager_actor_ids = actor_service.list_manager_actor_ids(db, organization_id)

    delivered = 0
    for manager_actor_id in manager_actor_ids:
        notification = create_notification(
            db,
            manager_actor_id,
            source_actor_id,
            kind,
            object_type=object_type,
            object_id=object_id,
            link_path=link_path,
            context={**(context or {}), "organization_id": str(organization_id)},
        )
        if notification is not None:
            delivered += 1

    db.commit()
    logger.info(
        "Organization %s notification fan-out: %s of %s managers",
        organization_id,
        delivered,
        len(manager_actor_ids),
    )
    return delivered


# =============================================================================
# Listing
# =============================================================================


def list_inbox(
    db: Session,
    actor_id: UUID,
    limit: int | None = None,
    offset: int = 0,
    unread_only: bool = False,
) -> list[Notification]:
    """
    List notifications for an actor, newest first.

    Pagination applies before block filtering, so a page may come back short.
    """
    if limit is None:
        limit = settings.NOTIFICATION_PAGE_SIZE
    limit = max(1, min(limit, settings.NOTIFICATION_PAGE_SIZE_MAX))

    query = select(Notification).where(Notification.recipient_actor_id == actor_id)
    if unread_only:
        query = query.where(Notification.is_read.is_(False))
    query = query.order_by(Notification.created_at.desc(), Notification.id.desc())
    rows = db.execute(query.offset(max(offset, 0)).limit(limit)).scalars().all()

    block_set = block_service.get_block_set(db, actor_id)
    return [n for n in rows if not block_set.hides(n.actor_id)]


def _count_visible(db: Session, actor_id: UUID, *conditions) -> int:
    sources = db.execute(
        select(Notification.actor_id).where(
            Notification.recipient_actor_id == actor_id,
            *conditions,
        )
    ).scalars().all()
    block_set = block_service.get_block_set(db, actor_id)
    return sum(1 for source in sources if not block_set.hides(source))


def count_unread(db: Session, actor_id: UUID) -> int:
    """Unread notifications, excluding blocked sources."""
    return _count_visible(db, actor_id, Notification.is_read.is_(False))


def count_unseen(db: Session, actor_id: UUID) -> int:
    """Unseen notifications (badge count), excluding blocked sources."""
    return _count_visible(db, actor_id, Notification.is_seen.is_(False))


# =============================================================================
# Marking
# =============================================================================


@storage_errors
def mark_read(db: Session, notification_id: UUID, actor_id: UUID) -> bool:
    """
    Mark one notification read (and seen).

    Scoped by recipient; another actor's notification affects zero rows.
    """
    result = db.execute(
        update(Notification)
        .where(
            Notification.id == notification_id,
            Notification.recipient_actor_id == actor_id,
        )
        .values(is_read=True, is_seen=True)
    )
    db.commit()
    return result.rowcount > 0


@storage_errors
def mark_all_seen(db: Session, actor_id: UUID) -> int:
    """Mark all unseen notifications seen. Returns the number updated."""
    result = db.execute(
        update(Notification)
        .where(
            Notification.recipient_actor_id == actor_id,
            Notification.is_seen.is_(False),
        )
        .values(is_seen=True)
    )
    db.commit()
    return result.rowcount
