"""
Relationship Engine - follows, follow requests and blocks.

Follow-request lifecycle for an ordered (requester, target) pair:

    none -> pending -> accepted
                    -> declined   (may be re-sent: declined -> pending)
    pending -> none               (cancel deletes the row)

Transitions are conditional UPDATEs on status = 'pending'; a stale transition
affects zero rows and returns False instead of raising.

This module is the only writer of follow and block tables.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import and_, delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from actor_engine.db.enums import (
    OPEN_FOLLOW_REQUEST_STATUSES,
    FollowRequestStatus,
    NotificationKind,
    NotificationObjectType,
)
from actor_engine.db.models import BlockEdge, FollowEdge, FollowRequest
from actor_engine.services import actor_service, block_service, notification_service
from actor_engine.services.errors import (
    BlockedError,
    InvalidOperationError,
    StorageError,
    storage_errors,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FollowCounts:
    followers: int
    following: int


def _require_distinct_actors(db: Session, a: UUID, b: UUID, action: str) -> None:
    if a == b:
        raise InvalidOperationError(f"cannot {action} yourself")
    actor_service.get_actor(db, a)
    actor_service.get_actor(db, b)


# =============================================================================
# Follow requests
# =============================================================================


def _find_request(db: Session, requester: UUID, target: UUID) -> FollowRequest | None:
    return db.execute(
        select(FollowRequest).where(
            FollowRequest.requester_actor_id == requester,
            FollowRequest.target_actor_id == target,
        )
    ).scalar_one_or_none()


def get_follow_request_status(db: Session, requester: UUID, target: UUID) -> FollowRequestStatus | None:
    """Current status, or None when no request exists."""
    request = _find_request(db, requester, target)
    if request is None:
        return None
    return FollowRequestStatus(request.status)


def _notify_request_sent(db: Session, request: FollowRequest) -> None:
    notification_service.create_notification(
        db,
        request.target_actor_id,
        request.requester_actor_id,
        NotificationKind.FOLLOW_REQUEST,
        object_type=NotificationObjectType.FOLLOW_REQUEST.value,
        object_id=str(request.id),
    )


@storage_errors
def send_follow_request(db: Session, requester: UUID, target: UUID) -> FollowRequestStatus:
    """
    Send a follow request.

    An existing pending or accepted request is returned unchanged with no new
    row and no notification. A declined request is reset to pending.

    Raises:
        InvalidOperationError: requester and target are the same actor
        BlockedError: a block exists in either direction
    """
    _require_distinct_actors(db, requester, target, "follow")
    if block_service.is_blocked_between(db, requester, target):
        raise BlockedError("follow request not allowed")

    existing = _find_request(db, requester, target)
    if existing is not None:
        status = FollowRequestStatus(existing.status)
        if status in OPEN_FOLLOW_REQUEST_STATUSES:
            logger.debug("Follow request %s -> %s already %s", requester, target, status.value)
            return status

        result = db.execute(
            update(FollowRequest)
            .where(
                FollowRequest.id == existing.id,
                FollowRequest.status == FollowRequestStatus.DECLINED.value,
            )
            .values(status=FollowRequestStatus.PENDING.value)
        )
        if result.rowcount == 0:
            db.refresh(existing)
            return FollowRequestStatus(existing.status)
        request = existing
    else:
        try:
            with db.begin_nested():
                request = FollowRequest(requester_actor_id=requester, target_actor_id=target)
                db.add(request)
        except IntegrityError:
            logger.info("Follow request %s -> %s created concurrently; re-reading", requester, target)
            winner = _find_request(db, requester, target)
            if winner is None:
                raise StorageError(f"follow request {requester} -> {target} vanished after conflict")
            return FollowRequestStatus(winner.status)

    _notify_request_sent(db, request)
    db.commit()
    logger.info("Follow request %s -> %s pending", requester, target)
    return FollowRequestStatus.PENDING


def _transition_pending(db: Session, requester: UUID, target: UUID, new_status: FollowRequestStatus) -> bool:
    result = db.execute(
        update(FollowRequest)
        .where(
            FollowRequest.requester_actor_id == requester,
            FollowRequest.target_actor_id == target,
            FollowRequest.status == FollowRequestStatus.PENDING.value,
        )
        .values(status=new_status.value)
    )
    return result.rowcount > 0


@storage_errors
def accept_follow_request(db: Session, requester: UUID, target: UUID) -> bool:
    """
    Accept a pending request and create the follow edge requester -> target.

    Returns False if the request is not pending (stale or double accept).

    Raises:
        BlockedError: a block exists between the pair; the request stays pending
    """
    if block_service.is_blocked_between(db, requester, target):
        raise BlockedError("follow request cannot be accepted")

    if not _transition_pending(db, requester, target, FollowRequestStatus.ACCEPTED):
        logger.debug("Accept %s -> %s: not pending", requester, target)
        return False

    edge, _ = _upsert_follow_edge(db, requester, target)
    notification_service.create_notification(
        db,
        requester,
        target,
        NotificationKind.FOLLOW_REQUEST_ACCEPTED,
        object_type=NotificationObjectType.FOLLOW.value,
        object_id=str(edge.id),
    )
    db.commit()
    logger.info("Follow request %s -> %s accepted", requester, target)
    return True


@storage_errors
def decline_follow_request(db: Session, requester: UUID, target: UUID) -> bool:
    """Decline a pending request. Returns False if it is not pending."""
    if not _transition_pending(db, requester, target, FollowRequestStatus.DECLINED):
        logger.debug("Decline %s -> %s: not pending", requester, target)
        return False

    notification_service.create_notification(
        db,
        requester,
        target,
        NotificationKind.FOLLOW_REQUEST_DECLINED,
        object_type=NotificationObjectType.FOLLOW_REQUEST.value,
    )
    db.commit()
    logger.info("Follow request %s -> %s declined", requester, target)
    return True


@storage_errors
def cancel_follow_request(db: Session, requester: UUID, target: UUID) -> bool:
    """Withdraw a pending request (state returns to none). Idempotent."""
    result = db.execute(
        delete(FollowRequest).where(
            FollowRequest.requester_actor_id == requester,
            FollowRequest.target_actor_id == target,
            FollowRequest.status == FollowRequestStatus.PENDING.value,
        )
    )
    db.commit()
    if result.rowcount == 0:
        logger.debug("Cancel %s -> %s: nothing pending", requester, target)
        return False
    logger.info("Follow request %s -> %s cancelled", requester, target)
    return True


def _list_requests(db: Session, column, actor_id: UUID, status: FollowRequestStatus) -> list[FollowRequest]:
    return list(
        db.execute(
            select(FollowRequest)
            .where(column == actor_id, FollowRequest.status == status.value)
            .order_by(FollowRequest.created_at.desc(), FollowRequest.id)
        ).scalars().all()
    )


def list_incoming_requests(
    db: Session,
    target: UUID,
    status: FollowRequestStatus = FollowRequestStatus.PENDING,
) -> list[FollowRequest]:
    return _list_requests(db, FollowRequest.target_actor_id, target, status)


def list_outgoing_requests(
    db: Session,
    requester: UUID,
    status: FollowRequestStatus = FollowRequestStatus.PENDING,
) -> list[FollowRequest]:
    return _list_requests(db, FollowRequest.requester_actor_id, requester, status)


# =============================================================================
# Follow edges
# =============================================================================


def _find_edge(db: Session, follower: UUID, followed: UUID) -> FollowEdge | None:
    return db.execute(
        select(FollowEdge).where(
            FollowEdge.follower_actor_id == follower,
            FollowEdge.followed_actor_id == followed,
        )
    ).scalar_one_or_none()


def _upsert_follow_edge(db: Session, follower: UUID, followed: UUID) -> tuple[FollowEdge, bool]:
    """Create or reactivate an edge. Returns (edge, changed). Does not commit."""
    edge = _find_edge(db, follower, followed)
    if edge is None:
        try:
            with db.begin_nested():
                edge = FollowEdge(follower_actor_id=follower, followed_actor_id=followed)
                db.add(edge)
            return edge, True
        except IntegrityError:
            edge = _find_edge(db, follower, followed)
            if edge is None:
                raise

    if edge.is_active:
        return edge, False
    edge.is_active = True
    db.flush()
    return edge, True


@storage_errors
def follow(db: Session, follower: UUID, followed: UUID) -> FollowEdge:
    """
    Follow a public actor directly.

    Notifies the followed actor only when the edge is new or reactivated.

    Raises:
        InvalidOperationError: follower and followed are the same actor
        BlockedError: a block exists in either direction
    """
    _require_distinct_actors(db, follower, followed, "follow")
    if block_service.is_blocked_between(db, follower, followed):
        raise BlockedError("follow not allowed")

    edge, changed = _upsert_follow_edge(db, follower, followed)
    if changed:
        notification_service.create_notification(
            db,
            followed,
            follower,
            NotificationKind.FOLLOW,
            object_type=NotificationObjectType.FOLLOW.value,
            object_id=str(edge.id),
        )
    db.commit()
    if changed:
        logger.info("Actor %s now follows %s", follower, followed)
    return edge


@storage_errors
def unfollow(db: Session, follower: UUID, followed: UUID) -> bool:
    """
    Deactivate a follow edge. Returns False when not following.

    An accepted request for the pair is removed so a new one can be sent.
    """
    result = db.execute(
        update(FollowEdge)
        .where(
            FollowEdge.follower_actor_id == follower,
            FollowEdge.followed_actor_id == followed,
            FollowEdge.is_active.is_(True),
        )
        .values(is_active=False)
    )
    db.execute(
        delete(FollowRequest).where(
            FollowRequest.requester_actor_id == follower,
            FollowRequest.target_actor_id == followed,
            FollowRequest.status == FollowRequestStatus.ACCEPTED.value,
        )
    )
    db.commit()
    if result.rowcount == 0:
        return False
    logger.info("Actor %s unfollowed %s", follower, followed)
    return True


def is_following(db: Session, follower: UUID, followed: UUID) -> bool:
    edge = _find_edge(db, follower, followed)
    return edge is not None and edge.is_active


def follower_counts(db: Session, actor_id: UUID) -> FollowCounts:
    """Active follower / following counts."""
    followers = db.execute(
        select(func.count(FollowEdge.id)).where(
            FollowEdge.followed_actor_id == actor_id,
            FollowEdge.is_active.is_(True),
        )
    ).scalar_one()
    following = db.execute(
        select(func.count(FollowEdge.id)).where(
            FollowEdge.follower_actor_id == actor_id,
            FollowEdge.is_active.is_(True),
        )
    ).scalar_one()
    return FollowCounts(followers=followers, following=following)


# =============================================================================
# Blocks
# =============================================================================


def _apply_block_side_effects(db: Session, blocker: UUID, blocked: UUID) -> None:
    """
    Cut the follow relationship between a newly blocked pair. Does not commit.

    Both directions:
    - active follow edges are deactivated
    - pending requests are declined (no notification)
    - accepted requests are removed so a request can be sent after unblocking
    """
    pair = or_(
        and_(FollowEdge.follower_actor_id == blocker, FollowEdge.followed_actor_id == blocked),
        and_(FollowEdge.follower_actor_id == blocked, FollowEdge.followed_actor_id == blocker),
    )
    edges = db.execute(
        update(FollowEdge)
        .where(pair, FollowEdge.is_active.is_(True))
        .values(is_active=False)
        .execution_options(synchronize_session=False)
    )

    request_pair = or_(
        and_(FollowRequest.requester_actor_id == blocker, FollowRequest.target_actor_id == blocked),
        and_(FollowRequest.requester_actor_id == blocked, FollowRequest.target_actor_id == blocker),
    )
    declined = db.execute(
        update(FollowRequest)
        .where(request_pair, FollowRequest.status == FollowRequestStatus.PENDING.value)
        .values(status=FollowRequestStatus.DECLINED.value)
        .execution_options(synchronize_session=False)
    )
    db.execute(
        delete(FollowRequest)
        .where(request_pair, FollowRequest.status == FollowRequestStatus.ACCEPTED.value)
        .execution_options(synchronize_session=False)
    )
    logger.info(
        "Block %s -> %s: %s follow edge(s) removed, %s request(s) declined",
        blocker,
        blocked,
        edges.rowcount,
        declined.rowcount,
    )


@storage_errors
def block(db: Session, blocker: UUID, blocked: UUID, reason: str | None = None) -> BlockEdge:
    """
    Block an actor. Idempotent.

    The first block between a pair ends their follow relationship in both
    directions; repeating it changes nothing.
    """
    _require_distinct_actors(db, blocker, blocked, "block")
    edge, created = block_service.insert_block(db, blocker, blocked, reason=reason)
    if created:
        _apply_block_side_effects(db, blocker, blocked)
    db.commit()
    logger.info("Actor %s blocked %s", blocker, blocked)
    return edge


@storage_errors
def unblock(db: Session, blocker: UUID, blocked: UUID) -> bool:
    removed = block_service.delete_block(db, blocker, blocked)
    db.commit()
    if removed:
        logger.info("Actor %s unblocked %s", blocker, blocked)
    return removed
