"""
Block Registry - pairwise block checks and viewer block sets.

Blocks are stored directed (blocker -> blocked) but suppress in both
directions. Writes go through follow_service; insert_block/delete_block are
the storage primitives it uses.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from uuid import UUID

from sqlalchemy import delete, or_, and_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from actor_engine.db.models import BlockEdge


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BlockSet:
    """Actors the viewer blocked and actors that blocked the viewer."""

    i_blocked: frozenset[UUID] = field(default_factory=frozenset)
    blocked_me: frozenset[UUID] = field(default_factory=frozenset)

    def hides(self, actor_id: UUID | None) -> bool:
        if actor_id is None:
            return False
        return actor_id in self.i_blocked or actor_id in self.blocked_me


def _pair_clause(a: UUID, b: UUID):
    return or_(
        and_(BlockEdge.blocker_actor_id == a, BlockEdge.blocked_actor_id == b),
        and_(BlockEdge.blocker_actor_id == b, BlockEdge.blocked_actor_id == a),
    )


def is_blocked_between(db: Session, a: UUID, b: UUID) -> bool:
    """True if either actor blocked the other."""
    if a == b:
        return False
    return db.execute(select(BlockEdge.id).where(_pair_clause(a, b)).limit(1)).first() is not None


def is_blocking(db: Session, viewer: UUID, target: UUID) -> bool:
    return _find_block(db, viewer, target) is not None


def is_blocked_by(db: Session, viewer: UUID, target: UUID) -> bool:
    return _find_block(db, target, viewer) is not None


def get_block_set(db: Session, viewer: UUID) -> BlockSet:
    """Both directions in a single query."""
    rows = db.execute(
        select(BlockEdge.blocker_actor_id, BlockEdge.blocked_actor_id).where(
            or_(BlockEdge.blocker_actor_id == viewer, BlockEdge.blocked_actor_id == viewer)
        )
    ).all()

    i_blocked = {blocked for blocker, blocked in rows if blocker == viewer}
    blocked_me = {blocker for blocker, blocked in rows if blocked == viewer}
    return BlockSet(i_blocked=frozenset(i_blocked), blocked_me=frozenset(blocked_me))


def list_blocked(db: Session, blocker: UUID) -> list[BlockEdge]:
    """Blocks created by an actor, newest first."""
    return list(
        db.execute(
            select(BlockEdge)
            .where(BlockEdge.blocker_actor_id == blocker)
            .order_by(BlockEdge.created_at.desc(), BlockEdge.id)
        ).scalars().all()
    )


def _find_block(db: Session, blocker: UUID, blocked: UUID) -> BlockEdge | None:
    return db.execute(
        select(BlockEdge).where(
            BlockEdge.blocker_actor_id == blocker,
            BlockEdge.blocked_actor_id == blocked,
        )
    ).scalar_one_or_none()


# =============================================================================
# Storage primitives (follow_service only)
# =============================================================================


def insert_block(
    db: Session,
    blocker: UUID,
    blocked: UUID,
    reason: str | None = None,
) -> tuple[BlockEdge, bool]:
    """Insert a block edge if absent. Returns (edge, created). Does not commit."""
    edge = _find_block(db, blocker, blocked)
    if edge is not None:
        logger.debug("Block %s -> %s already exists", blocker, blocked)
        return edge, False
    try:
        with db.begin_nested():
            edge = BlockEdge(blocker_actor_id=blocker, blocked_actor_id=blocked, reason=reason)
            db.add(edge)
    except IntegrityError:
        edge = _find_block(db, blocker, blocked)
        if edge is None:
            raise
        return edge, False
    return edge, True


def delete_block(db: Session, blocker: UUID, blocked: UUID) -> bool:
    """Delete a block edge. Does not commit."""
    result = db.execute(
        delete(BlockEdge).where(
            BlockEdge.blocker_actor_id == blocker,
            BlockEdge.blocked_actor_id == blocked,
        )
    )
    return result.rowcount > 0
