"""Follow, follow-request and block schemas."""

from datetime import datetime
from uuid import UUID

from actor_engine.db.enums import FollowRequestStatus
from actor_engine.schemas.base import CamelModel


class FollowRequestPair(CamelModel):
    requester_actor_id: UUID
    target_actor_id: UUID


class FollowRequestStatusResponse(CamelModel):
    status: FollowRequestStatus | None


class FollowRequestRead(CamelModel):
    id: UUID
    requester_actor_id: UUID
    target_actor_id: UUID
    status: FollowRequestStatus
    created_at: datetime
    updated_at: datetime


class FollowPair(CamelModel):
    follower_actor_id: UUID
    followed_actor_id: UUID


class FollowEdgeRead(CamelModel):
    id: UUID
    follower_actor_id: UUID
    followed_actor_id: UUID
    is_active: bool
    created_at: datetime


class FollowCountsResponse(CamelModel):
    followers: int
    following: int


class BlockPair(CamelModel):
    blocker_actor_id: UUID
    blocked_actor_id: UUID
    reason: str | None = None


class BlockRead(CamelModel):
    blocker_actor_id: UUID
    blocked_actor_id: UUID
    reason: str | None
    created_at: datetime


class BlockStatusResponse(CamelModel):
    is_blocking: bool
    is_blocked_by: bool
    blocked_between: bool
