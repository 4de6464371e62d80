"""Enum definitions for application constants."""

from actor_engine.db.enums.actors import ActorKind
from actor_engine.db.enums.inbox import InboxFolder
from actor_engine.db.enums.notifications import NotificationKind, NotificationObjectType
from actor_engine.db.enums.relationships import (
    OPEN_FOLLOW_REQUEST_STATUSES,
    FollowRequestStatus,
)

__all__ = [
    "ActorKind",
    "FollowRequestStatus",
    "InboxFolder",
    "NotificationKind",
    "NotificationObjectType",
    "OPEN_FOLLOW_REQUEST_STATUSES",
]
