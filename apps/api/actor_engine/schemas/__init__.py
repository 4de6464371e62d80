"""Pydantic schemas for API request/response models."""

from actor_engine.schemas.base import CamelModel, OkResponse
from actor_engine.schemas.actor import (
    ActorRead,
    ActorResolveRequest,
    ActorResolveResponse,
    HumanCreate,
    HumanRead,
    ManagerChange,
    ManagerRead,
    OrganizationCreate,
    OrganizationRead,
    SandboxUpdate,
)
from actor_engine.schemas.inbox import (
    ConversationResponse,
    DeleteForMeRequest,
    DirectConversationRequest,
    EntryRef,
    FolderRequest,
    InboxEntryRead,
    InboxFlagsRequest,
    InboxReadRequest,
    MessageReceived,
    MessageReceivedResponse,
    MuteRequest,
    OneToOneRequest,
    PinRequest,
)
from actor_engine.schemas.notification import (
    FanOutResponse,
    MarkAllSeenResponse,
    NotificationActorRef,
    NotificationCountResponse,
    NotificationCreate,
    NotificationMarkRead,
    NotificationRead,
    OrganizationNotificationCreate,
)
from actor_engine.schemas.relationships import (
    BlockPair,
    BlockRead,
    BlockStatusResponse,
    FollowCountsResponse,
    FollowEdgeRead,
    FollowPair,
    FollowRequestPair,
    FollowRequestRead,
    FollowRequestStatusResponse,
)

__all__ = [
    # Base
    "CamelModel",
    "OkResponse",
    # Actors
    "ActorRead",
    "ActorResolveRequest",
    "ActorResolveResponse",
    "HumanCreate",
    "HumanRead",
    "ManagerChange",
    "ManagerRead",
    "OrganizationCreate",
    "OrganizationRead",
    "SandboxUpdate",
    # Inbox
    "ConversationResponse",
    "DeleteForMeRequest",
    "DirectConversationRequest",
    "EntryRef",
    "FolderRequest",
    "InboxEntryRead",
    "InboxFlagsRequest",
    "InboxReadRequest",
    "MessageReceived",
    "MessageReceivedResponse",
    "MuteRequest",
    "OneToOneRequest",
    "PinRequest",
    # Notifications
    "FanOutResponse",
    "MarkAllSeenResponse",
    "NotificationActorRef",
    "NotificationCountResponse",
    "NotificationCreate",
    "NotificationMarkRead",
    "NotificationRead",
    "OrganizationNotificationCreate",
    # Relationships
    "BlockPair",
    "BlockRead",
    "BlockStatusResponse",
    "FollowCountsResponse",
    "FollowEdgeRead",
    "FollowPair",
    "FollowRequestPair",
    "FollowRequestRead",
    "FollowRequestStatusResponse",
]
