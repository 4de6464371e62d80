"""SQLAlchemy ORM models."""

from actor_engine.db.models.actors import Actor, Human, Organization, OrganizationManager
from actor_engine.db.models.inbox import Conversation, ConversationMember, InboxEntry
from actor_engine.db.models.notifications import Notification
from actor_engine.db.models.relationships import BlockEdge, FollowEdge, FollowRequest

__all__ = [
    "Actor",
    "BlockEdge",
    "Conversation",
    "ConversationMember",
    "FollowEdge",
    "FollowRequest",
    "Human",
    "InboxEntry",
    "Notification",
    "Organization",
    "OrganizationManager",
]
