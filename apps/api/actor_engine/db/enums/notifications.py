"""Notification-related enums."""

from enum import Enum


class NotificationKind(str, Enum):
    """Types of in-app notifications."""

    # Relationship notifications
    FOLLOW = "follow"
    FOLLOW_REQUEST = "follow_request"
    FOLLOW_REQUEST_ACCEPTED = "follow_request_accepted"
    FOLLOW_REQUEST_DECLINED = "follow_request_declined"

    # Content notifications
    POST_REACTION = "post_reaction"
    COMMENT = "comment"
    COMMENT_REPLY = "comment_reply"
    MENTION = "mention"
    MESSAGE = "message"

    # Organization (vport) notifications
    REVIEW = "review"
    MANAGER_REQUEST = "manager_request"
    PRICE_SUGGESTION = "price_suggestion"

    # Broadcasts with no source actor
    SYSTEM = "system"


class NotificationObjectType(str, Enum):
    """What a notification points at (for click-through)."""

    FOLLOW = "follow"
    FOLLOW_REQUEST = "follow_request"
    POST = "post"
    COMMENT = "comment"
    CONVERSATION = "conversation"
    REVIEW = "review"
    ORGANIZATION = "organization"
