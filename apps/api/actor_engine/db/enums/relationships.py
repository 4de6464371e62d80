"""Follow-request enums."""

from enum import Enum


class FollowRequestStatus(str, Enum):
    """Stored follow-request states. "none" is the absence of a row."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


# Statuses that block a new request from being created for the same ordered pair
OPEN_FOLLOW_REQUEST_STATUSES = (
    FollowRequestStatus.PENDING,
    FollowRequestStatus.ACCEPTED,
)
