"""Inbox enums."""

from enum import Enum


class InboxFolder(str, Enum):
    """Folder a conversation is filed under for one actor."""

    INBOX = "inbox"
    REQUESTS = "requests"
    SPAM = "spam"
    ARCHIVED = "archived"

    @classmethod
    def has_value(cls, value: str) -> bool:
        return value in cls._value2member_map_
