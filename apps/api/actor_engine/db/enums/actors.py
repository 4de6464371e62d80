"""Actor-related enums."""

from enum import Enum


class ActorKind(str, Enum):
    """What an actor stands for."""

    HUMAN = "human"
    ORGANIZATION = "organization"

    @classmethod
    def has_value(cls, value: str) -> bool:
        return value in cls._value2member_map_
