"""Utility modules."""

from actor_engine.utils.datetime_parsing import parse_timestamp
from actor_engine.utils.time import utcnow

__all__ = [
    "parse_timestamp",
    "utcnow",
]
