"""Service layer modules."""

from actor_engine.services.errors import (
    BlockedError,
    EngineError,
    InvalidOperationError,
    NotFoundError,
    StorageError,
)

# Import service modules (not individual functions) for cleaner access.
# Order matters: leaves first.
from actor_engine.services import actor_service
from actor_engine.services import block_service
from actor_engine.services import notification_service
from actor_engine.services import inbox_service
from actor_engine.services import follow_service

__all__ = [
    # Errors
    "EngineError",
    "InvalidOperationError",
    "NotFoundError",
    "BlockedError",
    "StorageError",
    # Service modules
    "actor_service",
    "block_service",
    "notification_service",
    "inbox_service",
    "follow_service",
]
