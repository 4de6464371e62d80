"""API routers."""

from actor_engine.routers.actors import router as actors_router
from actor_engine.routers.blocks import router as blocks_router
from actor_engine.routers.conversations import router as conversations_router
from actor_engine.routers.follows import router as follows_router
from actor_engine.routers.inbox import router as inbox_router
from actor_engine.routers.notifications import router as notifications_router

__all__ = [
    "actors_router",
    "blocks_router",
    "conversations_router",
    "follows_router",
    "inbox_router",
    "notifications_router",
]
