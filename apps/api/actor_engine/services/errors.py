"""Service-level exceptions shared by the engine services."""

from __future__ import annotations

import functools
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session


logger = logging.getLogger(__name__)


class EngineError(Exception):
    """Base exception for engine service errors."""

    pass


class InvalidOperationError(EngineError):
    """Operation is not allowed for the given actors (self-follow, non-member, ...)."""

    pass


class NotFoundError(EngineError):
    """Actor, owner or organization could not be resolved."""

    pass


class BlockedError(EngineError):
    """A block between the two actors prevents the operation."""

    pass


class StorageError(EngineError):
    """The backing store failed. Not retried."""

    pass


def storage_errors(func):
    """
    Wrap a public service function so store failures surface as StorageError.

    The first positional argument must be the Session; it is rolled back
    before re-raising. Engine errors pass through unchanged.
    """

    @functools.wraps(func)
    def wrapper(db: Session, *args, **kwargs):
        try:
            return func(db, *args, **kwargs)
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Storage failure in %s", func.__qualname__)
            raise StorageError(str(exc)) from exc

    return wrapper
