"""Tests for the storage error wrapper."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from actor_engine.services.errors import InvalidOperationError, StorageError, storage_errors


def test_storage_errors_wraps_and_rolls_back():
    session = MagicMock()

    @storage_errors
    def broken(db):
        raise OperationalError("SELECT 1", {}, Exception("server closed the connection"))

    with pytest.raises(StorageError) as exc_info:
        broken(session)

    session.rollback.assert_called_once()
    assert isinstance(exc_info.value.__cause__, OperationalError)


def test_storage_errors_passes_engine_errors_through():
    session = MagicMock()

    @storage_errors
    def rejected(db):
        raise InvalidOperationError("cannot follow yourself")

    with pytest.raises(InvalidOperationError):
        rejected(session)

    session.rollback.assert_not_called()


def test_storage_errors_returns_result():
    @storage_errors
    def ok(db, value, *, scale=1):
        return value * scale

    assert ok(MagicMock(), 3, scale=2) == 6
    assert ok.__name__ == "ok"
