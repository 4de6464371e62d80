from datetime import datetime, timedelta, timezone

import pytest

from actor_engine.utils.datetime_parsing import parse_timestamp


def test_parse_iso_with_z_suffix():
    assert parse_timestamp("2026-03-01T10:00:00Z") == datetime(2026, 3, 1, 10, tzinfo=timezone.utc)


def test_parse_naive_values_as_utc():
    naive = datetime(2026, 3, 1, 10, 30)
    assert parse_timestamp(naive) == naive.replace(tzinfo=timezone.utc)
    assert parse_timestamp("2026-03-01T10:30:00") == naive.replace(tzinfo=timezone.utc)


def test_parse_offset_is_normalized_to_utc():
    value = datetime(2026, 3, 1, 12, tzinfo=timezone(timedelta(hours=2)))
    assert parse_timestamp(value) == datetime(2026, 3, 1, 10, tzinfo=timezone.utc)


@pytest.mark.parametrize("raw", [1772359200, "1772359200", "1772359200000", 1772359200000])
def test_parse_epoch_seconds_and_millis(raw):
    assert parse_timestamp(raw) == datetime(2026, 3, 1, 10, tzinfo=timezone.utc)


@pytest.mark.parametrize("raw", [None, "", "   ", "yesterday", True, ["2026-03-01"]])
def test_parse_unrecognized_returns_none(raw):
    assert parse_timestamp(raw) is None
