from __future__ import annotations

import pytest

from rtc_model import DateTime, is_monotonic, parse_datetime


def test_parse_datetime_forms():
    assert parse_datetime("2000-01-02 03:04:05") == DateTime(2000, 1, 2, 3, 4, 5)
    assert parse_datetime("2000-01-02T03:04:05") == DateTime(2000, 1, 2, 3, 4, 5)
    assert parse_datetime("2000-01-02 03:04") == DateTime(2000, 1, 2, 3, 4, 0)
    assert parse_datetime("  2024-2-9  ") == DateTime(2024, 2, 9)


def test_parse_keeps_invalid_fields_for_validation():
    # syntax ok, calendar wrong: the codec decides
    assert parse_datetime("2001-02-30 25:00:00") == DateTime(2001, 2, 30, 25, 0, 0)


@pytest.mark.parametrize("bad", ["", "2000/01/01", "2000-01-01 10", "yesterday", "2000-01-01 00:00:00Z"])
def test_parse_datetime_rejects_bad_syntax(bad):
    with pytest.raises(ValueError):
        parse_datetime(bad)


def test_isoformat_and_ordering():
    dt = DateTime(2000, 1, 2)
    assert dt.isoformat() == "2000-01-02 00:00:00"
    assert str(DateTime(2136, 2, 7, 6, 28, 15)) == "2136-02-07 06:28:15"
    assert DateTime(2000, 12, 31, 23, 59, 59) < DateTime(2001, 1, 1)
    assert DateTime(2000, 1, 1, 0, 0, 1) > DateTime(2000, 1, 1)


def test_is_monotonic():
    assert is_monotonic([])
    assert is_monotonic([5, 5, 6])
    assert not is_monotonic([1, 3, 2])
