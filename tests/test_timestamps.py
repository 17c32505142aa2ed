from __future__ import annotations

from datetime import date, datetime, timezone, timedelta

from src.domain.analytics.timestamps import (
    first_timestamp_ms,
    round_minutes,
    round_one_decimal,
    to_timestamp_ms,
)


class ProtoTimestamp:
    def __init__(self, millis: int):
        self.millis = millis

    def ToMilliseconds(self) -> int:
        return self.millis


def test_datetime_with_timezone() -> None:
    value = datetime(2025, 1, 1, 0, 0, tzinfo=timezone.utc)
    assert to_timestamp_ms(value) == 1735689600000


def test_naive_datetime_is_utc() -> None:
    assert to_timestamp_ms(datetime(2025, 1, 1)) == 1735689600000


def test_offset_datetime_is_converted() -> None:
    value = datetime(2025, 1, 1, 3, 0, tzinfo=timezone(timedelta(hours=3)))
    assert to_timestamp_ms(value) == 1735689600000


def test_date_is_midnight_utc() -> None:
    assert to_timestamp_ms(date(2025, 1, 1)) == 1735689600000


def test_timestamp_wrapper_uses_millisecond_accessor() -> None:
    assert to_timestamp_ms(ProtoTimestamp(1234)) == 1234


def test_iso_strings() -> None:
    assert to_timestamp_ms("2025-01-01T00:00:00Z") == 1735689600000
    assert to_timestamp_ms("2025-01-01T00:00:00.500+00:00") == 1735689600500


def test_unrecognized_values_are_none() -> None:
    for value in (None, "", "ontem", 1735689600000, 12.5, True, {"seconds": 1}, []):
        assert to_timestamp_ms(value) is None


def test_first_timestamp_skips_invalid_keys() -> None:
    record = {"timestamp": "nope", "createdAt": "2025-01-01T00:00:00Z"}
    assert first_timestamp_ms(record, ("timestamp", "createdAt")) == 1735689600000
    assert first_timestamp_ms({}, ("timestamp",)) is None


def test_round_minutes() -> None:
    assert round_minutes(None) is None
    assert round_minutes(2.46) == 2.5


def test_round_one_decimal_rounds_halves_up() -> None:
    assert round_one_decimal(0.25) == 0.3
    assert round_one_decimal(2.25) == 2.3
    assert round_one_decimal(0.24) == 0.2
    assert round_minutes(0.25) == 0.3
