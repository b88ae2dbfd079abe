from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from enum import Enum
from uuid import UUID

import pytest

from restbound._utils._formatting import ValueFormatter, format_timedelta


class Status(Enum):
    ACTIVE = "active"


class Level(Enum):
    HIGH = 3


class TestValueFormatter:
    @pytest.fixture
    def formatter(self) -> ValueFormatter:
        return ValueFormatter()

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, None),
            ("text", "text"),
            (123, "123"),
            (1.5, "1.5"),
            (True, "True"),
            (Decimal("10.50"), "10.50"),
            (UUID("12345678-1234-5678-1234-567812345678"), "12345678-1234-5678-1234-567812345678"),
            (Status.ACTIVE, "active"),
            (Level.HIGH, "3"),
            (date(2024, 2, 29), "2024-02-29"),
            (time(8, 30, 15), "08:30:15"),
        ],
    )
    def test_format(self, formatter: ValueFormatter, value, expected):
        assert formatter.format(value) == expected

    def test_naive_datetime_uses_format(self, formatter: ValueFormatter):
        assert formatter.format(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02 03:04:05"

    def test_aware_datetime_keeps_offset(self, formatter: ValueFormatter):
        value = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone(timedelta(hours=2)))

        assert formatter.format(value) == "2024-01-02T03:04:05+02:00"

    def test_custom_date_time_format(self):
        formatter = ValueFormatter(date_time_format="%d/%m/%Y")

        assert formatter.format(datetime(2024, 1, 2)) == "02/01/2024"

    def test_timedelta(self, formatter: ValueFormatter):
        assert formatter.format(timedelta(hours=1, minutes=2, seconds=3)) == "01:02:03"


class TestFormatTimedelta:
    def test_hours_are_not_wrapped(self):
        assert format_timedelta(timedelta(days=1, minutes=5), "%H:%M:%S") == "24:05:00"

    def test_negative_duration(self):
        assert format_timedelta(timedelta(minutes=-90), "%H:%M:%S") == "-01:30:00"
