from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any, Optional

DEFAULT_DATE_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_TIME_FORMAT = "%H:%M:%S"


def format_timedelta(value: timedelta, time_format: str) -> str:
    """Format a duration with a ``strftime`` style time format.

    Hours are not wrapped at 24 so ``timedelta(days=1, minutes=5)`` renders
    as ``24:05:00`` under the default format. A leading ``-`` marks negative
    durations.
    """
    total = int(value.total_seconds())
    sign = "-" if total < 0 else ""
    total = abs(total)
    hours, remainder = divmod(total, 3600)
    minutes, seconds = divmod(remainder, 60)
    rendered = (
        time_format.replace("%H", f"{hours:02d}")
        .replace("%M", f"{minutes:02d}")
        .replace("%S", f"{seconds:02d}")
        .replace("%f", f"{value.microseconds:06d}")
    )
    return sign + rendered


class ValueFormatter:
    """Converts scalar values to the strings used in paths, queries and forms."""

    def __init__(
        self,
        date_time_format: str = DEFAULT_DATE_TIME_FORMAT,
        time_format: str = DEFAULT_TIME_FORMAT,
    ) -> None:
        self.date_time_format = date_time_format
        self.time_format = time_format

    def format(self, value: Any) -> Optional[str]:
        if value is None:
            return None

        if isinstance(value, datetime):
            # offset-aware values keep their offset
            if value.tzinfo is not None:
                return value.isoformat()
            return value.strftime(self.date_time_format)

        if isinstance(value, date):
            return value.isoformat()

        if isinstance(value, timedelta):
            return format_timedelta(value, self.time_format)

        if isinstance(value, time):
            return value.strftime(self.time_format)

        if isinstance(value, Enum):
            return self.format(value.value)

        return str(value)
