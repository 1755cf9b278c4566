"""Time window the scan evaluates activity against."""

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from .errors import InvalidWindowError

DEFAULT_MONTHS_BACK = 3


def _months_before(day, months):
    """Shift a date back by calendar months, clamping to the month's last day."""
    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def _parse_date(text, label):
    try:
        return date.fromisoformat(text.strip())
    except (ValueError, AttributeError) as e:
        raise InvalidWindowError(f"Invalid {label} date {text!r}: expected YYYY-MM-DD") from e


def local_timestamp(moment):
    """Unix timestamp for a naive local datetime."""
    return int(moment.timestamp())


@dataclass(frozen=True)
class TimeWindow:
    """Inclusive date range. ``end`` counts through 23:59:59 local time."""

    start: date
    end: date

    def __post_init__(self):
        if not isinstance(self.start, date) or not isinstance(self.end, date):
            raise InvalidWindowError("Window bounds must be dates")
        if self.start > self.end:
            raise InvalidWindowError(f"Window start {self.start} is after end {self.end}")

    @classmethod
    def default(cls, today=None):
        """Last three months up to today."""
        today = today or date.today()
        return cls(_months_before(today, DEFAULT_MONTHS_BACK), today)

    @classmethod
    def parse(cls, start_text=None, end_text=None, today=None):
        """Build a window from ``YYYY-MM-DD`` strings; ``None`` means default."""
        default = cls.default(today)
        start = _parse_date(start_text, "start") if start_text else default.start
        end = _parse_date(end_text, "end") if end_text else default.end
        return cls(start, end)

    @classmethod
    def last_days(cls, days, today=None):
        """Look-back window covering the last ``days`` days."""
        if days < 0:
            raise InvalidWindowError(f"Look-back days must be >= 0, got {days}")
        today = today or date.today()
        return cls(today - timedelta(days=days), today)

    @property
    def start_ts(self):
        return local_timestamp(datetime.combine(self.start, time.min))

    @property
    def end_ts(self):
        return local_timestamp(datetime.combine(self.end, time(23, 59, 59)))

    @property
    def span_days(self):
        return (self.end - self.start).days

    def days_ago(self, today=None):
        """Return (start_days_ago, end_days_ago) relative to ``today``."""
        today = today or date.today()
        return (today - self.start).days, (today - self.end).days

    def contains(self, ts):
        return self.start_ts <= ts <= self.end_ts

    def __str__(self):
        return f"{self.start.isoformat()} .. {self.end.isoformat()}"
