"""Date range and reporting period helpers.

Every stay, block and reporting window is a half-open range of nights
``[start, end)``. Overlap and containment checks across the code base go
through :class:`DateRange` so "today" means the same thing everywhere.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta


class InvalidDateRangeError(ValueError):
    """Raised when a range does not end after it starts."""


@dataclass(frozen=True, slots=True)
class DateRange:
    """Half-open range of nights ``[start, end)``."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end <= self.start:
            raise InvalidDateRangeError("End date must be after start date")

    @property
    def nights(self) -> int:
        return (self.end - self.start).days

    def overlaps(self, other: DateRange) -> bool:
        """Return True when both ranges share at least one night."""
        return self.start < other.end and other.start < self.end

    def contains(self, day: date) -> bool:
        return self.start <= day < self.end

    def days(self) -> list[date]:
        return [self.start + timedelta(days=offset) for offset in range(self.nights)]

    @classmethod
    def single_day(cls, day: date) -> DateRange:
        return cls(day, day + timedelta(days=1))


class PeriodKind(str, enum.Enum):
    """Granularity of a reporting period."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


@dataclass(frozen=True, slots=True)
class Period:
    """A reporting window anchored on a calendar date."""

    kind: PeriodKind
    anchor: date

    def as_range(self) -> DateRange:
        """Return the half-open range covered by this period.

        Weeks follow ISO 8601 and start on Monday.
        """
        anchor = self.anchor
        if self.kind is PeriodKind.DAY:
            return DateRange.single_day(anchor)
        if self.kind is PeriodKind.WEEK:
            start = anchor - timedelta(days=anchor.isoweekday() - 1)
            return DateRange(start, start + timedelta(days=7))
        if self.kind is PeriodKind.MONTH:
            start = anchor.replace(day=1)
            if start.month == 12:
                end = date(start.year + 1, 1, 1)
            else:
                end = date(start.year, start.month + 1, 1)
            return DateRange(start, end)
        return DateRange(date(anchor.year, 1, 1), date(anchor.year + 1, 1, 1))


def coerce_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=UTC)


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, time.max, tzinfo=UTC)


__all__ = [
    "DateRange",
    "InvalidDateRangeError",
    "Period",
    "PeriodKind",
    "coerce_utc",
    "end_of_day",
    "start_of_day",
]
