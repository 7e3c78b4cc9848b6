"""
Rental Service — Calendar-day helpers

The ledger is keyed by calendar day. Clients send either plain ISO dates
("2025-02-01") or full ISO timestamps from a date picker; both collapse to a
date with no time component.
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterator

from rental_service.core.exceptions import InvalidDateError, InvalidRangeError, RangeTooLargeError


def parse_calendar_day(value: str | date | None, field: str = "date") -> date:
    if value is None or value == "":
        raise InvalidDateError(f"{field} is required.")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        raise InvalidDateError(f"Invalid date format for {field}: {value!r}")


@dataclass(frozen=True)
class DateRange:
    """Closed interval [start, end] of calendar days."""

    start: date
    end: date

    @classmethod
    def parse(cls, start, end, max_days: int | None = None) -> "DateRange":
        date_range = cls(parse_calendar_day(start, "startDate"), parse_calendar_day(end, "endDate"))
        date_range.validate(max_days)
        return date_range

    def validate(self, max_days: int | None = None) -> None:
        if self.start > self.end:
            raise InvalidRangeError(
                f"startDate {self.start.isoformat()} is after endDate {self.end.isoformat()}"
            )
        if max_days is not None and len(self) > max_days:
            raise RangeTooLargeError(
                f"Date range spans {len(self)} days; the maximum is {max_days}."
            )

    def __len__(self) -> int:
        return (self.end - self.start).days + 1

    def __iter__(self) -> Iterator[date]:
        current = self.start
        while current <= self.end:
            yield current
            current += timedelta(days=1)
