"""
Half-open time-of-day intervals used by availability and bookings.

Times travel through the system as zero-padded 24h ``"HH:MM"`` strings so
they sort lexicographically; this module is the single place that parses
and compares them.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import time
import re
from typing import Iterable, List, Tuple

TIME_PATTERN = r"^([01][0-9]|2[0-3]):[0-5][0-9]$"
TIME_REGEX = re.compile(TIME_PATTERN)
DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


def normalize_time(value: object) -> str:
    """Validate and return an ``HH:MM`` string; ``datetime.time`` is accepted too."""
    if isinstance(value, time):
        return value.strftime("%H:%M")
    if isinstance(value, str):
        candidate = value.strip()
        if TIME_REGEX.fullmatch(candidate):
            return candidate
    raise ValueError(f"Invalid time format: {value}. Expected HH:MM format.")


def to_minutes(value: str) -> int:
    hour, minute = value.split(":")
    return int(hour) * 60 + int(minute)


def from_minutes(total: int) -> str:
    return f"{total // 60:02d}:{total % 60:02d}"


def is_valid_range(start_time: str, end_time: str) -> bool:
    return to_minutes(start_time) < to_minutes(end_time)


@dataclass(frozen=True)
class TimeRange:
    """A ``[start, end)`` interval within a single day."""

    start: str
    end: str

    @classmethod
    def of(cls, start_time: object, end_time: object) -> "TimeRange":
        return cls(normalize_time(start_time), normalize_time(end_time))

    @property
    def start_minutes(self) -> int:
        return to_minutes(self.start)

    @property
    def end_minutes(self) -> int:
        return to_minutes(self.end)

    @property
    def is_valid(self) -> bool:
        return self.start_minutes < self.end_minutes

    def overlaps(self, other: "TimeRange") -> bool:
        """
        True when ``self`` (the proposed interval) intersects ``other``.

        Evaluated as three clauses: the proposed start falls inside the
        existing interval, the proposed end falls inside it, or the proposed
        interval engulfs it. Touching endpoints never overlap.
        """
        p_start, p_end = self.start_minutes, self.end_minutes
        e_start, e_end = other.start_minutes, other.end_minutes
        return (
            (e_start <= p_start < e_end)
            or (e_start < p_end <= e_end)
            or (p_start <= e_start and p_end >= e_end)
        )

    def contains(self, other: "TimeRange") -> bool:
        """True when ``other`` lies entirely inside this interval."""
        return other.start_minutes >= self.start_minutes and other.end_minutes <= self.end_minutes

    def subtract(self, busy: Iterable["TimeRange"]) -> List["TimeRange"]:
        """Return the free sub-intervals left after removing ``busy`` ranges."""
        cursor = self.start_minutes
        end = self.end_minutes
        free: List[TimeRange] = []
        for b_start, b_end in _sorted_clipped(busy, cursor, end):
            if b_start > cursor:
                free.append(TimeRange(from_minutes(cursor), from_minutes(b_start)))
            cursor = max(cursor, b_end)
            if cursor >= end:
                break
        if cursor < end:
            free.append(TimeRange(from_minutes(cursor), from_minutes(end)))
        return free

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"


def _sorted_clipped(busy: Iterable[TimeRange], lower: int, upper: int) -> List[Tuple[int, int]]:
    clipped = []
    for item in busy:
        b_start = max(item.start_minutes, lower)
        b_end = min(item.end_minutes, upper)
        if b_start < b_end:
            clipped.append((b_start, b_end))
    clipped.sort()
    return clipped
