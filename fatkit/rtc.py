"""Wall-clock time as the real-time clock reports it, and FAT timestamp packing."""

from __future__ import annotations

from datetime import datetime
from typing import Callable

RTC_BASE_YEAR = 2000
TIME_ZONE_OFFSET = 2
FAT_EPOCH_YEAR = 1980


def bcd_to_bin(value: int) -> int:
    """Convert a binary-coded decimal byte (e.g. ``0x45``) to its value (45)."""
    return (value & 0x0F) + (value // 16) * 10


def fat_time(hours: int, minutes: int, seconds: int) -> int:
    """Pack a time of day into the 16-bit FAT time field (2-second resolution)."""
    return ((hours << 11) | (minutes << 5) | (seconds // 2)) & 0xFFFF


def fat_date(year: int, month: int, day: int) -> int:
    """Pack a calendar date into the 16-bit FAT date field (years from 1980)."""
    return (((year - FAT_EPOCH_YEAR) << 9) | (month << 5) | day) & 0xFFFF


class Clock:
    """A source of the current time and date with a fixed hour offset.

    Like the hardware clock, only the last two digits of the year are kept and
    are counted from 2000. The hour offset wraps only once it exceeds 24.
    """

    def __init__(
        self,
        now: Callable[[], datetime] | None = None,
        tz_offset: int = TIME_ZONE_OFFSET,
    ) -> None:
        self._now = now if now is not None else datetime.now
        self.tz_offset = tz_offset

    def time(self) -> tuple[int, int, int]:
        """Return ``(hours, minutes, seconds)`` with the offset applied."""
        current = self._now()
        hours = current.hour + self.tz_offset
        if hours > 24:
            hours -= 24
        return hours, current.minute, current.second

    def date(self) -> tuple[int, int, int]:
        """Return ``(year, month, day)``."""
        current = self._now()
        year = current.year % 100 + RTC_BASE_YEAR
        return year, current.month, current.day