"""
Calendar aware durations.
"""

import re
from datetime import datetime
from decimal import Decimal
from typing import Union
from zoneinfo import ZoneInfo

import pandas as pd

UTC = ZoneInfo("UTC")

TimeLike = Union[pd.Timestamp, datetime, str]
ZoneLike = Union[str, ZoneInfo]

_NANOS_PER_SECOND = 1_000_000_000
_PATTERN = re.compile(
    r"^P(?:(?P<years>-?\d+)Y)?(?:(?P<months>-?\d+)M)?(?:(?P<days>-?\d+)D)?"
    r"(?:T(?:(?P<hours>-?\d+)H)?(?:(?P<minutes>-?\d+)M)?(?:(?P<seconds>-?\d+(?:\.\d+)?)S)?)?$"
)


def to_utc(time: TimeLike) -> pd.Timestamp:
    """Convert a time into a timezone aware pandas Timestamp in UTC. Naive values are taken as UTC."""
    ts = pd.Timestamp(time)
    if ts.tzinfo is None:
        return ts.tz_localize(UTC)
    return ts.tz_convert(UTC)


def as_zone(zone: ZoneLike) -> ZoneInfo:
    return zone if isinstance(zone, ZoneInfo) else ZoneInfo(zone)


class TimeSpan:
    """
    Immutable time span that combines a calendar part (years, months and days) with an exact
    duration part (hours, minutes, seconds and nanoseconds).

    The calendar part follows calendar arithmetic: adding one month to January 31st gives the last
    day of February, and adding one day across a daylight saving transition keeps the wall clock
    time. The duration part is always exactly that much elapsed time. Years and months are
    normalized into each other, days are kept as is.

    Examples:
        TimeSpan(months=6)
        TimeSpan(days=1, hours=12)
        TimeSpan(years=1) + TimeSpan(months=3)
    """

    __slots__ = ("_years", "_months", "_days", "_duration")

    def __init__(
        self,
        years: int = 0,
        months: int = 0,
        days: int = 0,
        hours: int = 0,
        minutes: int = 0,
        seconds: int = 0,
        nanos: int = 0
    ):
        total_months = years * 12 + months
        # truncate towards zero so the sign of years and months always agrees
        self._years = int(total_months / 12)
        self._months = total_months - self._years * 12
        self._days = days
        self._duration = pd.Timedelta(hours=hours, minutes=minutes, seconds=seconds) + pd.Timedelta(nanos, unit="ns")

    @classmethod
    def _of(cls, total_months: int, days: int, duration: pd.Timedelta) -> "TimeSpan":
        result = cls(months=total_months, days=days)
        result._duration = duration
        return result

    @classmethod
    def parse(cls, text: str) -> "TimeSpan":
        """
        Parse the ISO 8601 style text generated by str(), for example "P1Y2M3DT4H5M6.5S".
        """
        match = _PATTERN.match(text.strip())
        if match is None or text.strip() in ("P", "PT") or text.strip().endswith("T"):
            raise ValueError(f"Cannot parse '{text}' as a TimeSpan")

        parts = {k: v for k, v in match.groupdict().items() if v is not None}
        nanos = 0
        if "seconds" in parts:
            nanos = int(Decimal(parts.pop("seconds")) * _NANOS_PER_SECOND)
        return cls(nanos=nanos, **{k: int(v) for k, v in parts.items()})

    @property
    def years(self) -> int:
        return self._years

    @property
    def months(self) -> int:
        return self._months

    @property
    def days(self) -> int:
        return self._days

    @property
    def duration(self) -> pd.Timedelta:
        """The exact (non-calendar) part of this time span"""
        return self._duration

    @property
    def has_calendar_part(self) -> bool:
        return self._years != 0 or self._months != 0 or self._days != 0

    @property
    def is_zero(self) -> bool:
        return not self.has_calendar_part and self._duration.value == 0

    def add_to(self, time: TimeLike, zone: ZoneLike = UTC) -> pd.Timestamp:
        """
        Add this time span to `time`. The calendar part is applied in the timezone `zone`, after which
        the exact duration is added. The result is in UTC.
        """
        result = to_utc(time)
        if self.is_zero:
            return result
        if self.has_calendar_part:
            local = result.tz_convert(as_zone(zone))
            local = local + pd.DateOffset(years=self._years, months=self._months, days=self._days)
            result = local.tz_convert(UTC)
        return result + self._duration

    def subtract_from(self, time: TimeLike, zone: ZoneLike = UTC) -> pd.Timestamp:
        """
        Subtract this time span from `time`, applying the calendar part in the timezone `zone` first
        and then the exact duration.
        """
        result = to_utc(time)
        if self.is_zero:
            return result
        if self.has_calendar_part:
            local = result.tz_convert(as_zone(zone))
            local = local - pd.DateOffset(years=self._years, months=self._months, days=self._days)
            result = local.tz_convert(UTC)
        return result - self._duration

    def __add__(self, other):
        if isinstance(other, TimeSpan):
            return TimeSpan._of(
                self._years * 12 + self._months + other._years * 12 + other._months,
                self._days + other._days,
                self._duration + other._duration
            )
        return NotImplemented

    def __radd__(self, other):
        if isinstance(other, pd.Timestamp):
            return self.add_to(other)
        return NotImplemented

    def __rsub__(self, other):
        if isinstance(other, pd.Timestamp):
            return self.subtract_from(other)
        return NotImplemented

    def __sub__(self, other):
        if isinstance(other, TimeSpan):
            return self + (-other)
        return NotImplemented

    def __neg__(self) -> "TimeSpan":
        return TimeSpan._of(-(self._years * 12 + self._months), -self._days, -self._duration)

    def __eq__(self, other) -> bool:
        if not isinstance(other, TimeSpan):
            return NotImplemented
        return (
            self._years == other._years
            and self._months == other._months
            and self._days == other._days
            and self._duration == other._duration
        )

    def __hash__(self) -> int:
        return hash((self._years, self._months, self._days, self._duration.value))

    def __str__(self) -> str:
        text = "P"
        if self._years:
            text += f"{self._years}Y"
        if self._months:
            text += f"{self._months}M"
        if self._days or not (self._years or self._months or self._duration.value):
            text += f"{self._days}D"

        nanos = self._duration.value
        if nanos:
            sign = "-" if nanos < 0 else ""
            hours, rest = divmod(abs(nanos), 3600 * _NANOS_PER_SECOND)
            minutes, rest = divmod(rest, 60 * _NANOS_PER_SECOND)
            seconds, fraction = divmod(rest, _NANOS_PER_SECOND)
            text += "T"
            if hours:
                text += f"{sign}{hours}H"
            if minutes:
                text += f"{sign}{minutes}M"
            if seconds or fraction:
                text += f"{sign}{seconds}"
                if fraction:
                    text += "." + f"{fraction:09d}".rstrip("0")
                text += "S"
        return text

    def __repr__(self) -> str:
        return f"TimeSpan({self})"


TimeSpan.ZERO = TimeSpan()
