"""
Time intervals used to select the data a run processes.
"""

from typing import List, Literal, Optional

import numpy as np
import pandas as pd

from optiback.common.config import Config
from optiback.common.errors import ConfigurationError
from optiback.common.timespan import UTC, TimeLike, TimeSpan, ZoneLike, as_zone, to_utc
from utils.logger import get_logger

logger = get_logger(__name__)

MIN_TIME = pd.Timestamp("1900-01-01", tz=UTC)
MAX_TIME = pd.Timestamp("2200-01-01", tz=UTC)

_ONE_YEAR_SECONDS = 365.0 * 24 * 3600

SamplingPolicy = Literal["uniform", "non_overlapping"]


class Timeframe:
    """
    A time interval from `start` to `end`. The end is exclusive unless `inclusive` is set.

    Times are stored as timezone aware pandas Timestamps in UTC and must lie between 1900-01-01 and
    2200-01-01. A timeframe that starts at the lower bound or ends at the upper bound is considered
    unbounded on that side; `Timeframe.INFINITE` spans the whole supported range.

    Examples:
        Timeframe.parse("2019-01-01", "2020-01-01")
        Timeframe.from_years(2015, 2020)
        tf.split(TimeSpan(months=3))
    """

    __slots__ = ("start", "end", "inclusive")

    INFINITE: "Timeframe"

    def __init__(self, start: TimeLike, end: TimeLike, inclusive: bool = False):
        start = to_utc(start)
        end = to_utc(end)
        if start > end:
            raise ConfigurationError(f"start ({start}) should not be after end ({end})")
        if start < MIN_TIME or end > MAX_TIME:
            raise ConfigurationError(f"timeframe [{start}, {end}] is outside of [{MIN_TIME}, {MAX_TIME}]")
        self.start = start
        self.end = end
        self.inclusive = inclusive

    @classmethod
    def parse(cls, first: str, last: str, inclusive: bool = False) -> "Timeframe":
        """Create a timeframe from two date(time) strings, for example "2019", "2019-01" or "2019-01-01T09:30:00Z" """
        return cls(pd.Timestamp(first), pd.Timestamp(last), inclusive)

    @classmethod
    def from_years(cls, first: int, last: int, zone: ZoneLike = UTC) -> "Timeframe":
        """Timeframe from the start of year `first` up to and including all of year `last`"""
        start = pd.Timestamp(year=first, month=1, day=1, tz=as_zone(zone))
        end = pd.Timestamp(year=last + 1, month=1, day=1, tz=as_zone(zone))
        return cls(start, end)

    @classmethod
    def past(cls, period: TimeSpan) -> "Timeframe":
        """Timeframe ending now and starting `period` ago"""
        now = pd.Timestamp.now(tz=UTC)
        return cls(period.subtract_from(now), now)

    @classmethod
    def next(cls, period: TimeSpan) -> "Timeframe":
        """Timeframe starting now and ending `period` from now"""
        now = pd.Timestamp.now(tz=UTC)
        return cls(now, period.add_to(now))

    def is_infinite(self) -> bool:
        return self == Timeframe.INFINITE

    def is_finite(self) -> bool:
        """True if both the start and the end are known"""
        return self.start != MIN_TIME and self.end != MAX_TIME

    def is_empty(self) -> bool:
        return not self.inclusive and self.start == self.end

    @property
    def duration(self) -> pd.Timedelta:
        return self.end - self.start

    def __contains__(self, time: TimeLike) -> bool:
        ts = to_utc(time)
        if self.inclusive:
            return self.start <= ts <= self.end
        return self.start <= ts < self.end

    def to_inclusive(self) -> "Timeframe":
        return Timeframe(self.start, self.end, True)

    def to_exclusive(self) -> "Timeframe":
        return Timeframe(self.start, self.end, False)

    def union(self, other: "Timeframe") -> "Timeframe":
        """Smallest timeframe that covers both this timeframe and `other`"""
        start = min(self.start, other.start)
        if self.end == other.end:
            inclusive = self.inclusive or other.inclusive
        else:
            inclusive = self.inclusive if self.end > other.end else other.inclusive
        return Timeframe(start, max(self.end, other.end), inclusive)

    def intersect(self, other: "Timeframe") -> Optional["Timeframe"]:
        """Overlapping part of this timeframe and `other`, or None if they don't overlap"""
        start = max(self.start, other.start)
        end = min(self.end, other.end)
        if start > end:
            return None
        if self.end == other.end:
            inclusive = self.inclusive and other.inclusive
        else:
            inclusive = self.inclusive if self.end < other.end else other.inclusive
        result = Timeframe(start, end, inclusive)
        return None if result.is_empty() else result

    def extend(self, before: TimeSpan = TimeSpan.ZERO, after: TimeSpan = TimeSpan.ZERO) -> "Timeframe":
        """
        Timeframe that starts `before` earlier and ends `after` later. Unbounded sides stay unbounded,
        so extending INFINITE returns INFINITE.
        """
        start = self.start if self.start == MIN_TIME else max(MIN_TIME, before.subtract_from(self.start))
        end = self.end if self.end == MAX_TIME else min(MAX_TIME, after.add_to(self.end))
        return Timeframe(start, end, self.inclusive)

    def _require_finite(self, operation: str) -> None:
        if not self.is_finite():
            logger.error(f"Cannot {operation} an unbounded timeframe {self}")
            raise ConfigurationError(f"Cannot {operation} an unbounded timeframe")

    def split(
        self,
        period: TimeSpan,
        overlap: TimeSpan = TimeSpan.ZERO,
        include_remaining: bool = True
    ) -> List["Timeframe"]:
        """
        Split this timeframe into consecutive sub-timeframes of length `period`.

        Args:
            period: Length of each sub-timeframe.
            overlap: How much consecutive sub-timeframes overlap; the next one starts at
                `previous.end - overlap`.
            include_remaining: Whether to include a last sub-timeframe that is shorter than `period`.

        Returns:
            The sub-timeframes in chronological order. The last one inherits `inclusive` from this
            timeframe if it ends at this timeframe's end.
        """
        self._require_finite("split")

        result = []
        offset = self.start
        while offset < self.end:
            last = period.add_to(offset)
            if last <= offset:
                raise ConfigurationError(f"period {period} should be positive")
            if last >= self.end:
                if include_remaining or last == self.end:
                    result.append(Timeframe(offset, self.end, self.inclusive))
                break
            result.append(Timeframe(offset, last))
            next_offset = overlap.subtract_from(last)
            if next_offset <= offset:
                raise ConfigurationError(f"overlap {overlap} should be smaller than period {period}")
            offset = next_offset
        return result

    def sample(
        self,
        period: TimeSpan,
        samples: int = 1,
        resolution: str = "D",
        random_state: Optional[np.random.RandomState] = None,
        policy: SamplingPolicy = "uniform"
    ) -> List["Timeframe"]:
        """
        Draw `samples` random sub-timeframes of length `period`.

        Args:
            period: Length of each sampled timeframe.
            samples: Number of timeframes to draw.
            resolution: pandas frequency the sampled start times are floored to (for example "D").
            random_state: Random source, defaults to `Config.random`.
            policy: "uniform" draws start times uniformly between the start and `end - period`, so
                windows may overlap. "non_overlapping" draws without replacement from the windows
                produced by `split(period, include_remaining=False)`.
        """
        self._require_finite("sample")
        if samples < 1:
            raise ConfigurationError(f"samples should be at least 1, found {samples}")

        rng = random_state or Config.random

        if policy == "non_overlapping":
            candidates = self.split(period, include_remaining=False)
            if samples > len(candidates):
                raise ConfigurationError(
                    f"Cannot draw {samples} non-overlapping windows of {period}, only {len(candidates)} fit"
                )
            picks = rng.choice(len(candidates), size=samples, replace=False)
            return [candidates[i] for i in picks]

        if policy != "uniform":
            raise ConfigurationError(f"Unknown sampling policy '{policy}'")

        last_start = period.subtract_from(self.end)
        span = (last_start - self.start).value
        if span <= 0:
            raise ConfigurationError(f"period {period} is too large for timeframe {self}")

        result = []
        for _ in range(samples):
            offset = int(rng.randint(0, span, dtype=np.int64))
            start = (self.start + pd.Timedelta(offset, unit="ns")).floor(resolution)
            start = max(start, self.start)
            result.append(Timeframe(start, period.add_to(start)))
        return result

    def annualize(self, rate: float) -> float:
        """Convert a return `rate` realized over this timeframe into an annual rate"""
        years = self.duration.total_seconds() / _ONE_YEAR_SECONDS
        return (1.0 + rate) ** (1.0 / years) - 1.0

    def is_single_day(self, zone: ZoneLike = UTC) -> bool:
        last = self.end if self.inclusive else self.end - pd.Timedelta(1, unit="ns")
        return self.start.tz_convert(as_zone(zone)).date() == last.tz_convert(as_zone(zone)).date()

    def to_timeline(self, step: TimeSpan) -> List[pd.Timestamp]:
        """Times from the start up to the end, `step` apart"""
        self._require_finite("create a timeline for")
        result = []
        time = self.start
        while time in self:
            result.append(time)
            next_time = step.add_to(time)
            if next_time <= time:
                raise ConfigurationError(f"step {step} should be positive")
            time = next_time
        return result

    def __add__(self, period: TimeSpan) -> "Timeframe":
        if not isinstance(period, TimeSpan):
            return NotImplemented
        return Timeframe(period.add_to(self.start), period.add_to(self.end), self.inclusive)

    def __sub__(self, period: TimeSpan) -> "Timeframe":
        if not isinstance(period, TimeSpan):
            return NotImplemented
        return Timeframe(period.subtract_from(self.start), period.subtract_from(self.end), self.inclusive)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Timeframe):
            return NotImplemented
        return self.start == other.start and self.end == other.end and self.inclusive == other.inclusive

    def __hash__(self) -> int:
        return hash((self.start.value, self.end.value, self.inclusive))

    def __str__(self) -> str:
        if self.is_infinite():
            return "[-∞ - +∞]"
        closing = "]" if self.inclusive else ">"
        return f"[{self.start.isoformat()} - {self.end.isoformat()}{closing}"

    def __repr__(self) -> str:
        return f"Timeframe({self})"


Timeframe.INFINITE = Timeframe(MIN_TIME, MAX_TIME, inclusive=True)

