"""
Feed backed by historic prices held in pandas DataFrames.
"""

import bisect
from typing import Dict, Iterator, List, Union

import pandas as pd

from optiback.common.asset import Asset
from optiback.common.errors import ConfigurationError
from optiback.common.timeframe import Timeframe
from optiback.common.timespan import to_utc
from optiback.feeds.event import Event, PriceBar
from optiback.feeds.feed import Feed
from utils.logger import get_logger

logger = get_logger(__name__)

REQUIRED_COLUMNS = ['timestamp', 'open', 'high', 'low', 'close']


class HistoricFeed(Feed):
    """
    Feed that replays OHLC(V) price bars of one or more assets.

    Args:
        data: DataFrame per asset (or per symbol) with the columns timestamp, open, high, low, close
            and optionally volume.

    Example:
        feed = HistoricFeed({"AAPL": aapl_df, "MSFT": msft_df})
        for event in feed.play(Timeframe.parse("2020", "2021")):
            ...
    """

    def __init__(self, data: Dict[Union[Asset, str], pd.DataFrame]):
        self._times: List[pd.Timestamp] = []
        self._events: List[Event] = []
        self.assets: List[Asset] = []

        actions: Dict[pd.Timestamp, List[PriceBar]] = {}
        for key, df in data.items():
            asset = key if isinstance(key, Asset) else Asset(key)
            self._validate(asset, df)
            self.assets.append(asset)
            volumes = df['volume'] if 'volume' in df.columns else [float("nan")] * len(df)
            for ts, open_, high, low, close, volume in zip(df['timestamp'], df['open'], df['high'], df['low'], df['close'], volumes):
                bar = PriceBar(asset, float(open_), float(high), float(low), float(close), float(volume))
                actions.setdefault(to_utc(ts), []).append(bar)

        for time in sorted(actions):
            self._times.append(time)
            self._events.append(Event(time, actions[time]))

        logger.info(f"Loaded {len(self._events)} events for {len(self.assets)} asset(s)")

    @staticmethod
    def _validate(asset: Asset, df: pd.DataFrame) -> None:
        if df is None or not isinstance(df, pd.DataFrame):
            logger.error(f"Data for {asset} must be a pandas DataFrame.")
            raise ConfigurationError(f"Data for {asset} must be a pandas DataFrame.")
        for col in REQUIRED_COLUMNS:
            if col not in df.columns:
                logger.error(f"Missing required column '{col}' for {asset}")
                raise ConfigurationError(f"Missing required column '{col}' for {asset}")

    @property
    def timeframe(self) -> Timeframe:
        if not self._events:
            return Timeframe.INFINITE
        return Timeframe(self._times[0], self._times[-1], inclusive=True)

    def __len__(self) -> int:
        return len(self._events)

    def play(self, timeframe: Timeframe = Timeframe.INFINITE) -> Iterator[Event]:
        first = bisect.bisect_left(self._times, timeframe.start)
        for i in range(first, len(self._events)):
            if self._times[i] not in timeframe:
                break
            yield self._events[i]
