"""
Feed that replays several feeds as one.
"""

import heapq
from functools import reduce
from typing import Iterator, List

from optiback.common.timeframe import Timeframe
from optiback.feeds.event import Event
from optiback.feeds.feed import Feed
from utils.logger import get_logger

logger = get_logger(__name__)


class CombinedFeed(Feed):
    """
    Merges the events of its feeds into a single chronological replay.

    Events of different feeds are not joined, so two feeds with an event at the same time produce two
    events at that time, in the order the feeds were given.

    Example:
        feed = CombinedFeed(stocks_feed, crypto_feed)
    """

    def __init__(self, *feeds: Feed):
        if not feeds:
            logger.error("CombinedFeed requires at least one feed")
            raise ValueError("CombinedFeed requires at least one feed")
        for feed in feeds:
            if not isinstance(feed, Feed):
                raise TypeError(f"Expected a Feed, not '{type(feed).__name__}'")
        self.feeds: List[Feed] = list(feeds)

    @property
    def timeframe(self) -> Timeframe:
        """Union of the timeframes of the combined feeds"""
        return reduce(lambda a, b: a.union(b), (feed.timeframe for feed in self.feeds))

    def play(self, timeframe: Timeframe = Timeframe.INFINITE) -> Iterator[Event]:
        return heapq.merge(*(feed.play(timeframe) for feed in self.feeds), key=lambda event: event.time)
