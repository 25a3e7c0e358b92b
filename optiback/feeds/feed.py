import abc
from typing import Iterator

from optiback.common.timeframe import Timeframe
from optiback.feeds.event import Event


class Feed(abc.ABC):
    """
    A source of time ordered market events. Feeds are read-only: replaying a feed never changes it,
    so the same feed can be replayed by many runs at the same time.
    """

    @property
    def timeframe(self) -> Timeframe:
        """
        The timeframe covered by this feed. Feeds that don't know their time range in advance return
        `Timeframe.INFINITE`.
        """
        return Timeframe.INFINITE

    @abc.abstractmethod
    def play(self, timeframe: Timeframe = Timeframe.INFINITE) -> Iterator[Event]:
        """
        Replay the events of this feed that fall within `timeframe`, in chronological order.
        """
        pass
