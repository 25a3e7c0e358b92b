from .combined import CombinedFeed
from .event import Event, PriceBar
from .feed import Feed
from .historic import HistoricFeed
from .random_walk import RandomWalkFeed, random_walk_feed

__all__ = [
    'Event',
    'PriceBar',
    'Feed',
    'CombinedFeed',
    'HistoricFeed',
    'RandomWalkFeed',
    'random_walk_feed'
]
