from .base import Signal, Strategy
from .combined import CombinedStrategy
from .ema import EMAStrategy
from .historic import HistoricPriceStrategy

__all__ = [
    'Signal',
    'Strategy',
    'CombinedStrategy',
    'EMAStrategy',
    'HistoricPriceStrategy'
]
