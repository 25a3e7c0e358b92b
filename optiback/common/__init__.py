from .asset import Asset
from .config import Config
from .errors import ConfigurationError, MissingParameterError
from .parallel import ParallelJobs
from .size import Size
from .timeframe import Timeframe
from .timespan import TimeSpan

__all__ = [
    'Asset',
    'Config',
    'ConfigurationError',
    'MissingParameterError',
    'ParallelJobs',
    'Size',
    'Timeframe',
    'TimeSpan'
]
