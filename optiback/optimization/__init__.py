from .optimizer import Optimizer
from .results import RunResult, best, clean, correlation, summary, to_dataframe
from .score import MetricScore, Score
from .search_space import EmptySearchSpace, GridSearch, Parameter, Params, RandomSearch, SearchSpace

__all__ = [
    'Optimizer',
    'RunResult',
    'Score',
    'MetricScore',
    'Parameter',
    'Params',
    'SearchSpace',
    'EmptySearchSpace',
    'GridSearch',
    'RandomSearch',
    'best',
    'clean',
    'correlation',
    'summary',
    'to_dataframe'
]
