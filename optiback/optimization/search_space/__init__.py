from .parameter import Parameter, Params
from .space import EmptySearchSpace, GridSearch, RandomSearch, SearchSpace

__all__ = [
    'Parameter',
    'Params',
    'SearchSpace',
    'EmptySearchSpace',
    'GridSearch',
    'RandomSearch'
]
