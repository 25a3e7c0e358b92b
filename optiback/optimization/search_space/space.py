"""
Search spaces: the sets of Params an optimizer evaluates.
"""

import abc
import itertools
import math
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Union

import numpy as np
from pydantic import ValidationError

from optiback.common.config import Config
from optiback.common.errors import ConfigurationError
from utils.logger import get_logger
from .parameter import Parameter, Params

logger = get_logger(__name__)

Values = Union[Iterable[Any], np.ndarray]


class SearchSpace(abc.ABC):
    """
    Produces the Params to evaluate. Iterating a search space is lazy and can be repeated; every
    iteration yields the same logical space.
    """

    def __init__(self):
        self.parameters: Dict[str, Parameter] = {}

    def _register(self, parameter: Parameter):
        if parameter.name in self.parameters:
            logger.error(f"Parameter '{parameter.name}' already exists in search space")
            raise ConfigurationError(f"Parameter '{parameter.name}' already exists in search space")
        self.parameters[parameter.name] = parameter

    @staticmethod
    def _create(name: str, **kwargs) -> Parameter:
        try:
            return Parameter(name=name, **kwargs)
        except ValidationError as e:
            logger.error(f"Invalid parameter '{name}': {e}")
            raise ConfigurationError(f"Invalid parameter '{name}': {e}") from e

    def get_parameter_names(self) -> List[str]:
        """Names of all parameters, in the order they were added."""
        return list(self.parameters.keys())

    @abc.abstractmethod
    def __iter__(self) -> Iterator[Params]:
        pass

    @abc.abstractmethod
    def __len__(self) -> int:
        """Number of Params produced by one iteration."""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}({', '.join(self.parameters)})"


class EmptySearchSpace(SearchSpace):
    """
    Search space for runs without hyperparameters. Produces a single Params without entries.
    """

    def __iter__(self) -> Iterator[Params]:
        yield Params()

    def __len__(self) -> int:
        return 1


class GridSearch(SearchSpace):
    """
    Exhaustive search over the cross product of all parameter values.

    Params are produced in nested loop order, the last added parameter varies fastest.

    Example:
        space = GridSearch()
        space.add("fast", range(3, 16))
        space.add("slow", [20, 30, 50])
        space.add("noise", lambda: Config.random.normal(), samples=10)
    """

    def __init__(self):
        super().__init__()
        self._grid: Dict[str, List[Any]] = {}

    def add(self, name: str, values: Union[Values, Callable[[], Any]], samples: Optional[int] = None) -> "GridSearch":
        """
        Add a parameter.

        Args:
            name: Name of the parameter.
            values: The values (a list, range or numpy array), or a function generating values.
            samples: Required with a function: how many times to call it. The generated values are
                then used as a fixed list.
        """
        if callable(values):
            if samples is None or samples < 1:
                logger.error(f"Parameter '{name}': a generator requires a positive number of samples, found {samples}")
                raise ConfigurationError(f"Parameter '{name}': a generator requires a positive number of samples")
            parameter = self._create(name, generator=values)
        else:
            parameter = self._create(name, values=values)

        self._register(parameter)
        self._grid[name] = parameter.materialize(samples)
        return self

    def __iter__(self) -> Iterator[Params]:
        names = list(self._grid.keys())
        for combo in itertools.product(*self._grid.values()):
            yield Params(dict(zip(names, combo)))

    def __len__(self) -> int:
        return math.prod(len(values) for values in self._grid.values())


class RandomSearch(SearchSpace):
    """
    Random search: every trial samples each parameter independently.

    Values from a list are drawn uniformly, generators are called once per trial.

    Args:
        size: Number of trials.
        seed: Random seed for reproducible trials. Without a seed the process wide random source
            (Config.random) is used, so repeated iterations produce different trials.

    Example:
        space = RandomSearch(100, seed=42)
        space.add("fast", range(3, 16))
        space.add("threshold", lambda: Config.random.uniform(0.01, 0.1))
    """

    def __init__(self, size: int, seed: Optional[int] = None):
        super().__init__()
        if size < 1:
            logger.error(f"RandomSearch requires a positive size, found {size}")
            raise ConfigurationError(f"RandomSearch requires a positive size, found {size}")
        self.size = size
        self.seed = seed

    def add(self, name: str, values: Union[Values, Callable[[], Any]]) -> "RandomSearch":
        """
        Add a parameter.

        Args:
            name: Name of the parameter.
            values: The values to choose from (a list, range or numpy array), or a function that is
                called once per trial.
        """
        if callable(values):
            parameter = self._create(name, generator=values)
        else:
            parameter = self._create(name, values=values)
        self._register(parameter)
        return self

    def __iter__(self) -> Iterator[Params]:
        rng = np.random.RandomState(self.seed) if self.seed is not None else Config.random
        parameters = list(self.parameters.values())
        for _ in range(self.size):
            yield Params({p.name: p.sample(rng) for p in parameters})

    def __len__(self) -> int:
        return self.size
