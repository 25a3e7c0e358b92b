"""
Parameter definitions for optimization search spaces, and the Params they produce.
"""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, List, Optional

import numpy as np
from pydantic import BaseModel, field_validator, model_validator

from optiback.common.errors import MissingParameterError


class Parameter(BaseModel):
    """
    Definition of a single dimension in a search space.

    A parameter either has a fixed list of `values`, or a `generator` that is called to produce a new
    value every time the parameter is sampled.

    Examples:
        # Fixed values
        Parameter(name="signal_type", values=["sma", "ema", "rsi"])

        # Values from a range
        Parameter(name="lookback_period", values=range(5, 51))

        # Generated values
        Parameter(name="threshold", generator=lambda: Config.random.uniform(0.01, 0.1))
    """

    name: str
    values: Optional[List[Any]] = None
    generator: Optional[Callable[[], Any]] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if not v:
            raise ValueError("Parameter name cannot be empty")
        return v

    @field_validator('values', mode='before')
    @classmethod
    def validate_values(cls, v):
        """Accept any iterable (list, range, numpy array) and validate it is not empty."""
        if v is None:
            return v
        if isinstance(v, np.ndarray):
            v = v.tolist()
        elif isinstance(v, (str, bytes)):
            raise ValueError("Values must be a collection, not a single string")
        else:
            v = list(v)
        if len(v) == 0:
            raise ValueError("Values list cannot be empty")
        return v

    @model_validator(mode='after')
    def validate_parameter(self):
        if (self.values is None) == (self.generator is None):
            raise ValueError(f"Parameter '{self.name}' requires either values or a generator")
        return self

    def sample(self, random_state: Optional[np.random.RandomState] = None) -> Any:
        """
        Draw a value: a uniformly chosen element of `values`, or the next value of the generator.
        """
        if self.generator is not None:
            return self.generator()
        rng = random_state or np.random.RandomState()
        return self.values[rng.randint(len(self.values))]

    def materialize(self, samples: Optional[int] = None) -> List[Any]:
        """
        The values of this parameter as a list. A generator is called exactly `samples` times.
        """
        if self.values is not None:
            return list(self.values)
        if samples is None or samples < 1:
            raise ValueError(f"Parameter '{self.name}' needs a positive number of samples, found {samples}")
        return [self.generator() for _ in range(samples)]

    class Config:
        arbitrary_types_allowed = True
        frozen = True


class Params(Mapping):
    """
    Immutable set of parameter values for a single trial.

    Reading a parameter that isn't present raises a MissingParameterError.

    Example:
        params = Params({"fast": 12, "slow": 26})
        params.get_int("fast")   # 12
        params["slow"]           # 26
    """

    __slots__ = ("_values",)

    def __init__(self, values: Optional[Dict[str, Any]] = None):
        self._values = MappingProxyType(dict(values or {}))

    def __getitem__(self, name: str) -> Any:
        try:
            return self._values[name]
        except KeyError:
            raise MissingParameterError(name) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def get_int(self, name: str) -> int:
        return int(self[name])

    def get_float(self, name: str) -> float:
        return float(self[name])

    def get_str(self, name: str) -> str:
        return str(self[name])

    def get_bool(self, name: str) -> bool:
        return bool(self[name])

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._values)

    def __eq__(self, other) -> bool:
        if isinstance(other, Params):
            return dict(self._values) == dict(other._values)
        if isinstance(other, Mapping):
            return dict(self._values) == dict(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(tuple(sorted((k, repr(v)) for k, v in self._values.items())))

    def __repr__(self) -> str:
        items = ", ".join(f"{k}={v!r}" for k, v in self._values.items())
        return f"Params({items})"
