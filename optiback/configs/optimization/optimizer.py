from typing import Literal, Optional

from pydantic import Field

from ..base import BaseConfig


class OptimizerConfig(BaseConfig):
    """
    Configuration for optimization runs.

    Attributes:
        max_workers (int, optional): Number of training runs executed concurrently. None runs them on
            the shared worker pool, which has one worker per CPU.
        sampling_policy (Literal): How Monte Carlo windows are drawn. 'uniform' draws start times
            uniformly, so windows may overlap. 'non_overlapping' draws distinct windows from a split
            of the feed timeframe.
        sampling_resolution (str): pandas frequency the sampled window starts are floored to.
        seed (int, optional): Seed for the Monte Carlo window sampling. None uses the process wide
            random source.
    """
    max_workers: Optional[int] = Field(None, gt=0, description="Concurrent training runs")
    sampling_policy: Literal['uniform', 'non_overlapping'] = Field('uniform', description="Monte Carlo window sampling")
    sampling_resolution: str = Field("D", min_length=1, description="Resolution of sampled window starts")
    seed: Optional[int] = Field(None, ge=0, description="Seed for window sampling")
