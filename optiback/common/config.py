from typing import Optional

import numpy as np


class Config:
    """
    Process wide settings. `Config.random` is the random source used when no explicit random state
    is passed, for example by RandomSearch or Timeframe.sample. Reseed it with `Config.seed(...)` to
    make a whole optimization reproducible.
    """

    random: np.random.RandomState = np.random.RandomState()

    @classmethod
    def seed(cls, seed: Optional[int]) -> None:
        cls.random = np.random.RandomState(seed)
