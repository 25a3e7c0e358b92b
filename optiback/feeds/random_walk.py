from typing import Optional

import numpy as np
import pandas as pd
from pydantic import ValidationError

from optiback.common.asset import Asset
from optiback.common.timespan import UTC, TimeSpan
from optiback.configs.feeds.random_walk import RandomWalkConfig
from optiback.feeds.historic import HistoricFeed
from utils.logger import get_logger

logger = get_logger(__name__)


class RandomWalkFeed(HistoricFeed):
    """
    Feed with simulated prices. Every asset follows its own geometric Brownian motion path, simulated
    at `precision_factor` steps per bar and resampled to OHLC bars of `output_freq`.
    """

    def __init__(self, config: RandomWalkConfig):
        self.config = config
        rng = np.random.RandomState(config.seed)
        if config.seed is not None:
            logger.info(f"Using random seed: {config.seed}")

        data = {Asset(f"ASSET{i}"): self._simulate(rng) for i in range(config.n_assets)}
        super().__init__(data)

    def _simulate(self, rng: np.random.RandomState) -> pd.DataFrame:
        base_freq_seconds = pd.to_timedelta(self.config.output_freq).total_seconds() / self.config.precision_factor
        base_freq = f'{int(base_freq_seconds)}s'

        dates = pd.date_range(self.config.start_date, self.config.end_date, freq=base_freq)
        n = len(dates)
        dt = base_freq_seconds / (365 * 24 * 60 * 60)

        dW = rng.normal(loc=0, scale=np.sqrt(dt), size=n)
        log_returns = (self.config.mu - 0.5 * self.config.sigma**2) * dt + self.config.sigma * dW
        log_price = np.log(self.config.start_price) + np.cumsum(log_returns)
        prices = np.exp(log_price)

        df = pd.DataFrame({"timestamp": dates, "close": prices})

        df_ohlc = df.resample(self.config.output_freq, on="timestamp").agg(
            open=('close', 'first'),
            high=('close', 'max'),
            low=('close', 'min'),
            close=('close', 'last')
        ).dropna()

        df_ohlc.reset_index(inplace=True)
        return df_ohlc

    @classmethod
    def last_years(cls, years: int = 1, n_assets: int = 1, seed: Optional[int] = None, **kwargs) -> "RandomWalkFeed":
        """Feed with daily prices covering the last `years` years up to today"""
        end = pd.Timestamp.now(tz=UTC).normalize()
        start = TimeSpan(years=years).subtract_from(end)
        return random_walk_feed(
            start_date=str(start.date()),
            end_date=str(end.date()),
            n_assets=n_assets,
            seed=seed,
            **kwargs
        )


def random_walk_feed(**kwargs) -> RandomWalkFeed:
    """
    User-facing function to create a RandomWalkFeed.

    Accepts the fields of RandomWalkConfig as keyword arguments, for example
    `random_walk_feed(start_date="2020-01-01", end_date="2022-01-01", n_assets=3, seed=42)`.

    Raises:
        pydantic.ValidationError: If any of the parameters fail validation.
    """
    try:
        config = RandomWalkConfig(**kwargs)
        return RandomWalkFeed(config)
    except ValidationError as e:
        logger.error(f"Configuration validation error: {e}", exc_info=True)
        raise
