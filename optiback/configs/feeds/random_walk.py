from typing import Any, Dict, Optional

import pandas as pd
from pydantic import Field, model_validator

from ..base import BaseConfig


class RandomWalkConfig(BaseConfig):
    """
    Configuration for a feed of simulated prices following a geometric Brownian motion.

    Attributes:
        n_assets (int): Number of assets to simulate, named ASSET0, ASSET1, ...
        start_price (float): Initial price of every asset.
        mu (float): Annual drift.
        sigma (float): Annual volatility.
        start_date (str): First date of the simulation.
        end_date (str): Last date of the simulation.
        output_freq (str): pandas frequency of the generated price bars.
        precision_factor (int): Number of simulation steps within one price bar.
        seed (int, optional): Seed for reproducible prices.
    """
    n_assets: int = Field(1, gt=0)
    start_price: float = Field(100.0, gt=0)
    mu: float = 0.05
    sigma: float = Field(0.2, gt=0)
    start_date: str
    end_date: str
    output_freq: str = "1D"
    precision_factor: int = Field(24, gt=0)
    seed: Optional[int] = None

    @model_validator(mode='before')
    @classmethod
    def validate_dates(cls, values: Dict[str, Any]) -> Dict[str, Any]:
        start_date_str = values.get('start_date')
        end_date_str = values.get('end_date')

        if not start_date_str or not end_date_str:
            return values

        try:
            start_date = pd.to_datetime(start_date_str)
            end_date = pd.to_datetime(end_date_str)
        except (ValueError, pd.errors.ParserError) as e:
            raise ValueError(f"Invalid date format: {e}") from e

        if start_date >= end_date:
            raise ValueError('start_date must be before end_date')

        return values
