from pydantic import Field

from ..base import BaseConfig


class FlexPolicyConfig(BaseConfig):
    """
    Configuration for the FlexPolicy.

    Attributes:
        order_percentage (float): Fraction of the account equity allocated to a new position.
        shorting (bool): Whether sell signals may open short positions.
        fractions (int): Number of decimals allowed in order sizes, 0 for whole units only.
        min_price (float): Assets priced below this are ignored.
        enable_metrics (bool): Whether the policy records the number of signals and orders per step.
    """
    order_percentage: float = Field(0.01, gt=0, le=1.0, description="Equity fraction per new position")
    shorting: bool = Field(False, description="Whether sell signals can open short positions")
    fractions: int = Field(0, ge=0, le=8, description="Decimals allowed in order sizes")
    min_price: float = Field(0.0, ge=0, description="Ignore assets priced below this")
    enable_metrics: bool = Field(False, description="Record policy metrics")
